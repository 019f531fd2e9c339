#!/usr/bin/env python3
"""
Tests for the match unit of work.
"""

import unittest
from unittest.mock import MagicMock, Mock

from sqlalchemy.exc import OperationalError

from core.match_engine.exceptions import StorageTimeout
from database.uow import match_uow, QUERY_CANCELED
from database.repositories import MatchRepository


def operational_error(pgcode):
    return OperationalError("SELECT 1", {}, Mock(pgcode=pgcode))


class TestMatchUow(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.session_factory = MagicMock(return_value=self.session)

    def test_commits_and_closes(self):
        with match_uow(self.session_factory) as uow:
            self.assertIsInstance(uow.matches, MatchRepository)
            self.assertIs(uow.session, self.session)

        self.session.commit.assert_called_once()
        self.session.rollback.assert_not_called()
        self.session.close.assert_called_once()

    def test_rolls_back_on_error(self):
        with self.assertRaises(ValueError):
            with match_uow(self.session_factory):
                raise ValueError("boom")

        self.session.commit.assert_not_called()
        self.session.rollback.assert_called_once()
        self.session.close.assert_called_once()

    def test_applies_statement_timeout(self):
        with match_uow(self.session_factory, statement_timeout_ms=1500):
            pass

        args = self.session.execute.call_args
        self.assertIn("statement_timeout", str(args.args[0]))
        self.assertEqual(args.args[1], {"timeout": "1500"})

    def test_no_timeout_by_default(self):
        with match_uow(self.session_factory):
            pass
        self.session.execute.assert_not_called()

    def test_cancelled_statement_is_storage_timeout(self):
        with self.assertRaises(StorageTimeout) as ctx:
            with match_uow(self.session_factory, statement_timeout_ms=10):
                raise operational_error(QUERY_CANCELED)

        self.assertTrue(ctx.exception.retryable)
        self.session.rollback.assert_called_once()
        self.session.close.assert_called_once()

    def test_other_operational_errors_propagate(self):
        with self.assertRaises(OperationalError):
            with match_uow(self.session_factory):
                raise operational_error('08006')
        self.session.rollback.assert_called_once()


if __name__ == '__main__':
    unittest.main()
