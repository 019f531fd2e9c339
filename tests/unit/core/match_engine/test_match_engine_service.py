#!/usr/bin/env python3
"""
Unit tests for MatchEngine with a mocked unit of work.
"""

import contextlib
import unittest
from unittest.mock import MagicMock, Mock, patch

from sqlalchemy.exc import IntegrityError

from core.config_loader import MatchingConfig
from core.match_engine.exceptions import (
    ConflictNotResolved,
    InvalidInput,
    InvalidTransition,
    JobNotPublished,
    NotFound,
)
from core.match_engine.lifecycle import MatchStatus
from core.match_engine.service import MatchEngine


def make_job(job_id=1, is_published=True, required_stacks=None):
    return Mock(
        id=job_id,
        is_published=is_published,
        required_stacks=required_stacks if required_stacks is not None else {"Go": 0.6, "SQL": 0.4},
    )


def make_analysis(analysis_id=5, candidate_user_id="user_1", repo_full_name="octocat/hello", skills=None):
    return Mock(
        id=analysis_id,
        candidate_user_id=candidate_user_id,
        repo_full_name=repo_full_name,
        skills=skills if skills is not None else {"Go": 0.9, "SQL": 0.2},
    )


def integrity_error():
    return IntegrityError("INSERT INTO job_match ...", {}, Exception("duplicate key value"))


class MatchEngineTestCase(unittest.TestCase):

    def setUp(self):
        self.uow = MagicMock()
        self.uow.jobs.get_by_id.return_value = make_job()
        self.uow.matches.upsert.return_value = Mock(id=10, status=MatchStatus.NOT_STARTED)

        @contextlib.contextmanager
        def fake_uow(*args, **kwargs):
            yield self.uow

        patcher = patch('core.match_engine.service.match_uow', side_effect=fake_uow)
        self.mock_uow = patcher.start()
        self.addCleanup(patcher.stop)

        self.engine = MatchEngine(session_factory=MagicMock(), config=MatchingConfig())


class TestUpsertMatch(MatchEngineTestCase):

    def test_scores_and_upserts(self):
        match = self.engine.upsert_match(1, "user_1", make_analysis())

        self.assertEqual(match.id, 10)
        kwargs = self.uow.matches.upsert.call_args.kwargs
        self.assertEqual(kwargs['job_id'], 1)
        self.assertEqual(kwargs['candidate_user_id'], "user_1")
        self.assertEqual(kwargs['repo_full_name'], "octocat/hello")
        self.assertEqual(kwargs['analysis_id'], 5)
        self.assertAlmostEqual(kwargs['score'], 62.0)
        self.assertEqual(kwargs['initial_status'], MatchStatus.NOT_STARTED)
        self.assertEqual(kwargs['rationale']['version'], "match-rationale-v1")

    def test_statement_timeout_is_passed_to_uow(self):
        self.engine.upsert_match(1, "user_1", make_analysis())
        self.mock_uow.assert_called_with(self.engine.session_factory, 5000)

    def test_completed_entry_point(self):
        self.engine.upsert_match(1, "user_1", make_analysis(), initial_status="completed")
        kwargs = self.uow.matches.upsert.call_args.kwargs
        self.assertEqual(kwargs['initial_status'], MatchStatus.COMPLETED)

    def test_rejects_review_status_as_initial(self):
        with self.assertRaises(InvalidInput):
            self.engine.upsert_match(1, "user_1", make_analysis(), initial_status=MatchStatus.FLAGGED)
        with self.assertRaises(InvalidInput):
            self.engine.upsert_match(1, "user_1", make_analysis(), initial_status="hired")
        self.uow.matches.upsert.assert_not_called()

    def test_unknown_job(self):
        self.uow.jobs.get_by_id.return_value = None
        with self.assertRaises(NotFound):
            self.engine.upsert_match(99, "user_1", make_analysis())

    def test_unpublished_job_rejected_by_default(self):
        self.uow.jobs.get_by_id.return_value = make_job(is_published=False)
        with self.assertRaises(JobNotPublished) as ctx:
            self.engine.upsert_match(1, "user_1", make_analysis())
        self.assertIsInstance(ctx.exception, InvalidInput)
        self.uow.matches.upsert.assert_not_called()

    def test_unpublished_job_allowed_by_config(self):
        self.engine.config = MatchingConfig(allow_unpublished_jobs=True)
        self.uow.jobs.get_by_id.return_value = make_job(is_published=False)
        self.engine.upsert_match(1, "user_1", make_analysis())
        self.uow.matches.upsert.assert_called_once()

    def test_malformed_skills_write_nothing(self):
        with self.assertRaises(InvalidInput):
            self.engine.upsert_match(1, "user_1", make_analysis(skills={"Go": "expert"}))
        self.uow.matches.upsert.assert_not_called()

    def test_malformed_requirements_write_nothing(self):
        self.uow.jobs.get_by_id.return_value = make_job(required_stacks={"Go": -1})
        with self.assertRaises(InvalidInput):
            self.engine.upsert_match(1, "user_1", make_analysis())
        self.uow.matches.upsert.assert_not_called()

    def test_missing_repo_name(self):
        with self.assertRaises(InvalidInput):
            self.engine.upsert_match(1, "user_1", make_analysis(repo_full_name=""))

    def test_blank_candidate(self):
        with self.assertRaises(InvalidInput):
            self.engine.upsert_match(1, "  ", make_analysis())

    def test_conflict_retried_once(self):
        self.uow.matches.upsert.side_effect = [integrity_error(), Mock(id=11, status=MatchStatus.NOT_STARTED)]

        match = self.engine.upsert_match(1, "user_1", make_analysis())

        self.assertEqual(match.id, 11)
        self.assertEqual(self.uow.matches.upsert.call_count, 2)

    def test_conflict_not_resolved(self):
        self.uow.matches.upsert.side_effect = integrity_error()

        with self.assertRaises(ConflictNotResolved) as ctx:
            self.engine.upsert_match(1, "user_1", make_analysis())

        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(self.uow.matches.upsert.call_count, 2)


class TestComputeForAnalysis(MatchEngineTestCase):

    def test_upserts_completed_for_every_published_job(self):
        self.uow.analyses.get_by_id.return_value = make_analysis()
        self.uow.jobs.list_published.return_value = [make_job(1), make_job(2)]

        matches = self.engine.compute_for_analysis(5, "user_1")

        self.assertEqual(len(matches), 2)
        statuses = {c.kwargs['initial_status'] for c in self.uow.matches.upsert.call_args_list}
        self.assertEqual(statuses, {MatchStatus.COMPLETED})
        self.assertEqual([c.kwargs['job_id'] for c in self.uow.matches.upsert.call_args_list], [1, 2])

    def test_foreign_analysis_is_not_found(self):
        self.uow.analyses.get_by_id.return_value = make_analysis(candidate_user_id="someone_else")
        with self.assertRaises(NotFound):
            self.engine.compute_for_analysis(5, "user_1")
        self.uow.matches.upsert.assert_not_called()

    def test_missing_analysis(self):
        self.uow.analyses.get_by_id.return_value = None
        with self.assertRaises(NotFound):
            self.engine.get_analysis(5, "user_1")


class TestStartAssessment(MatchEngineTestCase):

    def test_counts_touched_rows(self):
        self.uow.jobs.list_published.return_value = [make_job(1), make_job(2), make_job(3)]
        self.uow.matches.start_assessment.side_effect = [True, False, True]

        self.assertEqual(self.engine.start_assessment("user_1", "octocat/hello"), 2)
        self.uow.matches.start_assessment.assert_any_call(2, "user_1", "octocat/hello")

    def test_requires_repo_name(self):
        with self.assertRaises(InvalidInput):
            self.engine.start_assessment("user_1", "")


class TestTransitionStatus(MatchEngineTestCase):

    def test_legal_transition(self):
        match = Mock(id=10, status=MatchStatus.COMPLETED)
        self.uow.matches.get_by_id.return_value = match

        result = self.engine.transition_status(10, "proceed")

        self.assertIs(result, match)
        self.uow.matches.get_by_id.assert_called_once_with(10, for_update=True)
        self.uow.matches.set_status.assert_called_once_with(match, MatchStatus.PROCEED)

    def test_illegal_transition(self):
        self.uow.matches.get_by_id.return_value = Mock(id=10, status=MatchStatus.REJECTED)

        with self.assertRaises(InvalidTransition) as ctx:
            self.engine.transition_status(10, MatchStatus.PROCEED)

        self.assertEqual(ctx.exception.current_status, 'rejected')
        self.assertEqual(ctx.exception.next_status, 'proceed')
        self.assertFalse(ctx.exception.retryable)
        self.uow.matches.set_status.assert_not_called()

    def test_unknown_match(self):
        self.uow.matches.get_by_id.return_value = None
        with self.assertRaises(NotFound):
            self.engine.transition_status(404, "proceed")

    def test_unknown_status(self):
        with self.assertRaises(InvalidInput):
            self.engine.transition_status(10, "hired")


if __name__ == '__main__':
    unittest.main()
