#!/usr/bin/env python3
"""
Integration tests for the match engine against PostgreSQL.

The test database is managed by the test_database fixture in conftest.py.

Run with:
  python -m pytest tests/integration/test_match_engine_db.py -v
Or with an external database:
  TEST_DATABASE_URL=postgresql://... python -m pytest tests/integration -m db -v
"""

import unittest
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, text

from core.config_loader import MatchingConfig
from core.match_engine.exceptions import InvalidTransition, JobNotPublished, NotFound
from core.match_engine.lifecycle import MatchStatus
from core.match_engine.service import MatchEngine
from database.database import build_session_factory, db_session_scope
from database.models import Base
from database.repositories import JobRepository, AnalysisRepository, MatchRepository

ALL_TABLES = "candidate_assignment, assignment, job_match, repo_analysis, job"


@pytest.mark.db
class TestMatchEngineDatabase(unittest.TestCase):
    """DATABASE TESTS - upsert, lifecycle and reads on real rows."""

    @pytest.fixture(scope="class")
    def db_engine(self, test_database):
        engine = create_engine(test_database, pool_size=10, max_overflow=10)
        Base.metadata.drop_all(engine)
        Base.metadata.create_all(engine)
        yield engine
        Base.metadata.drop_all(engine)
        engine.dispose()

    @pytest.fixture(autouse=True)
    def setup(self, db_engine):
        self.db_engine = db_engine
        self.SessionLocal = build_session_factory(db_engine)
        with db_engine.begin() as conn:
            conn.execute(text(f"TRUNCATE {ALL_TABLES} RESTART IDENTITY CASCADE"))
        self.engine = MatchEngine(self.SessionLocal, MatchingConfig(statement_timeout_ms=5000))
        yield

    def _create_job(self, required_stacks=None, is_published=True, title="Backend Engineer"):
        with db_session_scope(self.SessionLocal) as session:
            job = JobRepository(session).create_job(
                hr_user_id="hr_1",
                title=title,
                required_stacks=required_stacks if required_stacks is not None else {"Go": 0.6, "SQL": 0.4},
                is_published=is_published,
            )
            return job.id

    def _create_analysis(self, skills, candidate="user_1", repo="octocat/hello"):
        with db_session_scope(self.SessionLocal) as session:
            return AnalysisRepository(session).create_analysis(candidate, repo, skills)

    def _count(self, job_id, candidate="user_1", repo="octocat/hello"):
        with db_session_scope(self.SessionLocal) as session:
            return MatchRepository(session).count_for_key(job_id, candidate, repo)

    def test_end_to_end_rescore_updates_single_row(self):
        job_id = self._create_job()
        first = self._create_analysis({"Go": 0.9, "SQL": 0.2})

        match = self.engine.upsert_match(job_id, "user_1", first)
        self.assertAlmostEqual(float(match.score), 62.0)
        self.assertEqual(match.status, MatchStatus.NOT_STARTED)
        self.assertEqual(match.analysis_id, first.id)
        self.assertEqual(match.rationale['version'], "match-rationale-v1")

        revised = self._create_analysis({"Go": 1.0, "SQL": 1.0})
        updated = self.engine.upsert_match(job_id, "user_1", revised)

        self.assertEqual(updated.id, match.id)
        self.assertAlmostEqual(float(updated.score), 100.0)
        self.assertEqual(updated.analysis_id, revised.id)
        self.assertEqual(self._count(job_id), 1)

    def test_upsert_is_idempotent(self):
        job_id = self._create_job()
        analysis = self._create_analysis({"Go": 0.5})

        first = self.engine.upsert_match(job_id, "user_1", analysis)
        second = self.engine.upsert_match(job_id, "user_1", analysis)

        self.assertEqual(first.id, second.id)
        self.assertEqual(first.score, second.score)
        self.assertEqual(first.updated_at, second.updated_at)
        self.assertEqual(self._count(job_id), 1)

    def test_one_row_per_repository(self):
        job_id = self._create_job()
        self.engine.upsert_match(job_id, "user_1", self._create_analysis({"Go": 1.0}, repo="octocat/one"))
        self.engine.upsert_match(job_id, "user_1", self._create_analysis({"SQL": 1.0}, repo="octocat/two"))

        matches = self.engine.list_for_job(job_id)
        self.assertEqual(sorted(m.repo_full_name for m in matches), ["octocat/one", "octocat/two"])

    def test_concurrent_upserts_leave_one_row(self):
        job_id = self._create_job()
        analyses = [self._create_analysis({"Go": 0.1 * i, "SQL": 0.5}) for i in range(1, 9)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda a: self.engine.upsert_match(job_id, "user_1", a), analyses))

        self.assertEqual(len({m.id for m in results}), 1)
        self.assertEqual(self._count(job_id), 1)

    def test_completed_entry_point_advances_only_pre_review_rows(self):
        job_id = self._create_job()
        analysis = self._create_analysis({"Go": 0.9, "SQL": 0.2})

        match = self.engine.upsert_match(job_id, "user_1", analysis)
        advanced = self.engine.upsert_match(job_id, "user_1", analysis, initial_status=MatchStatus.COMPLETED)
        self.assertEqual(advanced.id, match.id)
        self.assertEqual(advanced.status, MatchStatus.COMPLETED)

        self.engine.transition_status(match.id, MatchStatus.FLAGGED)
        again = self.engine.upsert_match(
            job_id, "user_1", self._create_analysis({"Go": 1.0, "SQL": 1.0}), initial_status="completed"
        )
        self.assertEqual(again.status, MatchStatus.FLAGGED)
        self.assertAlmostEqual(float(again.score), 100.0)

    def test_unpublished_job_rejected(self):
        job_id = self._create_job(is_published=False)
        with self.assertRaises(JobNotPublished):
            self.engine.upsert_match(job_id, "user_1", self._create_analysis({"Go": 1.0}))
        self.assertEqual(self.engine.list_for_job(job_id), [])

    def test_transitions_on_real_row(self):
        job_id = self._create_job()
        match = self.engine.upsert_match(job_id, "user_1", self._create_analysis({"Go": 1.0}))

        for status in ("in_progress", "completed", "waitlisted", "proceed"):
            match = self.engine.transition_status(match.id, status)
            self.assertEqual(match.status, MatchStatus(status))
            self.assertIsNotNone(match.updated_at)

        with self.assertRaises(InvalidTransition):
            self.engine.transition_status(match.id, "rejected")
        self.assertEqual(self.engine.get_match(match.id).status, MatchStatus.PROCEED)

    def test_transition_unknown_match(self):
        with self.assertRaises(NotFound):
            self.engine.transition_status(999999, "expired")

    def test_lists_newest_first(self):
        job_id = self._create_job()
        created = [
            self.engine.upsert_match(job_id, f"user_{i}", self._create_analysis({"Go": 1.0}, candidate=f"user_{i}"))
            for i in range(3)
        ]

        listed = self.engine.list_for_job(job_id)
        self.assertEqual([m.id for m in listed], [m.id for m in reversed(created)])

        other_job = self._create_job(title="Data Engineer")
        self.engine.upsert_match(other_job, "user_0", self._create_analysis({"SQL": 1.0}, candidate="user_0"))
        self.assertEqual(len(self.engine.list_for_candidate("user_0")), 2)
        self.assertEqual(self.engine.list_for_candidate("nobody"), [])

    def test_compute_for_analysis(self):
        published = [self._create_job(), self._create_job({"SQL": 1.0}, title="DBA")]
        self._create_job(is_published=False, title="Draft")
        analysis = self._create_analysis({"Go": 0.9, "SQL": 0.2})

        matches = self.engine.compute_for_analysis(analysis.id, "user_1")

        self.assertEqual(sorted(m.job_id for m in matches), sorted(published))
        self.assertTrue(all(m.status == MatchStatus.COMPLETED for m in matches))

        with self.assertRaises(NotFound):
            self.engine.compute_for_analysis(analysis.id, "user_2")

    def test_start_assessment(self):
        first_job = self._create_job()
        second_job = self._create_job(title="Platform Engineer")
        analysis = self._create_analysis({"Go": 1.0})
        # Already reviewed on the second job
        reviewed = self.engine.upsert_match(second_job, "user_1", analysis, initial_status="completed")

        touched = self.engine.start_assessment("user_1", "octocat/hello")

        self.assertEqual(touched, 1)
        rows = {m.job_id: m for m in self.engine.list_for_candidate("user_1")}
        self.assertEqual(rows[first_job].status, MatchStatus.IN_PROGRESS)
        self.assertAlmostEqual(float(rows[first_job].score), 0.0)
        self.assertIsNone(rows[first_job].analysis_id)
        self.assertEqual(rows[second_job].status, MatchStatus.COMPLETED)
        self.assertEqual(rows[second_job].id, reviewed.id)


if __name__ == '__main__':
    unittest.main()
