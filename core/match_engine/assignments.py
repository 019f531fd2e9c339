#!/usr/bin/env python3
"""
Assignment Service - one coding assignment template per job, claimed by candidates.
"""

import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from core.config_loader import MatchingConfig
from core.match_engine.exceptions import InvalidInput, JobNotPublished, NotFound
from database.models import Assignment, CandidateAssignment
from database.uow import match_uow

logger = logging.getLogger(__name__)


class AssignmentService:
    """Upsert-by-job writes for assignment templates and idempotent claims."""

    def __init__(self, session_factory: sessionmaker, config: Optional[MatchingConfig] = None):
        self.session_factory = session_factory
        self.config = config or MatchingConfig()

    def _uow(self):
        return match_uow(self.session_factory, self.config.statement_timeout_ms)

    def upsert_for_job(
        self,
        job_id: int,
        repo_template_url: str,
        instructions: Optional[str] = None
    ) -> Assignment:
        """
        Create or replace the assignment of a job.

        A second write for the same job replaces the first; the unique index on
        assignment.job_id makes concurrent writers converge on one row.
        """
        if not isinstance(repo_template_url, str) or not repo_template_url.strip():
            raise InvalidInput("repo_template_url must be a non-empty string")

        with self._uow() as uow:
            if uow.jobs.get_by_id(job_id) is None:
                raise NotFound(f"Job {job_id} not found")
            assignment = uow.assignments.upsert_for_job(job_id, repo_template_url, instructions)

        logger.info(f"Saved assignment {assignment.id} for job {job_id}")
        return assignment

    def get_for_job(self, job_id: int) -> Assignment:
        with self._uow() as uow:
            assignment = uow.assignments.get_for_job(job_id)
            if assignment is None:
                raise NotFound(f"Job {job_id} has no assignment")
            return assignment

    def claim(
        self,
        job_id: int,
        candidate_user_id: str,
        repo_url: Optional[str] = None
    ) -> CandidateAssignment:
        """Claim the job's assignment. Claiming again returns the existing claim."""
        if not isinstance(candidate_user_id, str) or not candidate_user_id.strip():
            raise InvalidInput("candidate_user_id must be a non-empty string")

        with self._uow() as uow:
            job = uow.jobs.get_by_id(job_id)
            if job is None:
                raise NotFound(f"Job {job_id} not found")
            if not job.is_published:
                raise JobNotPublished(f"Job {job_id} is not published")
            assignment = uow.assignments.get_for_job(job_id)
            if assignment is None:
                raise NotFound(f"Job {job_id} has no assignment")
            claimed = uow.assignments.claim(assignment, candidate_user_id, repo_url)

        logger.info(f"Candidate {candidate_user_id} holds assignment {assignment.id} (job {job_id})")
        return claimed
