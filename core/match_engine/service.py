#!/usr/bin/env python3
"""
Match Engine Service - live-path operations on job matches.

Scores (job, candidate, repository analysis) triples, persists them with an
atomic upsert keyed by (job_id, candidate_user_id, repo_full_name) and moves
matches through the review lifecycle. Every operation opens its own unit of
work from the session factory it was given; no state is shared between calls.
"""

import logging
from typing import Any, List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from tenacity import retry, stop_after_attempt, retry_if_exception_type, before_sleep_log

from core.config_loader import MatchingConfig
from core.scorer import explain_match
from core.match_engine.exceptions import (
    ConflictNotResolved,
    InvalidInput,
    InvalidTransition,
    JobNotPublished,
    NotFound,
)
from core.match_engine.lifecycle import (
    INITIAL_STATUSES,
    MatchStatus,
    can_transition,
    coerce_status,
)
from core.match_engine.validation import validate_vector
from database.models import Job, JobMatch, RepoAnalysis
from database.uow import MatchUnitOfWork, match_uow

logger = logging.getLogger(__name__)


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{name} must be a non-empty string, got {value!r}")
    return value


def _parse_status(value: Union[str, MatchStatus]) -> MatchStatus:
    try:
        return coerce_status(value)
    except ValueError:
        raise InvalidInput(f"Unknown match status: {value!r}")


class MatchEngine:
    """Upsert, transition and read operations for job matches."""

    def __init__(self, session_factory: sessionmaker, config: Optional[MatchingConfig] = None):
        self.session_factory = session_factory
        self.config = config or MatchingConfig()

    def _uow(self):
        return match_uow(self.session_factory, self.config.statement_timeout_ms)

    def _load_scorable_job(self, uow: MatchUnitOfWork, job_id: int) -> Job:
        job = uow.jobs.get_by_id(job_id)
        if job is None:
            raise NotFound(f"Job {job_id} not found")
        if not job.is_published and not self.config.allow_unpublished_jobs:
            raise JobNotPublished(f"Job {job_id} is not published")
        return job

    def _upsert(
        self,
        uow: MatchUnitOfWork,
        job: Job,
        candidate_user_id: str,
        repo_analysis: Any,
        initial_status: MatchStatus
    ) -> JobMatch:
        repo_full_name = _require_text(getattr(repo_analysis, 'repo_full_name', None), 'repo_full_name')
        requirements = validate_vector(job.required_stacks, 'required_stacks')
        skills = validate_vector(getattr(repo_analysis, 'skills', None), 'skills')

        result = explain_match(requirements, skills)
        score = round(result.score, 2)

        @retry(
            stop=stop_after_attempt(self.config.upsert_attempts),
            retry=retry_if_exception_type(IntegrityError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )
        def attempt() -> JobMatch:
            # Savepoint so a failed attempt leaves the outer transaction usable
            with uow.session.begin_nested():
                return uow.matches.upsert(
                    job_id=job.id,
                    candidate_user_id=candidate_user_id,
                    repo_full_name=repo_full_name,
                    analysis_id=getattr(repo_analysis, 'id', None),
                    score=score,
                    rationale=result.to_rationale(),
                    initial_status=initial_status,
                )

        try:
            match = attempt()
        except IntegrityError as e:
            logger.error(
                f"Upsert conflict not resolved for job={job.id} candidate={candidate_user_id} "
                f"repo={repo_full_name}: {e.orig}"
            )
            raise ConflictNotResolved(
                f"Could not upsert match for job {job.id}, repo {repo_full_name}"
            ) from e

        logger.info(
            f"Upserted match {match.id} job={job.id} candidate={candidate_user_id} "
            f"repo={repo_full_name} score={score:.2f} status={match.status.value}"
        )
        return match

    def upsert_match(
        self,
        job_id: int,
        candidate_user_id: str,
        repo_analysis: Any,
        initial_status: Union[str, MatchStatus] = MatchStatus.NOT_STARTED
    ) -> JobMatch:
        """
        Score an analysis against a job and write the match idempotently.

        Args:
            job_id: Job to score against
            candidate_user_id: Candidate who owns the analysis
            repo_analysis: Object exposing id, repo_full_name and skills
                (a RepoAnalysis row or any equivalent)
            initial_status: Status for a newly inserted row, not_started or
                completed (terminal step of an already finished pipeline)

        Returns:
            The single JobMatch row for (job, candidate, repo)

        Raises:
            InvalidInput: Malformed vectors, unknown initial status, or unpublished job
            NotFound: Job does not exist
            ConflictNotResolved: Atomic write failed after retrying
            StorageTimeout: Statement exceeded the configured timeout
        """
        _require_text(candidate_user_id, 'candidate_user_id')
        status = _parse_status(initial_status)
        if status not in INITIAL_STATUSES:
            raise InvalidInput(f"A match cannot be created in status '{status.value}'")

        with self._uow() as uow:
            job = self._load_scorable_job(uow, job_id)
            return self._upsert(uow, job, candidate_user_id, repo_analysis, status)

    def compute_for_analysis(self, analysis_id: int, candidate_user_id: str) -> List[JobMatch]:
        """
        Match one finished analysis against every published job.

        Rows are written with the completed entry point. Raises NotFound when
        the analysis does not exist or belongs to another candidate.
        """
        with self._uow() as uow:
            analysis = uow.analyses.get_by_id(analysis_id)
            if analysis is None or analysis.candidate_user_id != candidate_user_id:
                raise NotFound(f"Analysis {analysis_id} not found")

            matches = [
                self._upsert(uow, job, candidate_user_id, analysis, MatchStatus.COMPLETED)
                for job in uow.jobs.list_published()
            ]

        logger.info(f"Computed {len(matches)} matches for analysis {analysis_id}")
        return matches

    def start_assessment(self, candidate_user_id: str, repo_full_name: str) -> int:
        """
        Open an in_progress application for every published job.

        Existing rows past not_started are left as they are. Returns the number
        of rows inserted or advanced.
        """
        _require_text(candidate_user_id, 'candidate_user_id')
        _require_text(repo_full_name, 'repo_full_name')

        with self._uow() as uow:
            jobs = uow.jobs.list_published()
            touched = sum(
                1 for job in jobs
                if uow.matches.start_assessment(job.id, candidate_user_id, repo_full_name)
            )

        logger.info(
            f"Started assessment for candidate={candidate_user_id} repo={repo_full_name}: "
            f"{touched}/{len(jobs)} jobs updated"
        )
        return touched

    def transition_status(
        self,
        match_id: int,
        next_status: Union[str, MatchStatus]
    ) -> JobMatch:
        """
        Move a match to next_status if the lifecycle allows it.

        Raises:
            NotFound: No match with this id
            InvalidInput: next_status is not a known status
            InvalidTransition: next_status is not reachable from the current status
        """
        target = _parse_status(next_status)

        with self._uow() as uow:
            match = uow.matches.get_by_id(match_id, for_update=True)
            if match is None:
                raise NotFound(f"Match {match_id} not found")

            current = coerce_status(match.status)
            if not can_transition(current, target):
                logger.warning(f"Rejected transition for match {match_id}: {current.value} -> {target.value}")
                raise InvalidTransition(match_id, current.value, target.value)

            uow.matches.set_status(match, target)

        logger.info(f"Match {match_id} moved {current.value} -> {target.value}")
        return match

    def get_analysis(self, analysis_id: int, candidate_user_id: str) -> RepoAnalysis:
        """Load an analysis owned by candidate_user_id; NotFound otherwise."""
        with self._uow() as uow:
            analysis = uow.analyses.get_by_id(analysis_id)
            if analysis is None or analysis.candidate_user_id != candidate_user_id:
                raise NotFound(f"Analysis {analysis_id} not found")
            return analysis

    def get_match(self, match_id: int) -> JobMatch:
        with self._uow() as uow:
            match = uow.matches.get_by_id(match_id)
            if match is None:
                raise NotFound(f"Match {match_id} not found")
            return match

    def list_for_job(self, job_id: int) -> List[JobMatch]:
        with self._uow() as uow:
            return uow.matches.list_for_job(job_id)

    def list_for_candidate(self, candidate_user_id: str) -> List[JobMatch]:
        with self._uow() as uow:
            return uow.matches.list_for_candidate(candidate_user_id)
