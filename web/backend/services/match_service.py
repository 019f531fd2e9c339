#!/usr/bin/env python3
"""
Match service - translates HTTP payloads into match engine calls.
"""

import logging
from typing import List

from core.match_engine.service import MatchEngine
from database.models import JobMatch
from ..models.responses import MatchSummary, AssessmentResponse
from ..utils import safe_float, safe_datetime_iso, status_value

logger = logging.getLogger(__name__)


def to_match_summary(match: JobMatch) -> MatchSummary:
    return MatchSummary(
        match_id=match.id,
        job_id=match.job_id,
        candidate_user_id=match.candidate_user_id,
        repo_full_name=match.repo_full_name,
        analysis_id=match.analysis_id,
        score=safe_float(match.score),
        status=status_value(match.status),
        rationale=match.rationale,
        created_at=safe_datetime_iso(match.created_at),
        updated_at=safe_datetime_iso(match.updated_at),
    )


class MatchService:
    """Service for job match endpoints."""

    def __init__(self, engine: MatchEngine):
        self.engine = engine

    def upsert_match(
        self,
        job_id: int,
        candidate_user_id: str,
        analysis_id: int,
        initial_status: str
    ) -> MatchSummary:
        analysis = self.engine.get_analysis(analysis_id, candidate_user_id)
        match = self.engine.upsert_match(
            job_id=job_id,
            candidate_user_id=candidate_user_id,
            repo_analysis=analysis,
            initial_status=initial_status,
        )
        return to_match_summary(match)

    def compute_for_analysis(self, analysis_id: int, candidate_user_id: str) -> List[MatchSummary]:
        matches = self.engine.compute_for_analysis(analysis_id, candidate_user_id)
        return [to_match_summary(m) for m in matches]

    def start_assessment(self, candidate_user_id: str, repo_full_name: str) -> AssessmentResponse:
        updated = self.engine.start_assessment(candidate_user_id, repo_full_name)
        return AssessmentResponse(
            success=True,
            candidate_user_id=candidate_user_id,
            repo_full_name=repo_full_name,
            updated=updated
        )

    def get_match(self, match_id: int) -> MatchSummary:
        return to_match_summary(self.engine.get_match(match_id))

    def transition_status(self, match_id: int, status: str) -> MatchSummary:
        return to_match_summary(self.engine.transition_status(match_id, status))

    def list_for_job(self, job_id: int) -> List[MatchSummary]:
        return [to_match_summary(m) for m in self.engine.list_for_job(job_id)]

    def list_for_candidate(self, candidate_user_id: str) -> List[MatchSummary]:
        return [to_match_summary(m) for m in self.engine.list_for_candidate(candidate_user_id)]
