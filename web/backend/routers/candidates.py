#!/usr/bin/env python3
"""
Candidate endpoints - assessments and a candidate's matches.
"""

from fastapi import APIRouter, Depends

from ..dependencies import get_match_service
from ..services.match_service import MatchService
from ..models.requests import StartAssessmentRequest
from ..models.responses import AssessmentResponse, MatchesResponse

router = APIRouter(prefix="/api/candidates", tags=["candidates"])


@router.post("/{candidate_user_id}/assessments", response_model=AssessmentResponse)
def start_assessment(
    candidate_user_id: str,
    request: StartAssessmentRequest,
    service: MatchService = Depends(get_match_service)
):
    """
    Open an in_progress application on every published job for one repository.
    """
    return service.start_assessment(candidate_user_id, request.repo_full_name)


@router.get("/{candidate_user_id}/matches", response_model=MatchesResponse)
def list_candidate_matches(
    candidate_user_id: str,
    service: MatchService = Depends(get_match_service)
):
    """Newest first."""
    matches = service.list_for_candidate(candidate_user_id)
    return MatchesResponse(success=True, count=len(matches), matches=matches)
