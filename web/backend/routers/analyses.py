#!/usr/bin/env python3
"""
Analysis endpoints - match a finished repository analysis against open jobs.
"""

from fastapi import APIRouter, Depends

from ..dependencies import get_match_service
from ..services.match_service import MatchService
from ..models.requests import ComputeMatchesRequest
from ..models.responses import MatchesResponse

router = APIRouter(prefix="/api/analyses", tags=["analyses"])


@router.post("/{analysis_id}/matches", response_model=MatchesResponse)
def compute_matches(
    analysis_id: int,
    request: ComputeMatchesRequest,
    service: MatchService = Depends(get_match_service)
):
    """Upsert a completed match for every published job."""
    matches = service.compute_for_analysis(analysis_id, request.candidate_user_id)
    return MatchesResponse(success=True, count=len(matches), matches=matches)
