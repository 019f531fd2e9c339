#!/usr/bin/env python3
"""
Match endpoints - score, read and review job matches.
"""

import logging
from fastapi import APIRouter, Depends

from ..dependencies import get_match_service
from ..services.match_service import MatchService
from ..models.requests import UpsertMatchRequest, StatusUpdateRequest
from ..models.responses import MatchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.post("", response_model=MatchResponse)
def upsert_match(
    request: UpsertMatchRequest,
    service: MatchService = Depends(get_match_service)
):
    """
    Score an analysis against a job and store the match.

    Repeating the call with the same analysis leaves the stored row as it is;
    a newer analysis of the same repository updates the score in place.
    """
    match = service.upsert_match(
        job_id=request.job_id,
        candidate_user_id=request.candidate_user_id,
        analysis_id=request.analysis_id,
        initial_status=request.initial_status
    )
    return MatchResponse(success=True, match=match)


@router.get("/{match_id}", response_model=MatchResponse)
def get_match(
    match_id: int,
    service: MatchService = Depends(get_match_service)
):
    return MatchResponse(success=True, match=service.get_match(match_id))


@router.post("/{match_id}/status", response_model=MatchResponse)
def update_match_status(
    match_id: int,
    request: StatusUpdateRequest,
    service: MatchService = Depends(get_match_service)
):
    """
    Move a match to another review status.

    Returns 409 when the lifecycle does not allow the move.
    """
    match = service.transition_status(match_id, request.status)
    return MatchResponse(success=True, match=match)
