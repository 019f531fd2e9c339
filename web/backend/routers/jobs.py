#!/usr/bin/env python3
"""
Job endpoints - a job's matches and its coding assignment.
"""

import logging
from fastapi import APIRouter, Depends

from core.match_engine.assignments import AssignmentService
from ..dependencies import get_match_service, get_assignment_service
from ..services.match_service import MatchService
from ..services.assignment_service import to_assignment_detail, to_claim_detail
from ..models.requests import AssignmentUpsertRequest, ClaimAssignmentRequest
from ..models.responses import MatchesResponse, AssignmentResponse, ClaimResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.get("/{job_id}/matches", response_model=MatchesResponse)
def list_job_matches(
    job_id: int,
    service: MatchService = Depends(get_match_service)
):
    """Newest first."""
    matches = service.list_for_job(job_id)
    return MatchesResponse(success=True, count=len(matches), matches=matches)


@router.put("/{job_id}/assignment", response_model=AssignmentResponse)
def upsert_assignment(
    job_id: int,
    request: AssignmentUpsertRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """
    Create or replace the job's assignment template.

    A job holds at most one assignment; a second PUT replaces the first.
    """
    assignment = service.upsert_for_job(job_id, request.repo_template_url, request.instructions)
    return AssignmentResponse(success=True, assignment=to_assignment_detail(assignment))


@router.get("/{job_id}/assignment", response_model=AssignmentResponse)
def get_assignment(
    job_id: int,
    service: AssignmentService = Depends(get_assignment_service)
):
    return AssignmentResponse(success=True, assignment=to_assignment_detail(service.get_for_job(job_id)))


@router.post("/{job_id}/assignment/claims", response_model=ClaimResponse)
def claim_assignment(
    job_id: int,
    request: ClaimAssignmentRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """Claim the job's assignment; claiming twice returns the first claim."""
    claim = service.claim(job_id, request.candidate_user_id, request.repo_url)
    return ClaimResponse(success=True, claim=to_claim_detail(claim))
