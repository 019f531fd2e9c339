#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional


class UpsertMatchRequest(BaseModel):
    """Request to score one analysis against one job and store the match."""
    job_id: int = Field(..., description="Job to score against")
    candidate_user_id: str = Field(..., min_length=1, description="Candidate owning the analysis")
    analysis_id: int = Field(..., description="Repository analysis supplying the skill vector")
    initial_status: str = Field(
        default="not_started",
        description="Status for a new row: not_started or completed"
    )


class ComputeMatchesRequest(BaseModel):
    """Request to match a finished analysis against every published job."""
    candidate_user_id: str = Field(..., min_length=1)


class StartAssessmentRequest(BaseModel):
    """Request to open in_progress applications for a repository."""
    repo_full_name: str = Field(..., min_length=1, description="Repository as owner/repo")


class StatusUpdateRequest(BaseModel):
    """Request to move a match to another review status."""
    status: str = Field(..., description="Target status, e.g. flagged, proceed, rejected")


class AssignmentUpsertRequest(BaseModel):
    """Request to create or replace a job's assignment template."""
    repo_template_url: str = Field(..., min_length=1)
    instructions: Optional[str] = None


class ClaimAssignmentRequest(BaseModel):
    """Request by a candidate to claim a job's assignment."""
    candidate_user_id: str = Field(..., min_length=1)
    repo_url: Optional[str] = None
