#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class MatchSummary(BaseModel):
    """A stored job match."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "match_id": 42,
                "job_id": 7,
                "candidate_user_id": "user_2f9c",
                "repo_full_name": "octocat/hello-world",
                "analysis_id": 13,
                "score": 62.0,
                "status": "not_started",
                "rationale": {
                    "version": "match-rationale-v1",
                    "score": 62.0,
                    "coverage": 1.0,
                    "breakdown": [
                        {"requirement": "Go", "weight": 0.6, "strength": 0.9, "matched": 0.54},
                        {"requirement": "SQL", "weight": 0.4, "strength": 0.2, "matched": 0.08}
                    ]
                },
                "created_at": "2026-02-01T12:00:00+00:00",
                "updated_at": "2026-02-01T12:00:00+00:00"
            }
        }
    )

    match_id: int
    job_id: int
    candidate_user_id: str
    repo_full_name: str
    analysis_id: Optional[int] = None
    score: float = Field(ge=0, le=100)
    status: str
    rationale: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MatchResponse(BaseModel):
    """Response for single-match operations."""
    success: bool
    match: MatchSummary


class MatchesResponse(BaseModel):
    """Response for match lists."""
    success: bool
    count: int
    matches: List[MatchSummary]


class AssessmentResponse(BaseModel):
    """Response for starting an assessment."""
    success: bool
    candidate_user_id: str
    repo_full_name: str
    updated: int = Field(ge=0, description="Rows inserted or advanced to in_progress")


class AssignmentDetail(BaseModel):
    """A job's assignment template."""
    assignment_id: int
    job_id: int
    repo_template_url: str
    instructions: Optional[str] = None
    created_at: Optional[str] = None


class AssignmentResponse(BaseModel):
    success: bool
    assignment: AssignmentDetail


class CandidateAssignmentDetail(BaseModel):
    """A candidate's claim on an assignment, with progress."""
    candidate_assignment_id: int
    assignment_id: int
    job_id: int
    candidate_user_id: str
    repo_url: Optional[str] = None
    submission_branch: str
    status: str
    decision_status: str
    todo: Dict[str, Any]
    created_at: Optional[str] = None


class ClaimResponse(BaseModel):
    success: bool
    claim: CandidateAssignmentDetail


class HealthResponse(BaseModel):
    status: str
    service: str
