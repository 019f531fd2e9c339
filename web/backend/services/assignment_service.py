#!/usr/bin/env python3
"""
Assignment views - response shapes for assignment endpoints.
"""

from database.models import Assignment, CandidateAssignment, empty_todo, is_valid_todo
from ..models.responses import AssignmentDetail, CandidateAssignmentDetail
from ..utils import safe_datetime_iso


def to_assignment_detail(assignment: Assignment) -> AssignmentDetail:
    return AssignmentDetail(
        assignment_id=assignment.id,
        job_id=assignment.job_id,
        repo_template_url=assignment.repo_template_url,
        instructions=assignment.instructions,
        created_at=safe_datetime_iso(assignment.created_at),
    )


def to_claim_detail(claim: CandidateAssignment) -> CandidateAssignmentDetail:
    # Rows not yet repaired by the todo migration are shown with empty progress
    todo = claim.todo if is_valid_todo(claim.todo) else empty_todo()
    return CandidateAssignmentDetail(
        candidate_assignment_id=claim.id,
        assignment_id=claim.assignment_id,
        job_id=claim.job_id,
        candidate_user_id=claim.candidate_user_id,
        repo_url=claim.repo_url,
        submission_branch=claim.submission_branch,
        status=claim.status,
        decision_status=claim.decision_status,
        todo=todo,
        created_at=safe_datetime_iso(claim.created_at),
    )
