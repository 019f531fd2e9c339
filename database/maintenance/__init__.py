from database.maintenance.reconciler import JobMatchReconciler, ReconciliationReport, placeholder_repo_name
from database.maintenance.status_schema import ensure_job_match_status
from database.maintenance.assignments import (
    DuplicateAssignment,
    repair_candidate_assignment_todos,
    find_duplicate_assignments,
    enforce_assignment_uniqueness,
)

__all__ = [
    'JobMatchReconciler',
    'ReconciliationReport',
    'placeholder_repo_name',
    'ensure_job_match_status',
    'DuplicateAssignment',
    'repair_candidate_assignment_todos',
    'find_duplicate_assignments',
    'enforce_assignment_uniqueness',
]
