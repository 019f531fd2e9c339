import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert

from database.models import Assignment, CandidateAssignment, empty_todo
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class AssignmentRepository(BaseRepository):
    def get_for_job(self, job_id: int) -> Optional[Assignment]:
        stmt = select(Assignment).where(
            Assignment.job_id == job_id
        ).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert_for_job(
        self,
        job_id: int,
        repo_template_url: str,
        instructions: Optional[str] = None
    ) -> Assignment:
        """Create the job's assignment template, or replace the existing one."""
        stmt = insert(Assignment).values(
            job_id=job_id,
            repo_template_url=repo_template_url,
            instructions=instructions,
        ).on_conflict_do_update(
            index_elements=['job_id'],
            set_={
                'repo_template_url': repo_template_url,
                'instructions': instructions,
            }
        )
        self.db.execute(stmt)
        return self.get_for_job(job_id)

    def get_candidate_assignment(
        self,
        assignment_id: int,
        candidate_user_id: str
    ) -> Optional[CandidateAssignment]:
        stmt = select(CandidateAssignment).where(
            CandidateAssignment.assignment_id == assignment_id,
            CandidateAssignment.candidate_user_id == candidate_user_id
        ).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def claim(
        self,
        assignment: Assignment,
        candidate_user_id: str,
        repo_url: Optional[str] = None
    ) -> CandidateAssignment:
        """Claim an assignment for a candidate; claiming twice returns the first claim."""
        stmt = insert(CandidateAssignment).values(
            assignment_id=assignment.id,
            job_id=assignment.job_id,
            candidate_user_id=candidate_user_id,
            repo_url=repo_url,
            submission_branch='user-submission',
            status='claimed',
            decision_status='pending',
            todo=empty_todo(),
            messages=[],
            timeline=[],
        ).on_conflict_do_nothing(
            index_elements=['assignment_id', 'candidate_user_id']
        )
        self.db.execute(stmt)
        return self.get_candidate_assignment(assignment.id, candidate_user_id)
