from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Integer, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base


def empty_todo() -> dict:
    """Canonical empty progress object for CandidateAssignment.todo."""
    return {
        "mainTask": "",
        "subtasks": [],
        "completedCount": 0,
    }


def is_valid_todo(todo) -> bool:
    """A todo must be an object carrying a subtasks list; never null or a bare list."""
    return isinstance(todo, dict) and isinstance(todo.get("subtasks"), list)


class Assignment(Base):
    """
    Coding assignment template attached to a job. At most one per job.
    """
    __tablename__ = 'assignment'

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey('job.id', ondelete='CASCADE'), nullable=False)
    repo_template_url = Column(Text, nullable=False)
    instructions = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    job = relationship("Job", back_populates="assignment")
    candidate_assignments = relationship("CandidateAssignment", back_populates="assignment", passive_deletes=True)

    __table_args__ = (
        Index('assignment_job_unique', 'job_id', unique=True),
    )


class CandidateAssignment(Base):
    """
    One candidate's claimed assignment: progress, messages and review status.
    """
    __tablename__ = 'candidate_assignment'

    id = Column(Integer, primary_key=True)
    assignment_id = Column(Integer, ForeignKey('assignment.id', ondelete='CASCADE'), nullable=False)
    # Denormalized for faster queries by job
    job_id = Column(Integer, ForeignKey('job.id', ondelete='CASCADE'), nullable=False)
    candidate_user_id = Column(Text, nullable=False)

    repo_url = Column(Text)
    submission_branch = Column(Text, nullable=False, default='user-submission')

    status = Column(Text, nullable=False, default='claimed')  # claimed|submitted|reviewing|completed
    decision_status = Column(Text, nullable=False, default='pending')  # pending|proceed|reject

    todo = Column(JSONB, nullable=False, default=empty_todo)
    messages = Column(JSONB)
    timeline = Column(JSONB)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    assignment = relationship("Assignment", back_populates="candidate_assignments")

    __table_args__ = (
        Index('candidate_assignment_unique', 'assignment_id', 'candidate_user_id', unique=True),
        Index('candidate_assignment_candidate_idx', 'candidate_user_id'),
        Index('candidate_assignment_job_idx', 'job_id'),
    )
