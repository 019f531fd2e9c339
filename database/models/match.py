from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Integer, Numeric, Enum, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from core.match_engine.lifecycle import MatchStatus

from .base import Base

application_status = Enum(
    MatchStatus,
    name='application_status',
    values_callable=lambda statuses: [s.value for s in statuses],
)


class JobMatch(Base):
    """
    Scored, status-bearing pairing of a job, a candidate and one analyzed repository.

    repo_full_name is denormalized from the analysis so that uniqueness of
    (job_id, candidate_user_id, repo_full_name) holds even when the analysis
    was deleted or never linked. Legacy rows carry a
    "__unknown__/<analysis_id>/<id>" placeholder.
    """
    __tablename__ = 'job_match'

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey('job.id', ondelete='CASCADE'), nullable=False)
    candidate_user_id = Column(Text, nullable=False)

    analysis_id = Column(Integer, ForeignKey('repo_analysis.id', ondelete='SET NULL'), nullable=True)
    repo_full_name = Column(Text, nullable=False)

    # Historical rows defaulted to 'completed'
    status = Column(application_status, nullable=False, server_default=sql_text("'completed'"))

    score = Column(Numeric(5, 2), nullable=False, default=0)
    rationale = Column(JSONB(none_as_null=True), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=True, server_default=sql_text("timezone('UTC', now())"))

    job = relationship("Job", back_populates="matches")
    analysis = relationship("RepoAnalysis", back_populates="matches")

    __table_args__ = (
        # Same candidate may apply to a job with several repos, one row per repo
        Index('job_match_unique', 'job_id', 'candidate_user_id', 'repo_full_name', unique=True),
        Index('job_match_job_idx', 'job_id'),
        Index('job_match_candidate_idx', 'candidate_user_id'),
        Index('job_match_analysis_idx', 'analysis_id'),
        Index('job_match_repo_idx', 'repo_full_name'),
        Index('job_match_status_idx', 'status'),
    )
