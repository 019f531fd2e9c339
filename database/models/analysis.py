from sqlalchemy import Column, Text, TIMESTAMP, Integer, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base


class RepoAnalysis(Base):
    """
    Result of one analysis run over a candidate's repository.

    Produced by the external analysis pipeline and never mutated; a re-analysis
    creates a new row. skills maps technology name to strength (0.0-1.0).
    """
    __tablename__ = 'repo_analysis'

    id = Column(Integer, primary_key=True)
    candidate_user_id = Column(Text, nullable=False)

    repo_full_name = Column(Text, nullable=False)  # e.g. "vercel/next.js"

    skills = Column(JSONB, nullable=False, default=dict)
    signals = Column(JSONB, nullable=True)  # hasCI, hasDockerfile, testFrameworks

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    matches = relationship("JobMatch", back_populates="analysis")

    __table_args__ = (
        Index('repo_analysis_candidate_idx', 'candidate_user_id'),
    )
