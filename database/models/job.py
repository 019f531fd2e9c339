from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Integer, String, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base


class Job(Base):
    """
    A job opening owned by an HR user.

    required_stacks maps technology name to required weight, e.g.
    {"React": 0.3, "Node.js": 0.25, "TypeScript": 0.2}. Weights are not
    required to sum to 1. Editing them never rescores existing matches.
    """
    __tablename__ = 'job'

    id = Column(Integer, primary_key=True)
    hr_user_id = Column(Text, nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text)
    role_type = Column(Text)  # frontend|backend|full-stack|devops
    seniority = Column(Text)  # junior|senior

    required_stacks = Column(JSONB, nullable=False, default=dict)
    match_threshold = Column(Integer, nullable=False, default=50)
    is_published = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=True, onupdate=sql_text("timezone('UTC', now())"))

    matches = relationship("JobMatch", back_populates="job", passive_deletes=True)
    assignment = relationship("Assignment", back_populates="job", uselist=False, passive_deletes=True)

    __table_args__ = (
        Index('job_published_idx', 'is_published'),
    )
