import logging
from datetime import datetime, timezone
from typing import List, Optional, Any, Dict

from sqlalchemy import select, func, case, or_
from sqlalchemy.dialects.postgresql import insert

from core.match_engine.lifecycle import MatchStatus
from database.models import JobMatch
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

NATURAL_KEY = ['job_id', 'candidate_user_id', 'repo_full_name']

# Statuses a completed analysis may still advance; later review states are kept
PRE_REVIEW_STATUSES = [MatchStatus.NOT_STARTED, MatchStatus.IN_PROGRESS]


class MatchRepository(BaseRepository):
    def get_by_id(self, match_id: int, for_update: bool = False) -> Optional[JobMatch]:
        stmt = select(JobMatch).where(JobMatch.id == match_id)
        if for_update:
            stmt = stmt.with_for_update()
        stmt = stmt.execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_key(
        self,
        job_id: int,
        candidate_user_id: str,
        repo_full_name: str
    ) -> Optional[JobMatch]:
        stmt = select(JobMatch).where(
            JobMatch.job_id == job_id,
            JobMatch.candidate_user_id == candidate_user_id,
            JobMatch.repo_full_name == repo_full_name
        ).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert(
        self,
        job_id: int,
        candidate_user_id: str,
        repo_full_name: str,
        analysis_id: Optional[int],
        score: float,
        rationale: Optional[Dict[str, Any]] = None,
        initial_status: MatchStatus = MatchStatus.NOT_STARTED
    ) -> JobMatch:
        """
        Insert a match or update the existing row with the same natural key.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE so concurrent callers
        for the same (job, candidate, repo) can never create two rows. The
        update is skipped when score and analysis are unchanged. When
        initial_status is COMPLETED an existing not_started/in_progress row is
        advanced to completed; review statuses are never touched.
        """
        stmt = insert(JobMatch).values(
            job_id=job_id,
            candidate_user_id=candidate_user_id,
            repo_full_name=repo_full_name,
            analysis_id=analysis_id,
            score=score,
            rationale=rationale,
            status=initial_status,
        )
        excluded = stmt.excluded

        set_ = {
            'score': excluded.score,
            'analysis_id': excluded.analysis_id,
            'rationale': excluded.rationale,
            'updated_at': func.timezone('UTC', func.now()),
        }
        changed = [
            JobMatch.score.is_distinct_from(excluded.score),
            JobMatch.analysis_id.is_distinct_from(excluded.analysis_id),
        ]

        if initial_status == MatchStatus.COMPLETED:
            advance = JobMatch.status.in_(PRE_REVIEW_STATUSES)
            set_['status'] = case((advance, excluded.status), else_=JobMatch.status)
            changed.append(advance)

        stmt = stmt.on_conflict_do_update(
            index_elements=NATURAL_KEY,
            set_=set_,
            where=or_(*changed)
        )
        self.db.execute(stmt)

        return self.get_by_key(job_id, candidate_user_id, repo_full_name)

    def start_assessment(
        self,
        job_id: int,
        candidate_user_id: str,
        repo_full_name: str
    ) -> bool:
        """
        Ensure an in_progress row exists for (job, candidate, repo).

        Inserts with score 0 and no analysis, or advances a not_started row.
        Returns True when a row was inserted or updated.
        """
        stmt = insert(JobMatch).values(
            job_id=job_id,
            candidate_user_id=candidate_user_id,
            repo_full_name=repo_full_name,
            analysis_id=None,
            score=0,
            rationale=None,
            status=MatchStatus.IN_PROGRESS,
        ).on_conflict_do_update(
            index_elements=NATURAL_KEY,
            set_={
                'status': MatchStatus.IN_PROGRESS,
                'updated_at': func.timezone('UTC', func.now()),
            },
            where=JobMatch.status == MatchStatus.NOT_STARTED
        )
        result = self.db.execute(stmt)
        return result.rowcount > 0

    def set_status(self, match: JobMatch, status: MatchStatus) -> JobMatch:
        match.status = status
        match.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return match

    def list_for_job(self, job_id: int) -> List[JobMatch]:
        stmt = select(JobMatch).where(
            JobMatch.job_id == job_id
        ).order_by(JobMatch.created_at.desc(), JobMatch.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_for_candidate(self, candidate_user_id: str) -> List[JobMatch]:
        stmt = select(JobMatch).where(
            JobMatch.candidate_user_id == candidate_user_id
        ).order_by(JobMatch.created_at.desc(), JobMatch.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def count_for_key(
        self,
        job_id: int,
        candidate_user_id: str,
        repo_full_name: str
    ) -> int:
        stmt = select(func.count(JobMatch.id)).where(
            JobMatch.job_id == job_id,
            JobMatch.candidate_user_id == candidate_user_id,
            JobMatch.repo_full_name == repo_full_name
        )
        return self.db.execute(stmt).scalar_one()

