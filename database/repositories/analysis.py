from typing import Any, Dict, Optional

from sqlalchemy import select

from database.models import RepoAnalysis
from database.repositories.base import BaseRepository


class AnalysisRepository(BaseRepository):
    def get_by_id(self, analysis_id: int) -> Optional[RepoAnalysis]:
        stmt = select(RepoAnalysis).where(RepoAnalysis.id == analysis_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_analysis(
        self,
        candidate_user_id: str,
        repo_full_name: str,
        skills: Dict[str, float],
        signals: Optional[Dict[str, Any]] = None
    ) -> RepoAnalysis:
        analysis = RepoAnalysis(
            candidate_user_id=candidate_user_id,
            repo_full_name=repo_full_name,
            skills=skills,
            signals=signals,
        )
        self.db.add(analysis)
        self.db.flush()
        return analysis
