import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from database.models import Job
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class JobRepository(BaseRepository):
    def get_by_id(self, job_id: int) -> Optional[Job]:
        stmt = select(Job).where(Job.id == job_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_published(self) -> List[Job]:
        stmt = select(Job).where(Job.is_published.is_(True)).order_by(Job.id)
        return list(self.db.execute(stmt).scalars().all())

    def create_job(
        self,
        hr_user_id: str,
        title: str,
        required_stacks: Dict[str, float],
        is_published: bool = False,
        **fields: Any
    ) -> Job:
        job = Job(
            hr_user_id=hr_user_id,
            title=title,
            required_stacks=required_stacks,
            is_published=is_published,
            **fields
        )
        self.db.add(job)
        self.db.flush()  # Generate ID
        return job
