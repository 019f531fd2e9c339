#!/usr/bin/env python3
"""
Assignment data repairs.

- repair_candidate_assignment_todos: replaces malformed todo values (null,
  bare list, missing subtasks) with the canonical empty progress object
- find_duplicate_assignments: jobs carrying more than one assignment template
- enforce_assignment_uniqueness: keeps the newest assignment per job and
  creates the unique index on assignment.job_id
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from sqlalchemy import select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.match_engine.exceptions import ReconciliationAborted
from database.models import CandidateAssignment, empty_todo, is_valid_todo

logger = logging.getLogger(__name__)


@dataclass
class DuplicateAssignment:
    job_id: int
    assignment_ids: List[int] = field(default_factory=list)


def repair_candidate_assignment_todos(session: Session) -> Tuple[int, int]:
    """
    Replace every todo failing the shape check with the empty progress object.

    The caller owns the transaction (see db_session_scope).

    Returns:
        (rows checked, rows fixed)
    """
    rows = session.execute(
        select(CandidateAssignment.id, CandidateAssignment.todo)
    ).all()

    broken_ids = [row.id for row in rows if not is_valid_todo(row.todo)]
    for assignment_id in broken_ids:
        logger.info(f"Fixing todo on candidate assignment {assignment_id}")
        session.execute(
            update(CandidateAssignment)
            .where(CandidateAssignment.id == assignment_id)
            .values(todo=empty_todo())
        )

    logger.info(f"Todo repair: checked {len(rows)}, fixed {len(broken_ids)}")
    return len(rows), len(broken_ids)


def find_duplicate_assignments(session: Session) -> List[DuplicateAssignment]:
    result = session.execute(text("""
        SELECT job_id, array_agg(id ORDER BY created_at, id) AS assignment_ids
        FROM assignment
        GROUP BY job_id
        HAVING COUNT(*) > 1
        ORDER BY job_id
    """))
    return [
        DuplicateAssignment(job_id=row.job_id, assignment_ids=list(row.assignment_ids))
        for row in result
    ]


def enforce_assignment_uniqueness(engine: Engine) -> Dict[str, int]:
    """
    Delete all but the newest assignment per job, then create assignment_job_unique.

    Candidate assignments pointing at a removed template cascade with it.

    Raises:
        ReconciliationAborted: On any database error; nothing is committed
    """
    try:
        with engine.begin() as conn:
            deleted = conn.execute(text("""
                WITH ranked AS (
                    SELECT
                        id,
                        row_number() OVER (
                            PARTITION BY job_id
                            ORDER BY created_at DESC, id DESC
                        ) AS rn
                    FROM assignment
                )
                DELETE FROM assignment a
                USING ranked r
                WHERE a.id = r.id AND r.rn > 1
            """)).rowcount
            conn.execute(text("""
                CREATE UNIQUE INDEX IF NOT EXISTS assignment_job_unique
                ON assignment USING btree (job_id)
            """))
    except SQLAlchemyError as e:
        logger.error(f"Assignment uniqueness enforcement failed, rolled back: {e}")
        raise ReconciliationAborted("assignment uniqueness enforcement rolled back") from e

    if deleted:
        logger.warning(f"Removed {deleted} duplicate assignment rows")
    return {'duplicates_removed': deleted}
