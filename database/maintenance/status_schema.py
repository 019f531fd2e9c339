#!/usr/bin/env python3
"""
Ensure job_match carries the review lifecycle columns.

Creates the application_status enum, the status column (historical default
'completed') and the updated_at column, plus the status lookup index. Safe to
run repeatedly.
"""

import logging
from typing import Dict

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.match_engine.exceptions import ReconciliationAborted
from core.match_engine.lifecycle import MatchStatus

logger = logging.getLogger(__name__)


def _enum_labels() -> str:
    return ", ".join(f"'{status.value}'" for status in MatchStatus)


def ensure_job_match_status(engine: Engine) -> Dict[str, bool]:
    """
    Create the status enum, columns and index where missing.

    Returns:
        Which objects were created

    Raises:
        ReconciliationAborted: On any database error; nothing is committed
    """
    created = {}
    logger.info("Starting job_match status schema check")

    try:
        with engine.begin() as conn:
            created['enum'] = conn.execute(text(
                "SELECT NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'application_status')"
            )).scalar()
            conn.execute(text(f"""
                DO $$
                BEGIN
                    IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'application_status') THEN
                        CREATE TYPE application_status AS ENUM ({_enum_labels()});
                    END IF;
                END
                $$;
            """))

            existing = set(conn.execute(text("""
                SELECT column_name
                FROM information_schema.columns
                WHERE table_schema = current_schema() AND table_name = 'job_match'
            """)).scalars().all())

            created['status'] = 'status' not in existing
            conn.execute(text("""
                ALTER TABLE job_match
                ADD COLUMN IF NOT EXISTS status application_status DEFAULT 'completed' NOT NULL
            """))

            created['updated_at'] = 'updated_at' not in existing
            conn.execute(text("""
                ALTER TABLE job_match
                ADD COLUMN IF NOT EXISTS updated_at TIMESTAMP WITH TIME ZONE
            """))

            created['status_index'] = conn.execute(text(
                "SELECT to_regclass('job_match_status_idx') IS NULL"
            )).scalar()
            conn.execute(text("""
                CREATE INDEX IF NOT EXISTS job_match_status_idx ON job_match USING btree (status)
            """))
    except SQLAlchemyError as e:
        logger.error(f"Status schema check failed, rolled back: {e}")
        raise ReconciliationAborted("job_match status schema check rolled back") from e

    logger.info(f"Status schema check done: {created}")
    return created
