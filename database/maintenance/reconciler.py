#!/usr/bin/env python3
"""
Job match reconciliation - repairs job_match after its uniqueness key gained
the repo_full_name dimension.

Steps, in order, inside one transaction:

1. add repo_full_name (nullable) if absent
2. backfill it from repo_analysis through analysis_id
3. fill remaining nulls with a placeholder derived from analysis_id and id
4. delete duplicates per (job_id, candidate_user_id, repo_full_name), keeping
   the newest row (created_at desc, id desc)
5. replace the two-column job_match_unique index with the three-column one
6. set repo_full_name NOT NULL
7. create the job_match_repo_idx lookup index

Every step checks whether it is already satisfied, so a second run on a
compliant table changes nothing. Any failure rolls the whole transaction back
and raises ReconciliationAborted.
"""

import logging
from dataclasses import dataclass, asdict
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from core.match_engine.exceptions import ReconciliationAborted

logger = logging.getLogger(__name__)

TABLE = 'job_match'
UNIQUE_INDEX = 'job_match_unique'
REPO_INDEX = 'job_match_repo_idx'
UNIQUE_COLUMNS = ['job_id', 'candidate_user_id', 'repo_full_name']
PLACEHOLDER_PREFIX = '__unknown__/'


class _DryRunRollback(Exception):
    """Internal signal used to roll back a dry run after all steps executed."""
    pass


@dataclass
class ReconciliationReport:
    column_added: bool = False
    backfilled: int = 0
    placeholders: int = 0
    duplicates_removed: int = 0
    index_swapped: bool = False
    not_null_enforced: bool = False
    repo_index_created: bool = False
    dry_run: bool = False

    @property
    def already_compliant(self) -> bool:
        return not any([
            self.column_added,
            self.backfilled,
            self.placeholders,
            self.duplicates_removed,
            self.index_swapped,
            self.not_null_enforced,
            self.repo_index_created,
        ])

    def to_dict(self) -> dict:
        data = asdict(self)
        data['already_compliant'] = self.already_compliant
        return data


def placeholder_repo_name(match_id: int, analysis_id: Optional[int]) -> str:
    """Placeholder stored for rows whose repository can't be recovered."""
    analysis_part = str(analysis_id) if analysis_id is not None else 'no-analysis'
    return f"{PLACEHOLDER_PREFIX}{analysis_part}/{match_id}"


def column_info(conn: Connection, table_name: str, column_name: str) -> Optional[dict]:
    row = conn.execute(text("""
        SELECT is_nullable
        FROM information_schema.columns
        WHERE table_schema = current_schema()
          AND table_name = :table AND column_name = :column
    """), {"table": table_name, "column": column_name}).fetchone()
    if row is None:
        return None
    return {"nullable": row[0] == 'YES'}


def index_columns(conn: Connection, index_name: str) -> Optional[List[str]]:
    """Return the ordered column list of an index, or None if it does not exist."""
    row = conn.execute(text("""
        SELECT array_agg(a.attname::text ORDER BY k.ord)
        FROM pg_class i
        JOIN pg_namespace n ON n.oid = i.relnamespace
        JOIN pg_index x ON x.indexrelid = i.oid
        CROSS JOIN LATERAL unnest(x.indkey::int2[]) WITH ORDINALITY AS k(attnum, ord)
        JOIN pg_attribute a ON a.attrelid = x.indrelid AND a.attnum = k.attnum
        WHERE i.relname = :index AND n.nspname = current_schema()
    """), {"index": index_name}).fetchone()
    if row is None or row[0] is None:
        return None
    return list(row[0])


def index_is_unique(conn: Connection, index_name: str) -> bool:
    row = conn.execute(text("""
        SELECT x.indisunique
        FROM pg_class i
        JOIN pg_namespace n ON n.oid = i.relnamespace
        JOIN pg_index x ON x.indexrelid = i.oid
        WHERE i.relname = :index AND n.nspname = current_schema()
    """), {"index": index_name}).fetchone()
    return bool(row and row[0])


class JobMatchReconciler:
    """Brings job_match into compliance with the (job, candidate, repo) key."""

    def __init__(self, engine: Engine, advisory_lock_key: int, statement_timeout_ms: Optional[int] = None):
        self.engine = engine
        self.advisory_lock_key = advisory_lock_key
        self.statement_timeout_ms = statement_timeout_ms

    def run(self, dry_run: bool = False) -> ReconciliationReport:
        """
        Run all steps in a single transaction.

        Args:
            dry_run: Execute every step, report what changed, then roll back

        Returns:
            ReconciliationReport describing the changes

        Raises:
            ReconciliationAborted: Another run holds the lock, or any step failed
        """
        report = ReconciliationReport(dry_run=dry_run)
        step = 'connect'
        logger.info(f"Starting job_match reconciliation (dry_run={dry_run})")

        try:
            with self.engine.begin() as conn:
                step = 'lock'
                self._acquire_lock(conn)
                if self.statement_timeout_ms:
                    conn.execute(
                        text("SELECT set_config('statement_timeout', :timeout, true)"),
                        {"timeout": str(int(self.statement_timeout_ms))}
                    )

                step = 'add_column'
                report.column_added = self._add_column(conn)
                step = 'backfill'
                report.backfilled = self._backfill(conn)
                step = 'fallback_fill'
                report.placeholders = self._fallback_fill(conn)
                step = 'deduplicate'
                report.duplicates_removed = self._deduplicate(conn)
                step = 'swap_unique_index'
                report.index_swapped = self._swap_unique_index(conn)
                step = 'set_not_null'
                report.not_null_enforced = self._set_not_null(conn)
                step = 'repo_index'
                report.repo_index_created = self._create_repo_index(conn)

                if dry_run:
                    raise _DryRunRollback()
        except _DryRunRollback:
            logger.info(f"Dry run finished, rolled back: {report.to_dict()}")
            return report
        except ReconciliationAborted:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Reconciliation failed at step '{step}', rolled back: {e}")
            raise ReconciliationAborted("job_match reconciliation rolled back", step=step) from e

        if report.already_compliant:
            logger.info("job_match already compliant, nothing changed")
        else:
            logger.info(f"Reconciliation committed: {report.to_dict()}")
        return report

    def _acquire_lock(self, conn: Connection) -> None:
        acquired = conn.execute(
            text("SELECT pg_try_advisory_xact_lock(:key)"),
            {"key": self.advisory_lock_key}
        ).scalar()
        if not acquired:
            raise ReconciliationAborted("Another reconciliation is in progress", step='lock')

    def _add_column(self, conn: Connection) -> bool:
        if column_info(conn, TABLE, 'repo_full_name') is not None:
            logger.info("Column 'repo_full_name' already exists, skipping")
            return False
        conn.execute(text(f'ALTER TABLE {TABLE} ADD COLUMN IF NOT EXISTS repo_full_name TEXT'))
        logger.info("Added nullable column 'repo_full_name'")
        return True

    def _backfill(self, conn: Connection) -> int:
        result = conn.execute(text(f"""
            UPDATE {TABLE} jm
            SET repo_full_name = ra.repo_full_name
            FROM repo_analysis ra
            WHERE jm.analysis_id = ra.id AND jm.repo_full_name IS NULL
        """))
        logger.info(f"Backfilled repo_full_name on {result.rowcount} rows from repo_analysis")
        return result.rowcount

    def _fallback_fill(self, conn: Connection) -> int:
        result = conn.execute(text(f"""
            UPDATE {TABLE}
            SET repo_full_name = concat(
                :prefix, coalesce(analysis_id::text, 'no-analysis'), '/', id::text
            )
            WHERE repo_full_name IS NULL
        """), {"prefix": PLACEHOLDER_PREFIX})
        if result.rowcount:
            logger.warning(f"Filled {result.rowcount} orphaned rows with placeholder repo names")
        return result.rowcount

    def _deduplicate(self, conn: Connection) -> int:
        result = conn.execute(text(f"""
            WITH ranked AS (
                SELECT
                    id,
                    row_number() OVER (
                        PARTITION BY job_id, candidate_user_id, repo_full_name
                        ORDER BY created_at DESC, id DESC
                    ) AS rn
                FROM {TABLE}
            )
            DELETE FROM {TABLE} jm
            USING ranked r
            WHERE jm.id = r.id AND r.rn > 1
        """))
        if result.rowcount:
            logger.warning(f"Removed {result.rowcount} duplicate job_match rows")
        return result.rowcount

    def _swap_unique_index(self, conn: Connection) -> bool:
        current = index_columns(conn, UNIQUE_INDEX)
        if current == UNIQUE_COLUMNS and index_is_unique(conn, UNIQUE_INDEX):
            logger.info(f"Index '{UNIQUE_INDEX}' already covers {UNIQUE_COLUMNS}, skipping")
            return False

        conn.execute(text(f'DROP INDEX IF EXISTS {UNIQUE_INDEX}'))
        conn.execute(text(
            f'CREATE UNIQUE INDEX {UNIQUE_INDEX} ON {TABLE} USING btree ({", ".join(UNIQUE_COLUMNS)})'
        ))
        logger.info(f"Replaced index '{UNIQUE_INDEX}' {current} -> {UNIQUE_COLUMNS}")
        return True

    def _set_not_null(self, conn: Connection) -> bool:
        info = column_info(conn, TABLE, 'repo_full_name')
        if info is not None and not info['nullable']:
            return False
        conn.execute(text(f'ALTER TABLE {TABLE} ALTER COLUMN repo_full_name SET NOT NULL'))
        logger.info("Set repo_full_name NOT NULL")
        return True

    def _create_repo_index(self, conn: Connection) -> bool:
        if index_columns(conn, REPO_INDEX) is not None:
            return False
        conn.execute(text(f'CREATE INDEX IF NOT EXISTS {REPO_INDEX} ON {TABLE} USING btree (repo_full_name)'))
        logger.info(f"Created index '{REPO_INDEX}'")
        return True
