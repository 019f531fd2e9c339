#!/usr/bin/env python3
"""
Migration: At most one assignment per job

Lists jobs carrying several assignment templates, keeps the newest of each
and creates the assignment_job_unique index. With --dry-run only the
duplicates are reported.
"""

import sys
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config_loader import load_config
from core.match_engine.exceptions import ReconciliationAborted
from database.database import build_engine, build_session_factory, db_session_scope
from database.maintenance import find_duplicate_assignments, enforce_assignment_uniqueness

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def migrate(dry_run: bool = False):
    config = load_config()
    engine = build_engine(config.database)
    try:
        with db_session_scope(build_session_factory(engine)) as session:
            duplicates = find_duplicate_assignments(session)

        if not duplicates:
            logger.info("No job has more than one assignment")
        for dup in duplicates:
            logger.warning(f"Job {dup.job_id} has assignments {dup.assignment_ids}")

        if dry_run:
            return duplicates
        enforce_assignment_uniqueness(engine)
        return duplicates
    finally:
        engine.dispose()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Remove duplicate assignments and enforce one per job")
    parser.add_argument("--dry-run", action="store_true", help="Only report duplicate assignments")

    args = parser.parse_args()

    try:
        migrate(dry_run=args.dry_run)
    except ReconciliationAborted as e:
        logger.error(f"Migration failed: {e}")
        sys.exit(1)
