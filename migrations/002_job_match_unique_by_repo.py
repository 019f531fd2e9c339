#!/usr/bin/env python3
"""
Migration: Key job_match by (job_id, candidate_user_id, repo_full_name)

Adds and backfills repo_full_name, removes duplicate matches (newest row
wins), swaps job_match_unique to the three-column key and enforces NOT NULL.
All steps run in one transaction under an advisory lock; a second run on a
compliant table changes nothing.

Usage:
    python migrations/002_job_match_unique_by_repo.py --dry-run
    python migrations/002_job_match_unique_by_repo.py
"""

import sys
import json
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config_loader import load_config
from core.match_engine.exceptions import ReconciliationAborted
from database.database import build_engine
from database.maintenance import JobMatchReconciler

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def migrate(dry_run: bool = False):
    """Run the job_match reconciliation; returns its report."""
    config = load_config()
    engine = build_engine(config.database)
    try:
        reconciler = JobMatchReconciler(
            engine,
            advisory_lock_key=config.reconciler.advisory_lock_key,
            statement_timeout_ms=config.reconciler.statement_timeout_ms
        )
        return reconciler.run(dry_run=dry_run)
    finally:
        engine.dispose()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Reconcile job_match to the per-repository unique key")
    parser.add_argument("--dry-run", action="store_true", help="Report what would change, then roll back")

    args = parser.parse_args()

    try:
        report = migrate(dry_run=args.dry_run)
    except ReconciliationAborted as e:
        logger.error(f"Reconciliation aborted: {e}")
        sys.exit(1)

    print(json.dumps(report.to_dict(), indent=2))
