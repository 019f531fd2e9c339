#!/usr/bin/env python3
"""
Migration: Ensure job_match has the review status columns

Creates the application_status enum, adds job_match.status (default
'completed') and job_match.updated_at where missing, and creates
job_match_status_idx. Safe to re-run.
"""

import sys
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config_loader import load_config
from core.match_engine.exceptions import ReconciliationAborted
from database.database import build_engine
from database.maintenance import ensure_job_match_status

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def migrate():
    """Create whatever part of the status schema is missing."""
    config = load_config()
    engine = build_engine(config.database)
    try:
        created = ensure_job_match_status(engine)
    finally:
        engine.dispose()

    if not any(created.values()):
        logger.info("job_match status schema already in place. Nothing to do.")
    return created


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Ensure job_match status enum, columns and index")
    parser.parse_args()

    try:
        migrate()
    except ReconciliationAborted as e:
        logger.error(f"Migration failed: {e}")
        sys.exit(1)
