#!/usr/bin/env python3
"""
Migration: Repair candidate_assignment.todo values

Rows whose todo is null, a bare list, or lacks a subtasks list are reset to
the empty progress object {"mainTask": "", "subtasks": [], "completedCount": 0}.
"""

import sys
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.exc import SQLAlchemyError

from core.config_loader import load_config
from database.database import build_engine, build_session_factory, db_session_scope
from database.maintenance import repair_candidate_assignment_todos

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def migrate():
    config = load_config()
    engine = build_engine(config.database)
    try:
        with db_session_scope(build_session_factory(engine)) as session:
            checked, fixed = repair_candidate_assignment_todos(session)
    finally:
        engine.dispose()

    logger.info(f"Checked {checked} candidate assignments, fixed {fixed}")
    return checked, fixed


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Repair malformed candidate_assignment.todo values")
    parser.parse_args()

    try:
        migrate()
    except SQLAlchemyError as e:
        logger.error(f"Todo repair failed and was rolled back: {e}")
        sys.exit(1)
