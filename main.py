import sys
import json
import logging
import argparse

from tenacity import RetryError

from core.config_loader import load_config
from core.match_engine.exceptions import MatchEngineError
from database.database import build_engine, build_session_factory, db_session_scope
from database.init_db import init_db
from database.maintenance import (
    JobMatchReconciler,
    ensure_job_match_status,
    repair_candidate_assignment_todos,
    enforce_assignment_uniqueness,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

MODES = ['init-db', 'ensure-status', 'reconcile', 'fix-todos', 'dedupe-assignments', 'serve']


def run_maintenance(mode: str, config, dry_run: bool = False):
    engine = build_engine(config.database)
    try:
        if mode == 'init-db':
            init_db(engine)
        elif mode == 'ensure-status':
            ensure_job_match_status(engine)
        elif mode == 'reconcile':
            reconciler = JobMatchReconciler(
                engine,
                advisory_lock_key=config.reconciler.advisory_lock_key,
                statement_timeout_ms=config.reconciler.statement_timeout_ms
            )
            report = reconciler.run(dry_run=dry_run)
            print(json.dumps(report.to_dict(), indent=2))
        elif mode == 'fix-todos':
            with db_session_scope(build_session_factory(engine)) as session:
                repair_candidate_assignment_todos(session)
        elif mode == 'dedupe-assignments':
            enforce_assignment_uniqueness(engine)
    finally:
        engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="RepoMatch match engine driver")
    parser.add_argument('--mode', type=str, choices=MODES, default='serve',
                        help='What to run: a maintenance procedure, or serve (default) for the HTTP API')
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--dry-run', action='store_true', help='reconcile only: roll back after reporting')
    args = parser.parse_args()

    config = load_config(args.config)
    logger.info(f"Starting in {args.mode.upper()} mode...")

    if args.mode == 'serve':
        import uvicorn
        uvicorn.run("web.backend.app:app", host=config.web.host, port=config.web.port, log_level="info")
        return

    try:
        run_maintenance(args.mode, config, dry_run=args.dry_run)
    except (MatchEngineError, RetryError) as e:
        logger.error(f"{args.mode} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
