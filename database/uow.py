import contextlib
import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from core.match_engine.exceptions import StorageTimeout
from database.repositories import (
    JobRepository,
    AnalysisRepository,
    MatchRepository,
    AssignmentRepository,
)

logger = logging.getLogger(__name__)

# SQLSTATE raised by Postgres when statement_timeout cancels a query
QUERY_CANCELED = '57014'


@dataclass
class MatchUnitOfWork:
    """Repositories sharing one Session (and therefore one transaction)."""
    session: Session
    jobs: JobRepository
    analyses: AnalysisRepository
    matches: MatchRepository
    assignments: AssignmentRepository


def is_statement_timeout(exc: OperationalError) -> bool:
    return getattr(exc.orig, 'pgcode', None) == QUERY_CANCELED


@contextlib.contextmanager
def match_uow(
    session_factory: sessionmaker,
    statement_timeout_ms: Optional[int] = None
) -> Iterator[MatchUnitOfWork]:
    """Per-unit-of-work transaction scope.

    Yields a MatchUnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. A statement cancelled by
    statement_timeout_ms surfaces as StorageTimeout.

    Usage:
        with match_uow(SessionLocal, statement_timeout_ms=5000) as uow:
            match = uow.matches.get_by_id(match_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = session_factory()
    try:
        uow = MatchUnitOfWork(
            session=session,
            jobs=JobRepository(session),
            analyses=AnalysisRepository(session),
            matches=MatchRepository(session),
            assignments=AssignmentRepository(session),
        )
        if statement_timeout_ms:
            uow.matches.apply_statement_timeout(statement_timeout_ms)
        yield uow
        session.commit()
    except OperationalError as e:
        session.rollback()
        if is_statement_timeout(e):
            logger.warning(f"Statement cancelled after {statement_timeout_ms}ms: {e.orig}")
            raise StorageTimeout(f"Storage call exceeded {statement_timeout_ms}ms") from e
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
