import contextlib
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from core.config_loader import DatabaseConfig


def build_engine(config: DatabaseConfig) -> Engine:
    """Create an engine for the configured database. Nothing is created at import time."""
    return create_engine(
        config.url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=config.pool_size,
        max_overflow=config.max_overflow
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    # Rows returned by the engine outlive the unit of work that loaded them
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


@contextlib.contextmanager
def db_session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
