#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from core.match_engine.assignments import AssignmentService
from core.match_engine.service import MatchEngine
from database.database import build_engine, build_session_factory
from .config import get_config
from .services.match_service import MatchService


class DatabaseManager:
    """Owns the engine and session factory shared by all requests."""

    def __init__(self):
        config = get_config()
        self.engine: Engine = build_engine(config.database)
        self.session_factory: sessionmaker = build_session_factory(self.engine)


@lru_cache()
def get_db_manager() -> DatabaseManager:
    """Created on first request, so importing the app never opens a connection."""
    return DatabaseManager()


def get_match_engine() -> MatchEngine:
    """
    FastAPI dependency that provides the match engine.

    Usage:
        @app.get("/endpoint")
        def my_endpoint(engine: MatchEngine = Depends(get_match_engine)):
            ...
    """
    return MatchEngine(get_db_manager().session_factory, get_config().matching)


def get_assignment_service() -> AssignmentService:
    return AssignmentService(get_db_manager().session_factory, get_config().matching)


def get_match_service(engine: MatchEngine = Depends(get_match_engine)) -> MatchService:
    return MatchService(engine)
