#!/usr/bin/env python3
"""
Match Engine - scoring, idempotent persistence and review lifecycle of job matches.

Public API:
- MatchEngine (core.match_engine.service): upsert/transition/list operations
- MatchStatus, can_transition, allowed_next: review status state machine
- MatchEngineError and subclasses: typed errors surfaced to callers

The service is imported from its module directly; this package only re-exports
the dependency-free pieces so ORM models can use MatchStatus.
"""

from core.match_engine.lifecycle import (
    MatchStatus,
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    INITIAL_STATUSES,
    allowed_next,
    can_transition,
    is_terminal,
)
from core.match_engine.exceptions import (
    MatchEngineError,
    InvalidInput,
    JobNotPublished,
    ConflictNotResolved,
    StorageTimeout,
    InvalidTransition,
    NotFound,
    ReconciliationAborted,
)

__all__ = [
    'MatchStatus',
    'ALLOWED_TRANSITIONS',
    'TERMINAL_STATUSES',
    'INITIAL_STATUSES',
    'allowed_next',
    'can_transition',
    'is_terminal',
    'MatchEngineError',
    'InvalidInput',
    'JobNotPublished',
    'ConflictNotResolved',
    'StorageTimeout',
    'InvalidTransition',
    'NotFound',
    'ReconciliationAborted',
]
