#!/usr/bin/env python3
"""
Typed errors raised by the match engine.

Every error carries a ``retryable`` flag so the calling layer can tell
"retry is safe" apart from "not permitted" and "operator intervention needed".
"""


class MatchEngineError(Exception):
    """Base exception for match engine errors."""
    retryable = False


class InvalidInput(MatchEngineError):
    """Raised when a requirement or skill vector is malformed. Nothing is written."""
    pass


class JobNotPublished(InvalidInput):
    """Raised when scoring against an unpublished job is not allowed."""
    pass


class ConflictNotResolved(MatchEngineError):
    """Raised when the atomic upsert failed to resolve a unique-key conflict."""
    retryable = True


class StorageTimeout(MatchEngineError):
    """Raised when a storage call exceeded its statement timeout."""
    retryable = True


class InvalidTransition(MatchEngineError):
    """Raised when the target status is not reachable from the current one."""

    def __init__(self, match_id, current_status, next_status):
        self.match_id = match_id
        self.current_status = current_status
        self.next_status = next_status
        super().__init__(
            f"Match {match_id}: cannot move from '{current_status}' to '{next_status}'"
        )


class NotFound(MatchEngineError):
    """Raised when a match, job or analysis does not exist."""
    pass


class ReconciliationAborted(MatchEngineError):
    """Raised when a maintenance procedure failed and its transaction was rolled back."""

    def __init__(self, message, step=None):
        self.step = step
        super().__init__(message if step is None else f"{message} (step: {step})")
