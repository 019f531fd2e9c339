#!/usr/bin/env python3
"""
Match Lifecycle - review status state machine for job matches.

    not_started -> in_progress -> completed
    completed   -> flagged | proceed | rejected | waitlisted
    flagged     -> proceed | rejected | waitlisted
    waitlisted  -> proceed | rejected
    any non-terminal state -> expired

Terminal states: proceed, rejected, expired.
"""

import enum
from typing import Dict, FrozenSet, Union


class MatchStatus(str, enum.Enum):
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    FLAGGED = 'flagged'
    PROCEED = 'proceed'
    REJECTED = 'rejected'
    WAITLISTED = 'waitlisted'
    EXPIRED = 'expired'


TERMINAL_STATUSES: FrozenSet[MatchStatus] = frozenset({
    MatchStatus.PROCEED,
    MatchStatus.REJECTED,
    MatchStatus.EXPIRED,
})

# Statuses a freshly upserted match may start in.
INITIAL_STATUSES: FrozenSet[MatchStatus] = frozenset({
    MatchStatus.NOT_STARTED,
    MatchStatus.COMPLETED,
})

_FORWARD: Dict[MatchStatus, FrozenSet[MatchStatus]] = {
    MatchStatus.NOT_STARTED: frozenset({MatchStatus.IN_PROGRESS}),
    MatchStatus.IN_PROGRESS: frozenset({MatchStatus.COMPLETED}),
    MatchStatus.COMPLETED: frozenset({
        MatchStatus.FLAGGED,
        MatchStatus.PROCEED,
        MatchStatus.REJECTED,
        MatchStatus.WAITLISTED,
    }),
    MatchStatus.FLAGGED: frozenset({
        MatchStatus.PROCEED,
        MatchStatus.REJECTED,
        MatchStatus.WAITLISTED,
    }),
    MatchStatus.WAITLISTED: frozenset({
        MatchStatus.PROCEED,
        MatchStatus.REJECTED,
    }),
}

ALLOWED_TRANSITIONS: Dict[MatchStatus, FrozenSet[MatchStatus]] = {
    status: (
        frozenset()
        if status in TERMINAL_STATUSES
        else _FORWARD.get(status, frozenset()) | {MatchStatus.EXPIRED}
    )
    for status in MatchStatus
}


def coerce_status(value: Union[str, MatchStatus]) -> MatchStatus:
    """Convert a raw value to MatchStatus. Raises ValueError for unknown names."""
    if isinstance(value, MatchStatus):
        return value
    return MatchStatus(value)


def allowed_next(current: Union[str, MatchStatus]) -> FrozenSet[MatchStatus]:
    return ALLOWED_TRANSITIONS[coerce_status(current)]


def can_transition(current: Union[str, MatchStatus], target: Union[str, MatchStatus]) -> bool:
    return coerce_status(target) in allowed_next(current)


def is_terminal(status: Union[str, MatchStatus]) -> bool:
    return coerce_status(status) in TERMINAL_STATUSES
