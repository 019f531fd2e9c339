#!/usr/bin/env python3
"""
Vector validation, applied at the persistence boundary before any write.
"""

import math
from numbers import Real
from collections.abc import Mapping
from typing import Any, Dict

from core.match_engine.exceptions import InvalidInput


def validate_vector(vector: Any, name: str) -> Dict[str, float]:
    """
    Check that a requirement/skill vector maps technology names to finite,
    non-negative numbers.

    Returns:
        A plain dict copy with float values

    Raises:
        InvalidInput: If the vector is malformed
    """
    if vector is None:
        return {}
    if not isinstance(vector, Mapping):
        raise InvalidInput(f"{name} must be a mapping of technology to number, got {type(vector).__name__}")

    cleaned = {}
    for key, value in vector.items():
        if not isinstance(key, str) or not key:
            raise InvalidInput(f"{name} has an invalid technology name: {key!r}")
        # bool is a Real subclass; True/False is never a meaningful weight
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidInput(f"{name}[{key!r}] must be a number, got {value!r}")
        value = float(value)
        if not math.isfinite(value):
            raise InvalidInput(f"{name}[{key!r}] must be finite, got {value!r}")
        if value < 0:
            raise InvalidInput(f"{name}[{key!r}] must not be negative, got {value!r}")
        cleaned[key] = value
    return cleaned
