#!/usr/bin/env python3
"""
Conversions from ORM values to JSON-friendly response fields.
"""

from decimal import Decimal
from typing import Optional, Any
from datetime import datetime


def safe_float(value: Optional[Any], default: float = 0.0) -> float:
    """Numeric(5,2) columns come back as Decimal; None and junk become default."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def status_value(status: Any) -> Optional[str]:
    """Plain string for a MatchStatus member or a raw status string."""
    if status is None:
        return None
    return getattr(status, 'value', status)
