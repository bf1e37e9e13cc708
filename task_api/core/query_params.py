"""
Query-string coercion for list endpoints.

Invalid or out-of-range values fall back to defaults instead of failing the
request.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .utils import parse_iso


def to_int(value: str | None) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def to_bool(value: str | None) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in {"true", "1"}:
        return True
    if lowered in {"false", "0"}:
        return False
    return None


def to_str(value: str | None, fallback: Optional[str] = None) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def to_datetime(value: str | None) -> Optional[datetime]:
    return parse_iso(value)


def in_range(value: Optional[int], minimum: int = 1, maximum: int = 100, default: Optional[int] = None) -> Optional[int]:
    if value is None or value < minimum or value > maximum:
        return default
    return value
