"""Shared JSON serialization utilities for type-safe JSON encoding."""

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, timedelta):
        return True, obj.total_seconds()
    if isinstance(obj, Path):
        return True, str(obj)
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    Type-safe JSON serializer for log records.

    Keeps numeric values numeric instead of converting everything to strings:
    - datetime/date -> ISO 8601 string
    - timedelta -> seconds as float
    - Path -> string
    - Enums -> value
    - Everything else -> string (fallback)

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if hasattr(obj, "value"):
        return obj.value
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    return str(obj)


__all__ = ["json_serializer"]
