"""JSON fallback serialization for structured log records."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date, time)):
        return True, obj.isoformat()
    if isinstance(obj, timedelta):
        return True, obj.total_seconds()
    if isinstance(obj, Decimal):
        return True, float(obj)
    if isinstance(obj, (PurePath, UUID, ZoneInfo)):
        return True, str(obj)
    if isinstance(obj, Enum):
        return True, obj.value
    if isinstance(obj, (set, frozenset)):
        return True, sorted(obj, key=str)
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    ``default=`` hook for json.dumps.

    Keeps numbers numeric instead of stringifying everything:
    - datetime/date/time -> ISO 8601 string
    - timedelta -> seconds as float
    - Decimal -> float
    - Path, UUID, ZoneInfo -> string
    - Enum -> value
    - set -> sorted list
    - pydantic models -> dict
    - everything else -> string
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    return str(obj)


__all__ = ["json_serializer"]
