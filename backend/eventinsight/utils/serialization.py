"""Serialization utilities for converting models to API responses."""
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID


def serialize_uuid(value: Optional[UUID]) -> Optional[str]:
    """Serialize UUID to string."""
    return str(value) if value else None


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive values are taken to be UTC already: backends without timezone
    support (SQLite) hand timestamps back naive, and everything this
    application writes is UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def serialize_datetime(value: Optional[datetime]) -> Optional[str]:
    """
    Serialize datetime to ISO format string.

    Args:
        value: Datetime value or None

    Returns:
        ISO format string (UTC) or None
    """
    value = as_utc(value)
    return value.isoformat() if value else None


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)
