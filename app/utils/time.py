"""Utility functions for time handling.

Readings are stamped with the UTC receipt instant in the canonical
``YYYY-MM-DD HH:MM:SS`` form, which sorts lexically in time order.
"""

from __future__ import annotations

from datetime import datetime, timezone

from app.constants import EXPORT_FILE_STAMP_FORMAT, TIMESTAMP_FORMAT


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def sqlite_timestamp(dt: datetime) -> str:
    """Format a datetime as the stored ``YYYY-MM-DD HH:MM:SS`` UTC text."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(TIMESTAMP_FORMAT)


def parse_sqlite_timestamp(value: str) -> datetime | None:
    """Parse stored timestamp text back to an aware UTC datetime."""
    try:
        return datetime.strptime(value.strip(), TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except (AttributeError, ValueError):
        return None


def file_stamp(dt: datetime) -> str:
    """Compact UTC stamp used in export filenames."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(EXPORT_FILE_STAMP_FORMAT)
