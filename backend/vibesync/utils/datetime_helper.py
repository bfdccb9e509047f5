"""Utility functions for datetime operations."""

from datetime import datetime, UTC


def utc_now():
    """Return the current UTC datetime in a timezone-aware format."""
    return datetime.now(UTC)


def timestamp_ms(dt=None) -> int:
    """Return milliseconds since the epoch for ``dt`` (defaults to now)."""
    if dt is None:
        dt = utc_now()
    return int(dt.timestamp() * 1000)
