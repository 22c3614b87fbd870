"""Utilities for consistent timezone-aware datetime handling.

Every timestamp persisted in the registry snapshot is an aware UTC
datetime, so values written by one run always compare cleanly with
values read back by the next.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

# Default timezone for the application
UTC = ZoneInfo("UTC")


def now_utc() -> datetime:
    """Get the current time as a timezone-aware datetime in UTC.

    Returns:
        Timezone-aware datetime object in UTC
    """
    return datetime.now(UTC)


def ensure_aware(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware, converting if necessary.

    Naive datetimes are assumed to already be in UTC.

    Args:
        dt: Datetime object or None

    Returns:
        Timezone-aware datetime or None if input is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
