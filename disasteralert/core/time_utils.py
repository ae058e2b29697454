"""
DisasterAlert - Time Utilities
Formatting of timestamps shown to reporters and responders.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from disasteralert.core.config import settings

DISPLAY_FORMAT = "%d-%m-%Y %I:%M:%S %p"


def display_timezone(offset_minutes: Optional[int] = None) -> timezone:
    """Fixed-offset display timezone (UTC+05:30 unless configured otherwise)."""
    minutes = settings.display_utc_offset_minutes if offset_minutes is None else offset_minutes
    return timezone(timedelta(minutes=minutes))


def utcnow() -> datetime:
    """Naive UTC now, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_display_datetime(
    value: Optional[datetime] = None,
    offset_minutes: Optional[int] = None
) -> str:
    """
    Format a timestamp as DD-MM-YYYY HH:MM:SS AM/PM at the display offset.

    Naive datetimes are treated as UTC. None formats the current time.
    """
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    return value.astimezone(display_timezone(offset_minutes)).strftime(DISPLAY_FORMAT)
