"""
Timezone utilities

Stored as UTC | displayed as IST (members read receipts and reminders in local time)
"""

from datetime import datetime, timezone, timedelta

# IST timezone (UTC+5:30)
IST = timezone(timedelta(hours=5, minutes=30))


def now_utc() -> datetime:
    """Current UTC time (tz-aware)"""
    return datetime.now(timezone.utc)


def now_ist() -> datetime:
    """Current IST time (tz-aware)"""
    return datetime.now(IST)


def to_ist(dt: datetime) -> datetime:
    """Convert a datetime to IST

    Args:
        dt: datetime (UTC recommended, naive is treated as UTC)

    Returns:
        datetime in IST

    Example:
        >>> utc_dt = datetime(2026, 2, 20, 20, 0, 0, tzinfo=timezone.utc)
        >>> to_ist(utc_dt).hour
        1  # next day 01:30
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(IST)


def format_ist(dt: datetime, fmt: str = "%B %d, %Y %I:%M %p") -> str:
    """Format a UTC datetime as an IST string

    Args:
        dt: datetime (UTC recommended)
        fmt: strftime format

    Returns:
        formatted IST string, e.g. "October 05, 2025 07:15 PM"
    """
    return to_ist(dt).strftime(fmt)
