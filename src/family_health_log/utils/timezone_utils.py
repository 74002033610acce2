"""
Timezone and datetime utilities.

Log timestamps are integer milliseconds since the epoch. Day boundaries are
local calendar days in the configured timezone.
"""

import time
from datetime import date, datetime, timedelta

import pytz
from dateutil import parser


def now_ms() -> int:
    """Return the current time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def to_local_datetime(timestamp_ms: int, timezone_str: str = "Asia/Shanghai") -> datetime:
    """
    Convert a millisecond timestamp to a timezone-aware local datetime.

    Args:
        timestamp_ms: Milliseconds since the epoch.
        timezone_str: Timezone string (e.g., "Asia/Shanghai").

    Returns:
        Timezone-aware datetime in the given timezone.
    """
    tz = pytz.timezone(timezone_str)
    seconds, millis = divmod(timestamp_ms, 1000)
    local = datetime.fromtimestamp(seconds, tz=tz)
    return local + timedelta(milliseconds=millis)


def local_date(timestamp_ms: int, timezone_str: str = "Asia/Shanghai") -> date:
    """Return the local calendar day a millisecond timestamp falls on."""
    return to_local_datetime(timestamp_ms, timezone_str).date()


def today(timezone_str: str = "Asia/Shanghai", clock_ms: int | None = None) -> date:
    """
    Return the current local calendar day.

    Args:
        timezone_str: Timezone string.
        clock_ms: Optional "now" in milliseconds, defaults to the system clock.

    Returns:
        Local date.
    """
    return local_date(now_ms() if clock_ms is None else clock_ms, timezone_str)


def replace_time_of_day(
    timestamp_ms: int, hours: int, minutes: int, timezone_str: str = "Asia/Shanghai"
) -> int:
    """
    Move a timestamp to a new local hour and minute on the same local date.

    Seconds and milliseconds are preserved.

    Args:
        timestamp_ms: Original timestamp in milliseconds.
        hours: New local hour (0-23).
        minutes: New local minute (0-59).
        timezone_str: Timezone string.

    Returns:
        New timestamp in milliseconds.
    """
    tz = pytz.timezone(timezone_str)
    seconds, millis = divmod(timestamp_ms, 1000)

    local = datetime.fromtimestamp(seconds, tz=tz)
    naive = local.replace(tzinfo=None, hour=hours, minute=minutes)
    # localize again so the UTC offset matches the new wall-clock time
    moved = tz.localize(naive)

    return int(moved.timestamp()) * 1000 + millis


def parse_date(date_str: str) -> date:
    """
    Parse a user-supplied date string (various formats supported).

    Args:
        date_str: Date string such as "2024-01-15" or "15 Jan 2024".

    Returns:
        Calendar date.
    """
    return parser.parse(date_str).date()
