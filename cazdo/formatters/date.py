"""Date and time formatting utilities."""

from datetime import datetime, timezone
from typing import Optional

_UNITS = [
    (365 * 24 * 3600, "year"),
    (30 * 24 * 3600, "month"),
    (7 * 24 * 3600, "week"),
    (24 * 3600, "day"),
    (3600, "hour"),
    (60, "minute"),
]


def format_relative_time(when: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format a timestamp relative to now.

    Args:
        when: Timestamp to format (naive values are treated as UTC)
        now: Reference time, defaults to the current time

    Returns:
        Text such as "3 days ago", "just now" or "unknown"
    """
    if when is None:
        return "unknown"

    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return "just now"

    for unit_seconds, unit in _UNITS:
        if seconds >= unit_seconds:
            count = seconds // unit_seconds
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"
