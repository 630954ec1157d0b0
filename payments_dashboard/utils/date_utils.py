"""Date manipulation utilities"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple


def day_bounds(start: Optional[date], end: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    UTC instants bounding an inclusive calendar-day range.

    Returns (start of the first day, start of the day after the last day);
    either side is None when that end of the range is open.
    """
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc) if end else None
    return lower, upper


def in_day_range(instant: datetime, start: Optional[date], end: Optional[date]) -> bool:
    """Whether an instant falls on or between two calendar days (UTC)"""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    lower, upper = day_bounds(start, end)
    if lower is not None and instant < lower:
        return False
    if upper is not None and instant >= upper:
        return False
    return True
