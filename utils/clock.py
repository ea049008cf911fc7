"""
utils/clock.py
--------------
Time source. Services receive a clock callable instead of calling
datetime.now() directly, so jobs and tests can control "now".
"""

from datetime import date, datetime, time, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def as_datetime(value: date | datetime) -> datetime:
    """Promote a date to midnight UTC; make datetimes timezone-aware."""
    if isinstance(value, datetime):
        return ensure_aware(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)
