"""
Timezone-safe datetime utilities.

All timestamps are stored in UTC. SQLite drops timezone info on the way back,
so values read from the database go through ensure_utc before comparison.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Return current UTC datetime with timezone info attached.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Convert any datetime to UTC.

    If the datetime is naive (no timezone info), it's assumed to be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def seconds_until(dt: Optional[datetime], now: Optional[datetime] = None) -> float:
    """Seconds from now until dt; negative once dt has passed, -inf when dt is unknown."""
    if dt is None:
        return float("-inf")
    now = now or utc_now()
    return (ensure_utc(dt) - now).total_seconds()


def is_older_than(dt: Optional[datetime], seconds: int, now: Optional[datetime] = None) -> bool:
    """True when dt is missing or more than `seconds` in the past."""
    if dt is None:
        return True
    now = now or utc_now()
    return now - ensure_utc(dt) > timedelta(seconds=seconds)


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert datetime to ISO8601 UTC string with 'Z' suffix.

    Example:
        >>> serialize_datetime(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))
        '2024-01-01T12:00:00Z'
    """
    if dt is None:
        return None

    iso_string = ensure_utc(dt).isoformat()
    if iso_string.endswith('+00:00'):
        iso_string = iso_string[:-6] + 'Z'
    return iso_string
