"""
Time and date utilities.

All timestamps inside the engine are timezone-aware UTC datetimes. The order
store keeps them as fixed-width ISO-8601 strings (second precision, explicit
``+00:00`` offset) so that SQL range predicates can compare them as text.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]

SECONDS_PER_DAY = 86_400


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db_timestamp(value: datetime) -> str:
    """Serialize a datetime into the store's sortable text form.

    Example: ``2026-03-01T09:30:00+00:00``.
    """
    return ensure_utc(value).isoformat(timespec="seconds")


def from_db_timestamp(value: str) -> datetime:
    """Parse a stored timestamp back into an aware UTC datetime."""
    return ensure_utc(datetime.fromisoformat(value))


def day_key(value: datetime) -> date:
    """Return the UTC calendar date used to bucket sales per day."""
    return ensure_utc(value).date()


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from ``earlier`` to ``later`` (floored)."""
    delta = ensure_utc(later) - ensure_utc(earlier)
    return int(delta.total_seconds() // SECONDS_PER_DAY)
