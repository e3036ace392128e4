"""Time helpers shared by the engines.

All timestamps handled by the core are timezone-aware UTC datetimes. Callers
on the query side speak epoch milliseconds; the enrichment service speaks
epoch seconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, field_validator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Upper bound used when a query window has no explicit end.
FAR_FUTURE_MILLIS = 9_999_999_999_999

TimeBound = int | float | datetime | None


class Clock(BaseModel, frozen=True):
    now: datetime

    @field_validator("now")
    @classmethod
    def now_must_be_timezone_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("Clock value must be timezone-aware")
        return value

    @classmethod
    def system(cls) -> "Clock":
        return cls(now=datetime.now(timezone.utc))

    def start_of_day(self) -> datetime:
        """Midnight UTC of the current day."""
        now = self.now.astimezone(timezone.utc)
        return now.replace(hour=0, minute=0, second=0, microsecond=0)

    def days_before_start_of_day(self, days: int) -> datetime:
        return self.start_of_day() - timedelta(days=days)


def from_epoch_seconds(seconds: int | float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def from_epoch_millis(millis: int | float) -> datetime:
    return EPOCH + timedelta(milliseconds=millis)


def to_epoch_millis(value: datetime) -> int:
    return int((ensure_utc(value) - EPOCH) / timedelta(milliseconds=1))


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC, treating naive values as already UTC.

    SQL backends hand back naive datetimes for columns written in UTC.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_bound(value: TimeBound, default_millis: int) -> datetime:
    """Turn a caller-supplied window bound into an aware UTC datetime.

    ``None`` and ``0`` both fall back to ``default_millis``. Numbers are epoch
    milliseconds; datetimes must be timezone-aware.
    """
    if value is None or (not isinstance(value, datetime) and value == 0):
        return from_epoch_millis(default_millis)
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("window bounds must be timezone-aware datetimes")
        return value.astimezone(timezone.utc)
    return from_epoch_millis(value)
