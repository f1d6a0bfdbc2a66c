"""Calendar and interval value types with explicit timezone handling.

All instants handled here are timezone-aware. Wall-clock values (a date plus
a time of day) only become instants through ``local_to_utc``, which resolves
them in a named IANA zone and refuses local times that a DST transition
skips.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from coachbook.shared.utils import ensure_utc

MINUTES_PER_DAY = 24 * 60

# Upper bound for window arithmetic; leaves room for zone offsets and slot lengths.
LATEST_INSTANT = datetime(9999, 12, 30, tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class Interval:
    """Half-open ``[start, end)`` range of UTC instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        if self.end < self.start:
            raise ValueError("Interval end must not precede its start")

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> Interval:
        return cls(start, ensure_utc(start) + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: Interval) -> bool:
        """True when both ranges share at least one instant; touching ends do not count."""
        return self.start < other.end and self.end > other.start

    def overlaps_any(self, others: Iterable[Interval]) -> bool:
        return any(self.overlaps(other) for other in others)


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:MM`` (or ``HH:MM:SS`` as stored by Postgres ``time``)."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def format_time_of_day(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def minutes_since_midnight(value: time) -> int:
    return value.hour * 60 + value.minute


def weekday_sunday_first(day: date) -> int:
    """Weekday number with 0=Sunday..6=Saturday."""
    return (day.weekday() + 1) % 7


def local_days(window_start: datetime, window_end: datetime, zone: ZoneInfo) -> Iterator[date]:
    """Yield every local calendar day touched by the window, both ends inclusive."""
    day = ensure_utc(window_start).astimezone(zone).date()
    last_day = ensure_utc(window_end).astimezone(zone).date()
    while day <= last_day:
        yield day
        day += timedelta(days=1)


def local_to_utc(day: date, minute_of_day: int, zone: ZoneInfo) -> datetime | None:
    """Resolve a wall-clock time on ``day`` to a UTC instant.

    Returns None when the local time does not exist in ``zone`` (spring
    forward gap). Ambiguous times (fall back) resolve to the first
    occurrence.
    """
    if not 0 <= minute_of_day < MINUTES_PER_DAY:
        raise ValueError(f"Minute of day out of range: {minute_of_day}")
    naive = datetime.combine(day, time(minute_of_day // 60, minute_of_day % 60))
    local = naive.replace(tzinfo=zone, fold=0)
    instant = local.astimezone(UTC)
    if instant.astimezone(zone).replace(tzinfo=None) != naive:
        return None
    return instant


def day_bounds(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the first and last instant of a local calendar day in UTC."""
    start = datetime.combine(day, time.min).replace(tzinfo=zone).astimezone(UTC)
    next_start = datetime.combine(day + timedelta(days=1), time.min).replace(tzinfo=zone).astimezone(UTC)
    return start, next_start - timedelta(microseconds=1)


def shift_capped(instant: datetime, delta: timedelta) -> datetime:
    """Return ``instant + delta``, never later than ``LATEST_INSTANT``."""
    try:
        shifted = ensure_utc(instant) + delta
    except OverflowError:
        return LATEST_INSTANT
    return min(shifted, LATEST_INSTANT)
