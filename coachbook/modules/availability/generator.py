"""Expansion of the weekly availability template into virtual slots."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Protocol
from zoneinfo import ZoneInfo

from coachbook.shared.timeframe import (
    Interval,
    local_days,
    local_to_utc,
    minutes_since_midnight,
    parse_time_of_day,
    weekday_sunday_first,
)
from coachbook.shared.utils import isoformat_utc

WEEKLY_SLOT_ID_PREFIX = "weekly_"


class WeeklyBlock(Protocol):
    day_of_week: int
    start_time: time | str
    end_time: time | str
    slot_duration_minutes: int


@dataclass(frozen=True, slots=True)
class GeneratedSlot:
    """Virtual slot produced from one weekly block on one day."""

    id: str
    interval: Interval
    duration_minutes: int

    @property
    def start_at(self) -> datetime:
        return self.interval.start


def weekly_slot_id(start_at: datetime) -> str:
    return f"{WEEKLY_SLOT_ID_PREFIX}{isoformat_utc(start_at)}"


def is_weekly_slot_id(slot_id: str) -> bool:
    return slot_id.startswith(WEEKLY_SLOT_ID_PREFIX)


def _as_time(value: time | str) -> time:
    return value if isinstance(value, time) else parse_time_of_day(value)


def slot_starts_for_block(day: date, block: WeeklyBlock, zone: ZoneInfo) -> Iterator[datetime]:
    """Yield UTC starts of full-length slots the block offers on ``day``.

    A trailing remainder shorter than the slot duration is dropped. Local
    times skipped by a DST transition produce no slot.
    """
    duration = block.slot_duration_minutes
    if duration <= 0:
        return
    start_minute = minutes_since_midnight(_as_time(block.start_time))
    end_minute = minutes_since_midnight(_as_time(block.end_time))
    minute = start_minute
    while minute + duration <= end_minute:
        start_at = local_to_utc(day, minute, zone)
        if start_at is not None:
            yield start_at
        minute += duration


def generate_weekly_slots(
    blocks: Iterable[WeeklyBlock],
    window_start: datetime,
    window_end: datetime,
    zone: ZoneInfo,
) -> list[GeneratedSlot]:
    """Expand blocks over every local day touched by the window.

    Slots starting before ``window_start`` or ending after ``window_end`` are
    left out. The result is ordered by day, then by block order, then by time.
    """
    blocks_by_weekday: dict[int, list[WeeklyBlock]] = {}
    for block in blocks:
        blocks_by_weekday.setdefault(block.day_of_week, []).append(block)
    if not blocks_by_weekday:
        return []

    slots: list[GeneratedSlot] = []
    for day in local_days(window_start, window_end, zone):
        for block in blocks_by_weekday.get(weekday_sunday_first(day), ()):
            for start_at in slot_starts_for_block(day, block, zone):
                interval = Interval.from_duration(start_at, block.slot_duration_minutes)
                if interval.start < window_start or interval.end > window_end:
                    continue
                slots.append(
                    GeneratedSlot(
                        id=weekly_slot_id(start_at),
                        interval=interval,
                        duration_minutes=block.slot_duration_minutes,
                    ),
                )
    return slots
