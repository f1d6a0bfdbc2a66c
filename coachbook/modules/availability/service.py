"""Availability resolution: one-off slots, weekly template and calendar busy time."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.core.config import get_settings
from coachbook.core.database import get_db_session
from coachbook.core.enums import SlotSourceEnum
from coachbook.modules.availability.generator import WeeklyBlock, generate_weekly_slots
from coachbook.modules.calendar.service import BusyIntervalSource, get_calendar_busy_service
from coachbook.modules.scheduling.repository import SchedulingRepository
from coachbook.shared.timeframe import LATEST_INSTANT, Interval, shift_capped
from coachbook.shared.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class OneOffSlotRecord(Protocol):
    id: str
    start_at: datetime
    duration_minutes: int
    title: str | None


class SlotStore(Protocol):
    """Read side of the slot store used by the resolver."""

    async def list_one_off_slots(self, window_start: datetime, window_end: datetime) -> Sequence[OneOffSlotRecord]: ...

    async def list_booked_intervals(self, window_start: datetime, window_end: datetime) -> Sequence[Interval]: ...

    async def list_weekly_blocks(self) -> Sequence[WeeklyBlock]: ...


@dataclass(frozen=True, slots=True)
class AvailableSlot:
    """Slot offered to clients."""

    id: str
    start_at: datetime
    duration_minutes: int
    source: SlotSourceEnum
    title: str | None = None


@dataclass(frozen=True, slots=True)
class _StoreInputs:
    one_off_slots: Sequence[OneOffSlotRecord]
    booked_intervals: Sequence[Interval]
    weekly_blocks: Sequence[WeeklyBlock]


class AvailabilityResolver:
    """Compute bookable slots for a window. Stateless; nothing is cached."""

    def __init__(
        self,
        store: SlotStore,
        busy_source: BusyIntervalSource,
        *,
        zone: ZoneInfo,
        default_window_days: int = 14,
    ) -> None:
        self.store = store
        self.busy_source = busy_source
        self.zone = zone
        self.default_window_days = default_window_days

    def effective_window(
        self,
        window_start: datetime | None,
        window_end: datetime | None,
    ) -> tuple[datetime, datetime]:
        """Clamp the start to now and fill in the default end."""
        now = utc_now()
        start = now if window_start is None else max(ensure_utc(window_start), now)
        start = min(start, LATEST_INSTANT)
        if window_end is None:
            end = shift_capped(start, timedelta(days=self.default_window_days))
        else:
            end = min(ensure_utc(window_end), LATEST_INSTANT)
        return start, end

    async def _load_store_inputs(self, window_start: datetime, window_end: datetime) -> _StoreInputs:
        # One session per request: these reads must not overlap each other.
        one_off_slots = await self.store.list_one_off_slots(window_start, window_end)
        booked_intervals = await self.store.list_booked_intervals(window_start, window_end)
        weekly_blocks = await self.store.list_weekly_blocks()
        return _StoreInputs(one_off_slots, booked_intervals, weekly_blocks)

    async def resolve_available_slots(
        self,
        window_start: datetime | None = None,
        window_end: datetime | None = None,
    ) -> list[AvailableSlot]:
        """Return offered slots sorted by start, with unique ids and start instants."""
        start, end = self.effective_window(window_start, window_end)
        if end <= start:
            return []

        inputs, busy = await asyncio.gather(
            self._load_store_inputs(start, end),
            self.busy_source.lookup(start, end),
        )
        if not busy.ok:
            logger.info("Resolving slots without calendar data (%s)", busy.status)
        busy_intervals = busy.intervals

        offered: list[AvailableSlot] = []
        claimed_starts: set[datetime] = set()
        offered_starts: set[datetime] = set()

        for slot in inputs.one_off_slots:
            interval = Interval.from_duration(slot.start_at, slot.duration_minutes)
            claimed_starts.add(interval.start)
            if interval.start in offered_starts or interval.overlaps_any(busy_intervals):
                continue
            offered_starts.add(interval.start)
            offered.append(
                AvailableSlot(
                    id=slot.id,
                    start_at=interval.start,
                    duration_minutes=slot.duration_minutes,
                    source=SlotSourceEnum.ONE_OFF,
                    title=slot.title,
                ),
            )

        blockers = (*busy_intervals, *inputs.booked_intervals)
        for generated in generate_weekly_slots(inputs.weekly_blocks, start, end, self.zone):
            if generated.start_at in claimed_starts or generated.start_at in offered_starts:
                continue
            if generated.interval.overlaps_any(blockers):
                continue
            offered_starts.add(generated.start_at)
            offered.append(
                AvailableSlot(
                    id=generated.id,
                    start_at=generated.start_at,
                    duration_minutes=generated.duration_minutes,
                    source=SlotSourceEnum.WEEKLY,
                ),
            )

        offered.sort(key=lambda slot: slot.start_at)
        return offered

    async def find_offered_slot(self, slot_id: str, start_at: datetime, duration_minutes: int) -> AvailableSlot | None:
        """Return the slot if it is still offered at exactly this start and length."""
        start_at = ensure_utc(start_at)
        window_end = shift_capped(start_at, timedelta(minutes=duration_minutes))
        for slot in await self.resolve_available_slots(start_at, window_end):
            if slot.id == slot_id and slot.start_at == start_at and slot.duration_minutes == duration_minutes:
                return slot
        return None


async def get_availability_resolver(
    session: AsyncSession = Depends(get_db_session),
    busy_source: BusyIntervalSource = Depends(get_calendar_busy_service),
) -> AvailabilityResolver:
    """Dependency provider for the availability resolver."""
    settings = get_settings()
    return AvailabilityResolver(
        SchedulingRepository(session),
        busy_source,
        zone=settings.coach_zone,
        default_window_days=settings.booking_default_window_days,
    )
