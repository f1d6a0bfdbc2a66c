"""Scheduling repository layer."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coachbook.modules.booking.models import Booking
from coachbook.modules.scheduling.models import OneOffSlot, WeeklyAvailabilityBlock
from coachbook.modules.scheduling.schemas import MAX_SLOT_DURATION_MINUTES, WeeklyBlockWrite
from coachbook.shared.timeframe import Interval
from coachbook.shared.utils import isoformat_utc


class SchedulingRepository:
    """DB access for slots and the weekly availability template."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_slot(
        self,
        start_at: datetime,
        duration_minutes: int,
        title: str | None = None,
    ) -> OneOffSlot:
        slot = OneOffSlot(start_at=start_at, duration_minutes=duration_minutes, title=title)
        self.session.add(slot)
        await self.session.flush()
        await self.session.refresh(slot, attribute_names=["booking"])
        return slot

    async def lock_slot_start(self, start_at: datetime) -> None:
        """Serialize reservations of one instant until the transaction ends."""
        key = isoformat_utc(start_at)
        await self.session.execute(select(func.pg_advisory_xact_lock(func.hashtext(key))))

    async def get_slot_by_id(self, slot_id: str) -> OneOffSlot | None:
        stmt = select(OneOffSlot).options(selectinload(OneOffSlot.booking)).where(OneOffSlot.id == slot_id)
        return await self.session.scalar(stmt)

    async def slot_has_booking(self, slot_id: str) -> bool:
        stmt = select(exists().where(Booking.slot_id == slot_id))
        return bool(await self.session.scalar(stmt))

    async def delete_slot(self, slot: OneOffSlot) -> None:
        await self.session.delete(slot)
        await self.session.flush()

    async def list_one_off_slots(
        self,
        window_start: datetime,
        window_end: datetime,
        *,
        include_booked: bool = False,
    ) -> list[OneOffSlot]:
        """Slots starting inside the closed window, oldest first."""
        stmt = (
            select(OneOffSlot)
            .options(selectinload(OneOffSlot.booking))
            .where(OneOffSlot.start_at >= window_start, OneOffSlot.start_at <= window_end)
        )
        if not include_booked:
            stmt = stmt.where(~exists().where(Booking.slot_id == OneOffSlot.id))
        stmt = stmt.order_by(OneOffSlot.start_at.asc(), OneOffSlot.id.asc())
        return list((await self.session.scalars(stmt)).all())

    async def list_booked_intervals(self, window_start: datetime, window_end: datetime) -> list[Interval]:
        """Intervals of booked slots that may reach into the window."""
        stmt = (
            select(OneOffSlot.start_at, OneOffSlot.duration_minutes)
            .join(Booking, Booking.slot_id == OneOffSlot.id)
            .where(
                OneOffSlot.start_at >= window_start - timedelta(minutes=MAX_SLOT_DURATION_MINUTES),
                OneOffSlot.start_at <= window_end,
            )
        )
        rows = (await self.session.execute(stmt)).all()
        return [Interval.from_duration(start_at, duration) for start_at, duration in rows]

    async def list_weekly_blocks(self) -> list[WeeklyAvailabilityBlock]:
        stmt = select(WeeklyAvailabilityBlock).order_by(
            WeeklyAvailabilityBlock.day_of_week.asc(),
            WeeklyAvailabilityBlock.start_time.asc(),
        )
        return list((await self.session.scalars(stmt)).all())

    async def replace_weekly_blocks(self, blocks: list[WeeklyBlockWrite]) -> list[WeeklyAvailabilityBlock]:
        """Swap the whole template inside the current transaction."""
        await self.session.execute(delete(WeeklyAvailabilityBlock))
        rows = [
            WeeklyAvailabilityBlock(
                day_of_week=block.day_of_week,
                start_time=block.start_time,
                end_time=block.end_time,
                slot_duration_minutes=block.slot_duration_minutes,
            )
            for block in blocks
        ]
        self.session.add_all(rows)
        await self.session.flush()
        return sorted(rows, key=lambda row: (row.day_of_week, row.start_time))
