"""Scheduling business logic layer."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.core.database import get_db_session
from coachbook.modules.scheduling.models import OneOffSlot, WeeklyAvailabilityBlock
from coachbook.modules.scheduling.repository import SchedulingRepository
from coachbook.modules.scheduling.schemas import SlotCreate, WeeklyAvailabilityReplace, WeeklyBlockWrite
from coachbook.shared.exceptions import BusinessRuleException, ConflictException, NotFoundException
from coachbook.shared.timeframe import format_time_of_day, minutes_since_midnight
from coachbook.shared.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _validate_block(index: int, block: WeeklyBlockWrite) -> None:
    start_minute = minutes_since_midnight(block.start_time)
    end_minute = minutes_since_midnight(block.end_time)
    label = f"Block {index + 1} ({format_time_of_day(block.start_time)}-{format_time_of_day(block.end_time)})"
    if block.start_time.second or block.end_time.second:
        raise BusinessRuleException(f"{label}: times must be whole minutes")
    if end_minute <= start_minute:
        raise BusinessRuleException(f"{label}: end_time must be after start_time")
    if block.slot_duration_minutes > end_minute - start_minute:
        raise BusinessRuleException(f"{label}: slot duration is longer than the block")


class SchedulingService:
    """Admin operations on one-off slots and the weekly template."""

    def __init__(self, repository: SchedulingRepository) -> None:
        self.repository = repository

    async def create_slot(self, payload: SlotCreate) -> OneOffSlot:
        """Create a one-off slot in the future."""
        start_at = ensure_utc(payload.start_at)
        if start_at <= utc_now():
            raise BusinessRuleException("Slot start_at must be in the future")

        slot = await self.repository.create_slot(start_at, payload.duration_minutes, payload.title)
        logger.info("Created slot %s at %s", slot.id, start_at.isoformat())
        return slot

    async def delete_slot(self, slot_id: str) -> None:
        """Delete a slot unless somebody already booked it."""
        slot = await self.repository.get_slot_by_id(slot_id)
        if slot is None:
            raise NotFoundException("Slot not found")
        if await self.repository.slot_has_booking(slot_id):
            raise ConflictException("Slot already has a booking and cannot be deleted")
        await self.repository.delete_slot(slot)
        logger.info("Deleted slot %s", slot_id)

    async def list_slots(self, window_start: datetime, window_end: datetime) -> list[OneOffSlot]:
        """List all one-off slots in the window, booked ones included."""
        return await self.repository.list_one_off_slots(
            ensure_utc(window_start),
            ensure_utc(window_end),
            include_booked=True,
        )

    async def get_weekly_availability(self) -> list[WeeklyAvailabilityBlock]:
        return await self.repository.list_weekly_blocks()

    async def save_weekly_availability(self, payload: WeeklyAvailabilityReplace) -> list[WeeklyAvailabilityBlock]:
        """Validate every block first, then replace the template as a whole."""
        for index, block in enumerate(payload.blocks):
            _validate_block(index, block)

        blocks = await self.repository.replace_weekly_blocks(payload.blocks)
        logger.info("Weekly availability replaced with %d blocks", len(blocks))
        return blocks


async def get_scheduling_service(session: AsyncSession = Depends(get_db_session)) -> SchedulingService:
    """Dependency provider for scheduling service."""
    return SchedulingService(SchedulingRepository(session))
