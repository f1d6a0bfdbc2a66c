"""Booking business logic layer."""

from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.core.config import get_settings
from coachbook.core.database import get_db_session
from coachbook.modules.availability.generator import is_weekly_slot_id
from coachbook.modules.availability.service import AvailabilityResolver
from coachbook.modules.booking.models import Booking
from coachbook.modules.booking.repository import BookingRepository
from coachbook.modules.booking.schemas import ReserveRequest
from coachbook.modules.calendar.service import BusyIntervalSource, get_calendar_busy_service
from coachbook.modules.scheduling.models import OneOffSlot
from coachbook.modules.scheduling.repository import SchedulingRepository
from coachbook.shared.exceptions import BusinessRuleException, ConflictException, NotFoundException
from coachbook.shared.utils import utc_now

logger = logging.getLogger(__name__)
settings = get_settings()


class BookingService:
    """Reservation write path. Availability is re-checked at write time."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        scheduling_repository: SchedulingRepository,
        resolver: AvailabilityResolver,
    ) -> None:
        self.booking_repository = booking_repository
        self.scheduling_repository = scheduling_repository
        self.resolver = resolver

    async def _materialize_weekly_slot(self, payload: ReserveRequest) -> OneOffSlot:
        if payload.start_at is None or payload.duration_minutes is None:
            raise BusinessRuleException("Weekly slot reservation needs start_at and duration_minutes")

        # Transaction-scoped lock on the instant; released at commit.
        await self.scheduling_repository.lock_slot_start(payload.start_at)
        offered = await self.resolver.find_offered_slot(
            payload.slot_id,
            payload.start_at,
            payload.duration_minutes,
        )
        if offered is None:
            raise ConflictException("Slot is no longer available")

        return await self.scheduling_repository.create_slot(offered.start_at, offered.duration_minutes)

    async def _load_one_off_slot(self, slot_id: str) -> OneOffSlot:
        slot = await self.scheduling_repository.get_slot_by_id(slot_id)
        if slot is None:
            raise NotFoundException("Slot not found")
        if await self.scheduling_repository.slot_has_booking(slot_id):
            raise ConflictException("Slot is already booked")
        if slot.start_at <= utc_now():
            raise ConflictException("Slot has already started")
        return slot

    async def reserve(self, payload: ReserveRequest) -> tuple[Booking, OneOffSlot]:
        """Book a one-off slot, or materialize and book a generated one."""
        if is_weekly_slot_id(payload.slot_id):
            slot = await self._materialize_weekly_slot(payload)
        else:
            slot = await self._load_one_off_slot(payload.slot_id)

        try:
            booking = await self.booking_repository.create_booking(
                slot_id=slot.id,
                client_name=payload.name,
                client_email=str(payload.email).lower(),
                note=payload.note,
                source=payload.source or settings.booking_default_source,
            )
        except IntegrityError as exc:
            raise ConflictException("Slot is already booked") from exc

        logger.info("Booking %s created for slot %s", booking.id, slot.id)
        return booking, slot


async def get_booking_service(
    session: AsyncSession = Depends(get_db_session),
    busy_source: BusyIntervalSource = Depends(get_calendar_busy_service),
) -> BookingService:
    """Dependency provider for booking service."""
    scheduling_repository = SchedulingRepository(session)
    return BookingService(
        booking_repository=BookingRepository(session),
        scheduling_repository=scheduling_repository,
        resolver=AvailabilityResolver(
            scheduling_repository,
            busy_source,
            zone=settings.coach_zone,
            default_window_days=settings.booking_default_window_days,
        ),
    )
