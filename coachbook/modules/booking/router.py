"""Booking API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from coachbook.modules.booking.schemas import ReservationRead, ReserveRequest
from coachbook.modules.booking.service import BookingService, get_booking_service
from coachbook.shared.utils import isoformat_utc

router = APIRouter(prefix="/booking", tags=["booking"])


@router.post("/reserve", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def reserve_slot(
    payload: ReserveRequest,
    service: BookingService = Depends(get_booking_service),
) -> ReservationRead:
    """Reserve an offered slot."""
    booking, slot = await service.reserve(payload)
    return ReservationRead(
        booking_id=booking.id,
        slot_id=slot.id,
        start_at=isoformat_utc(slot.start_at),
        duration_minutes=slot.duration_minutes,
    )
