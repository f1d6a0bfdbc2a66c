"""Availability API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from coachbook.core.config import get_settings
from coachbook.modules.availability.schemas import AvailableSlotRead, AvailableSlotsResponse
from coachbook.modules.availability.service import AvailabilityResolver, get_availability_resolver
from coachbook.modules.availability.window import parse_window_bound

router = APIRouter(prefix="/booking", tags=["booking"])


@router.get("/slots", response_model=AvailableSlotsResponse, response_model_exclude_none=True)
async def list_available_slots(
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
) -> AvailableSlotsResponse:
    """List bookable slots, sorted by start."""
    zone = get_settings().coach_zone
    slots = await resolver.resolve_available_slots(
        parse_window_bound(from_, zone, end_of_day=False),
        parse_window_bound(to, zone, end_of_day=True),
    )
    return AvailableSlotsResponse(slots=[AvailableSlotRead.from_slot(slot) for slot in slots])
