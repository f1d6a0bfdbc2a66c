"""Scheduling admin API router."""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, Query, Response, status

from coachbook.core.config import get_settings
from coachbook.modules.availability.window import parse_window_bound
from coachbook.modules.identity.service import require_admin
from coachbook.modules.scheduling.schemas import (
    SlotCreate,
    SlotRead,
    WeeklyAvailabilityRead,
    WeeklyAvailabilityReplace,
    WeeklyBlockRead,
)
from coachbook.modules.scheduling.service import SchedulingService, get_scheduling_service
from coachbook.shared.timeframe import shift_capped
from coachbook.shared.utils import utc_now

router = APIRouter(prefix="/scheduling", tags=["scheduling"], dependencies=[Depends(require_admin)])


@router.get("/slots", response_model=list[SlotRead])
async def list_slots(
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[SlotRead]:
    """List one-off slots in a window, booked ones included."""
    settings = get_settings()
    window_start = parse_window_bound(from_, settings.coach_zone, end_of_day=False) or utc_now()
    window_end = parse_window_bound(to, settings.coach_zone, end_of_day=True) or shift_capped(
        window_start,
        timedelta(days=settings.booking_default_window_days),
    )
    slots = await service.list_slots(window_start, window_end)
    return [SlotRead.model_validate(slot) for slot in slots]


@router.post("/slots", response_model=SlotRead, status_code=status.HTTP_201_CREATED)
async def create_slot(
    payload: SlotCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> SlotRead:
    """Create one-off slot."""
    slot = await service.create_slot(payload)
    return SlotRead.model_validate(slot)


@router.delete("/slots/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slot(
    slot_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
) -> Response:
    """Delete a slot that has no booking."""
    await service.delete_slot(slot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/weekly-availability", response_model=WeeklyAvailabilityRead)
async def get_weekly_availability(
    service: SchedulingService = Depends(get_scheduling_service),
) -> WeeklyAvailabilityRead:
    """Return the weekly availability template."""
    blocks = await service.get_weekly_availability()
    return WeeklyAvailabilityRead(blocks=[WeeklyBlockRead.model_validate(block) for block in blocks])


@router.put("/weekly-availability", response_model=WeeklyAvailabilityRead)
async def save_weekly_availability(
    payload: WeeklyAvailabilityReplace,
    service: SchedulingService = Depends(get_scheduling_service),
) -> WeeklyAvailabilityRead:
    """Replace the weekly availability template as a whole."""
    blocks = await service.save_weekly_availability(payload)
    return WeeklyAvailabilityRead(blocks=[WeeklyBlockRead.model_validate(block) for block in blocks])
