"""Availability schemas."""

from __future__ import annotations

from coachbook.modules.availability.service import AvailableSlot
from coachbook.shared.schemas import ApiModel
from coachbook.shared.utils import isoformat_utc


class AvailableSlotRead(ApiModel):
    """Bookable slot in the public listing."""

    id: str
    start_at: str
    duration_minutes: int
    title: str | None = None

    @classmethod
    def from_slot(cls, slot: AvailableSlot) -> AvailableSlotRead:
        return cls(
            id=slot.id,
            start_at=isoformat_utc(slot.start_at),
            duration_minutes=slot.duration_minutes,
            title=slot.title,
        )


class AvailableSlotsResponse(ApiModel):
    slots: list[AvailableSlotRead]
