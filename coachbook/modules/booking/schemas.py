"""Booking schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from coachbook.modules.scheduling.schemas import MAX_SLOT_DURATION_MINUTES, MIN_SLOT_DURATION_MINUTES
from coachbook.shared.schemas import ApiModel


class ReserveRequest(ApiModel):
    """Reservation of an offered slot.

    ``start_at`` and ``duration_minutes`` are required for ``weekly_`` slots,
    which do not exist in the database until reserved.
    """

    slot_id: str = Field(min_length=1, max_length=128)
    start_at: datetime | None = None
    duration_minutes: int | None = Field(
        default=None,
        ge=MIN_SLOT_DURATION_MINUTES,
        le=MAX_SLOT_DURATION_MINUTES,
    )
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    note: str | None = Field(default=None, max_length=2000)
    source: str | None = Field(default=None, max_length=64)

    @field_validator("slot_id", "name")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("note", "source")
    @classmethod
    def strip_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class ReservationRead(ApiModel):
    """Created reservation."""

    booking_id: str
    slot_id: str
    start_at: str
    duration_minutes: int
