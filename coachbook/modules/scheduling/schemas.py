"""Scheduling schemas."""

from __future__ import annotations

from datetime import datetime, time

from pydantic import ConfigDict, Field, field_serializer

from coachbook.shared.schemas import ApiModel
from coachbook.shared.timeframe import format_time_of_day

MIN_SLOT_DURATION_MINUTES = 5
MAX_SLOT_DURATION_MINUTES = 8 * 60


class SlotCreate(ApiModel):
    """Create one-off slot request."""

    start_at: datetime
    duration_minutes: int = Field(ge=MIN_SLOT_DURATION_MINUTES, le=MAX_SLOT_DURATION_MINUTES)
    title: str | None = Field(default=None, max_length=255)


class SlotRead(ApiModel):
    """One-off slot as seen by the admin."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    start_at: datetime
    duration_minutes: int
    title: str | None
    booked: bool
    created_at: datetime


class WeeklyBlockWrite(ApiModel):
    """One weekly availability rule; times are HH:MM in the coach timezone."""

    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    slot_duration_minutes: int = Field(ge=MIN_SLOT_DURATION_MINUTES, le=MAX_SLOT_DURATION_MINUTES)


class WeeklyBlockRead(ApiModel):
    """Stored weekly availability rule."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    day_of_week: int
    start_time: time
    end_time: time
    slot_duration_minutes: int

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return format_time_of_day(value)


class WeeklyAvailabilityReplace(ApiModel):
    """Full replacement of the weekly template."""

    blocks: list[WeeklyBlockWrite] = Field(default_factory=list, max_length=100)


class WeeklyAvailabilityRead(ApiModel):
    blocks: list[WeeklyBlockRead]
