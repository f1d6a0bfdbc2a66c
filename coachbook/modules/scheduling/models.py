"""Scheduling ORM models."""

from __future__ import annotations

from datetime import datetime, time
from functools import partial
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, SmallInteger, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coachbook.core.database import Base, TimestampMixin, generate_id

if TYPE_CHECKING:
    from coachbook.modules.booking.models import Booking


class OneOffSlot(TimestampMixin, Base):
    """Single bookable interval created by the admin."""

    __tablename__ = "booking_slots"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "slot"))
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)

    booking: Mapped[Booking | None] = relationship(back_populates="slot", uselist=False)

    @property
    def booked(self) -> bool:
        return self.booking is not None


class WeeklyAvailabilityBlock(TimestampMixin, Base):
    """Recurring weekly rule used to generate virtual slots.

    ``day_of_week`` uses 0=Sunday..6=Saturday; times are wall-clock values in
    the coach timezone.
    """

    __tablename__ = "weekly_availability"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "wa"))
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    slot_duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
