"""Booking ORM models."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coachbook.core.database import Base, TimestampMixin, generate_id

if TYPE_CHECKING:
    from coachbook.modules.scheduling.models import OneOffSlot


class Booking(TimestampMixin, Base):
    """Client reservation of one slot."""

    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "booking"))
    slot_id: Mapped[str] = mapped_column(
        ForeignKey("booking_slots.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(64), nullable=False)

    slot: Mapped["OneOffSlot"] = relationship(back_populates="booking")
