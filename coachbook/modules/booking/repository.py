"""Booking repository layer."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.modules.booking.models import Booking


class BookingRepository:
    """DB operations for booking domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_booking(
        self,
        slot_id: str,
        client_name: str,
        client_email: str,
        note: str | None,
        source: str,
    ) -> Booking:
        booking = Booking(
            slot_id=slot_id,
            client_name=client_name,
            client_email=client_email,
            note=note,
            source=source,
        )
        self.session.add(booking)
        await self.session.flush()
        return booking
