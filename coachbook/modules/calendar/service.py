"""Fail-open busy interval lookups against the external calendar."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from time import perf_counter
from typing import Protocol

from fastapi import Request

from coachbook.core.config import Settings, get_settings
from coachbook.core.enums import BusyLookupStatusEnum
from coachbook.core.metrics import record_calendar_lookup
from coachbook.modules.calendar.client import CalendarUnavailableError, GoogleCalendarClient
from coachbook.shared.timeframe import Interval

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BusyLookup:
    """Result of a busy lookup.

    Only ``OK`` carries data. Every other status means the calendar could not
    be consulted, and callers treat that exactly like an empty busy list.
    """

    status: BusyLookupStatusEnum
    intervals: tuple[Interval, ...] = ()
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == BusyLookupStatusEnum.OK

    @classmethod
    def unavailable(cls, status: BusyLookupStatusEnum, detail: str | None = None) -> BusyLookup:
        return cls(status=status, intervals=(), detail=detail)


class BusyIntervalSource(Protocol):
    async def lookup(self, window_start: datetime, window_end: datetime) -> BusyLookup: ...


class CalendarBusyService:
    """Collect busy intervals from every configured calendar within a time budget."""

    def __init__(self, client: GoogleCalendarClient | None, settings: Settings) -> None:
        self.client = client
        self.settings = settings

    async def _fetch(
        self,
        client: GoogleCalendarClient,
        window_start: datetime,
        window_end: datetime,
    ) -> tuple[Interval, ...]:
        access_token = await client.refresh_access_token()
        per_calendar = await asyncio.gather(
            *(
                client.list_busy_intervals(calendar_id, window_start, window_end, access_token)
                for calendar_id in self.settings.google_calendar_ids
            ),
        )
        unique = {(interval.start, interval.end): interval for batch in per_calendar for interval in batch}
        return tuple(sorted(unique.values(), key=lambda interval: (interval.start, interval.end)))

    async def lookup(self, window_start: datetime, window_end: datetime) -> BusyLookup:
        """Return busy intervals, or an empty result with the reason it is empty."""
        if self.client is None or not self.settings.calendar_configured:
            record_calendar_lookup(BusyLookupStatusEnum.UNCONFIGURED, 0.0)
            return BusyLookup.unavailable(BusyLookupStatusEnum.UNCONFIGURED, "Calendar integration is not configured")

        started_at = perf_counter()
        try:
            async with asyncio.timeout(self.settings.calendar_timeout_seconds):
                intervals = await self._fetch(self.client, window_start, window_end)
        except TimeoutError:
            logger.warning(
                "Calendar busy lookup timed out after %.1fs, offering slots without it",
                self.settings.calendar_timeout_seconds,
            )
            result = BusyLookup.unavailable(BusyLookupStatusEnum.TIMEOUT, "Calendar lookup timed out")
        except CalendarUnavailableError as exc:
            logger.warning("Calendar busy lookup failed, offering slots without it: %s", exc)
            result = BusyLookup.unavailable(BusyLookupStatusEnum.FAILED, str(exc))
        except Exception as exc:
            logger.exception("Unexpected calendar busy lookup error, offering slots without it")
            result = BusyLookup.unavailable(BusyLookupStatusEnum.FAILED, f"Unexpected error: {exc!r}")
        else:
            result = BusyLookup(status=BusyLookupStatusEnum.OK, intervals=intervals)

        record_calendar_lookup(result.status, perf_counter() - started_at)
        return result


def get_calendar_busy_service(request: Request) -> CalendarBusyService:
    """Dependency provider built on the application-wide HTTP client."""
    settings = get_settings()
    http_client = getattr(request.app.state, "http_client", None)
    client = GoogleCalendarClient(http_client, settings) if http_client is not None else None
    return CalendarBusyService(client, settings)
