"""Google Calendar free/busy client."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from coachbook.core.config import Settings
from coachbook.shared.timeframe import Interval
from coachbook.shared.utils import isoformat_utc

logger = logging.getLogger(__name__)


class CalendarUnavailableError(Exception):
    """Raised when the external calendar cannot answer a request."""


def _parse_instant(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _error_reasons(errors: object) -> str:
    if not isinstance(errors, list):
        return str(errors)
    return ", ".join(
        str(error.get("reason", "unknown")) if isinstance(error, dict) else str(error) for error in errors
    )


class GoogleCalendarClient:
    """Thin async wrapper over the OAuth token and free/busy endpoints."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self.http_client = http_client
        self.settings = settings

    async def _post_json(self, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.http_client.post(url, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise CalendarUnavailableError(
                f"{url} answered {exc.response.status_code}",
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise CalendarUnavailableError(f"{url} request failed: {exc}") from exc
        except ValueError as exc:
            raise CalendarUnavailableError(f"{url} returned malformed JSON") from exc
        if not isinstance(payload, dict):
            raise CalendarUnavailableError(f"{url} returned unexpected payload")
        return payload

    async def refresh_access_token(self) -> str:
        """Exchange the configured refresh token for a short-lived access token."""
        payload = await self._post_json(
            self.settings.google_token_url,
            data={
                "client_id": self.settings.google_client_id,
                "client_secret": self.settings.google_client_secret,
                "refresh_token": self.settings.google_refresh_token,
                "grant_type": "refresh_token",
            },
        )
        access_token = payload.get("access_token")
        if not access_token:
            raise CalendarUnavailableError("Token endpoint did not return an access token")
        return str(access_token)

    async def list_busy_intervals(
        self,
        calendar_id: str,
        window_start: datetime,
        window_end: datetime,
        access_token: str,
    ) -> list[Interval]:
        """Return busy intervals of one calendar inside the window."""
        payload = await self._post_json(
            f"{self.settings.google_calendar_api_url}/freeBusy",
            json={
                "timeMin": isoformat_utc(window_start),
                "timeMax": isoformat_utc(window_end),
                "items": [{"id": calendar_id}],
            },
            headers={"Authorization": f"Bearer {access_token}"},
        )

        calendars = payload.get("calendars")
        calendar = calendars.get(calendar_id) if isinstance(calendars, dict) else None
        if not isinstance(calendar, dict):
            raise CalendarUnavailableError(f"Calendar {quote(calendar_id)} missing from free/busy answer")
        errors = calendar.get("errors") or []
        if errors:
            raise CalendarUnavailableError(
                f"Calendar {quote(calendar_id)} reported errors: {_error_reasons(errors)}",
            )

        busy = calendar.get("busy") or []
        if not isinstance(busy, list):
            raise CalendarUnavailableError(f"Calendar {quote(calendar_id)} returned malformed busy list")

        intervals: list[Interval] = []
        for item in busy:
            try:
                intervals.append(Interval(_parse_instant(item["start"]), _parse_instant(item["end"])))
            except (AttributeError, KeyError, TypeError, ValueError, OverflowError):
                logger.warning("Skipping malformed busy entry for %s: %r", calendar_id, item)
        return intervals
