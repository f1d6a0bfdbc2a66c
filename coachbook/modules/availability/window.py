"""Parsing of ``from``/``to`` query parameters into window bounds."""

from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from coachbook.shared.timeframe import day_bounds
from coachbook.shared.utils import ensure_utc

logger = logging.getLogger(__name__)


def parse_window_bound(raw: str | None, zone: ZoneInfo, *, end_of_day: bool) -> datetime | None:
    """Turn a query value into a UTC instant, or None when absent or unparsable.

    A bare ``YYYY-MM-DD`` covers the whole local day: the first instant for a
    lower bound, the last one for an upper bound. Full ISO datetimes are taken
    as given; naive ones are read in ``zone``.
    """
    if raw is None or not raw.strip():
        return None
    value = raw.strip()
    try:
        if len(value) == 10:
            start, end = day_bounds(date.fromisoformat(value), zone)
            return end if end_of_day else start
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=zone)
        return ensure_utc(parsed)
    except (ValueError, OverflowError):
        logger.info("Ignoring unparsable window bound %r", raw)
        return None
