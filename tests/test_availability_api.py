from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import UTC, datetime, time
from zoneinfo import ZoneInfo

import httpx
import pytest
import pytest_asyncio

import coachbook.modules.availability.service as availability_service_module
from coachbook.core.enums import BusyLookupStatusEnum, RoleEnum
from coachbook.core.security import create_access_token
from coachbook.main import app
from coachbook.modules.availability.service import AvailabilityResolver, get_availability_resolver
from coachbook.modules.booking.service import get_booking_service
from coachbook.modules.calendar.service import BusyLookup
from coachbook.modules.scheduling.service import get_scheduling_service
from coachbook.shared.exceptions import ConflictException
from coachbook.shared.timeframe import Interval

PRAGUE = ZoneInfo("Europe/Prague")
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeOneOffSlot:
    id: str
    start_at: datetime
    duration_minutes: int
    title: str | None = None


@dataclass
class FakeWeeklyBlock:
    id: str
    day_of_week: int
    start_time: time
    end_time: time
    slot_duration_minutes: int


class FakeSlotStore:
    def __init__(self, *, broken: bool = False) -> None:
        self.broken = broken
        self.windows: list[tuple[datetime, datetime]] = []

    async def list_one_off_slots(self, window_start: datetime, window_end: datetime) -> list[FakeOneOffSlot]:
        if self.broken:
            raise RuntimeError("connection refused")
        self.windows.append((window_start, window_end))
        slot = FakeOneOffSlot("slot_intro", datetime(2026, 3, 2, 17, 0, tzinfo=UTC), 45, "Intro call")
        return [slot] if window_start <= slot.start_at <= window_end else []

    async def list_booked_intervals(self, window_start: datetime, window_end: datetime) -> list[Interval]:
        return []

    async def list_weekly_blocks(self) -> list[FakeWeeklyBlock]:
        return [FakeWeeklyBlock("wa_1", 1, time(9, 0), time(10, 0), 60)]


class UnavailableBusySource:
    async def lookup(self, window_start: datetime, window_end: datetime) -> BusyLookup:
        return BusyLookup.unavailable(BusyLookupStatusEnum.TIMEOUT)


class FakeSchedulingService:
    def __init__(self) -> None:
        self.deleted: list[str] = []

    async def get_weekly_availability(self) -> list[FakeWeeklyBlock]:
        return [FakeWeeklyBlock("wa_1", 1, time(9, 0), time(12, 0), 60)]

    async def delete_slot(self, slot_id: str) -> None:
        if slot_id == "slot_booked":
            raise ConflictException("Slot already has a booking and cannot be deleted")
        self.deleted.append(slot_id)


@pytest.fixture(autouse=True)
def fixed_now(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(availability_service_module, "utc_now", lambda: NOW)


@pytest.fixture()
def slot_store() -> FakeSlotStore:
    return FakeSlotStore()


@pytest_asyncio.fixture()
async def client(slot_store: FakeSlotStore) -> AsyncIterator[httpx.AsyncClient]:
    app.dependency_overrides[get_availability_resolver] = lambda: AvailabilityResolver(
        slot_store,
        UnavailableBusySource(),
        zone=PRAGUE,
    )
    app.dependency_overrides[get_scheduling_service] = FakeSchedulingService
    app.dependency_overrides[get_booking_service] = lambda: None
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as api_client:
        yield api_client
    app.dependency_overrides.clear()


def admin_headers() -> dict[str, str]:
    token = create_access_token(subject="admin", role=RoleEnum.ADMIN.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_public_slot_listing_uses_camel_case_and_utc_instants(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/booking/slots", params={"from": "2026-03-02", "to": "2026-03-02"})

    assert response.status_code == 200
    assert response.json() == {
        "slots": [
            {"id": "weekly_2026-03-02T08:00:00.000Z", "startAt": "2026-03-02T08:00:00.000Z", "durationMinutes": 60},
            {
                "id": "slot_intro",
                "startAt": "2026-03-02T17:00:00.000Z",
                "durationMinutes": 45,
                "title": "Intro call",
            },
        ],
    }


@pytest.mark.asyncio
async def test_unparseable_window_falls_back_to_defaults(
    client: httpx.AsyncClient,
    slot_store: FakeSlotStore,
) -> None:
    response = await client.get("/api/booking/slots", params={"from": "yesterday", "to": "soon"})

    assert response.status_code == 200
    assert slot_store.windows == [(NOW, datetime(2026, 3, 15, 12, 0, tzinfo=UTC))]


@pytest.mark.asyncio
async def test_inverted_window_returns_empty_list(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/booking/slots", params={"from": "2026-03-10", "to": "2026-03-05"})

    assert response.status_code == 200
    assert response.json() == {"slots": []}


@pytest.mark.asyncio
async def test_store_failure_returns_generic_error_body(client: httpx.AsyncClient) -> None:
    app.dependency_overrides[get_availability_resolver] = lambda: AvailabilityResolver(
        FakeSlotStore(broken=True),
        UnavailableBusySource(),
        zone=PRAGUE,
    )

    response = await client.get("/api/booking/slots")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "code": "internal_error"}


@pytest.mark.asyncio
async def test_admin_endpoints_require_bearer_token(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/scheduling/weekly-availability")

    assert response.status_code == 401
    assert response.json()["code"] == "http_error"


@pytest.mark.asyncio
async def test_admin_endpoints_reject_forged_token(client: httpx.AsyncClient) -> None:
    response = await client.get(
        "/api/scheduling/weekly-availability",
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_reads_weekly_template(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/scheduling/weekly-availability", headers=admin_headers())

    assert response.status_code == 200
    assert response.json() == {
        "blocks": [
            {"id": "wa_1", "dayOfWeek": 1, "startTime": "09:00", "endTime": "12:00", "slotDurationMinutes": 60},
        ],
    }


@pytest.mark.asyncio
async def test_admin_delete_of_booked_slot_is_conflict(client: httpx.AsyncClient) -> None:
    response = await client.delete("/api/scheduling/slots/slot_booked", headers=admin_headers())

    assert response.status_code == 409
    assert response.json() == {
        "error": "Slot already has a booking and cannot be deleted",
        "code": "conflict",
    }


@pytest.mark.asyncio
async def test_reserve_validation_error_uses_error_body(client: httpx.AsyncClient) -> None:
    response = await client.post("/api/booking/reserve", json={"slotId": "slot_intro", "name": "Jana"})

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert "email" in body["error"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"to": "0001-01-01"},
        {"from": "9999-12-31"},
        {"from": "0001-01-01T00:00:00"},
    ],
)
async def test_out_of_range_dates_fall_back_to_defaults(
    client: httpx.AsyncClient,
    slot_store: FakeSlotStore,
    params: dict[str, str],
) -> None:
    response = await client.get("/api/booking/slots", params=params)

    assert response.status_code == 200
    assert slot_store.windows == [(NOW, datetime(2026, 3, 15, 12, 0, tzinfo=UTC))]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"from": "9999-12-25T00:00:00"},
        {"from": "9999-12-29", "to": "9999-12-31T23:59:59Z"},
        {"from": "9999-12-31T12:00:00Z"},
    ],
)
async def test_windows_near_end_of_calendar_do_not_fail(
    client: httpx.AsyncClient,
    slot_store: FakeSlotStore,
    params: dict[str, str],
) -> None:
    response = await client.get("/api/booking/slots", params=params)

    assert response.status_code == 200
    assert all(window_end <= datetime(9999, 12, 30, tzinfo=UTC) for _, window_end in slot_store.windows)
