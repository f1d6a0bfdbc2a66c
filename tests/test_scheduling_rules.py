from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta

import pytest
from pydantic import ValidationError

import coachbook.modules.scheduling.service as scheduling_service_module
from coachbook.modules.scheduling.schemas import (
    SlotCreate,
    WeeklyAvailabilityReplace,
    WeeklyBlockRead,
    WeeklyBlockWrite,
)
from coachbook.modules.scheduling.service import SchedulingService
from coachbook.shared.exceptions import BusinessRuleException, ConflictException, NotFoundException

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeSlot:
    id: str
    start_at: datetime
    duration_minutes: int
    title: str | None = None


@dataclass
class FakeBlock:
    id: str
    day_of_week: int
    start_time: time
    end_time: time
    slot_duration_minutes: int


@dataclass
class FakeSchedulingRepository:
    slots: dict[str, FakeSlot] = field(default_factory=dict)
    booked_slot_ids: set[str] = field(default_factory=set)
    blocks: list[FakeBlock] = field(default_factory=list)
    replace_calls: int = 0

    async def create_slot(self, start_at: datetime, duration_minutes: int, title: str | None = None) -> FakeSlot:
        slot = FakeSlot(
            id=f"slot_{len(self.slots) + 1}",
            start_at=start_at,
            duration_minutes=duration_minutes,
            title=title,
        )
        self.slots[slot.id] = slot
        return slot

    async def get_slot_by_id(self, slot_id: str) -> FakeSlot | None:
        return self.slots.get(slot_id)

    async def slot_has_booking(self, slot_id: str) -> bool:
        return slot_id in self.booked_slot_ids

    async def delete_slot(self, slot: FakeSlot) -> None:
        del self.slots[slot.id]

    async def list_weekly_blocks(self) -> list[FakeBlock]:
        return list(self.blocks)

    async def replace_weekly_blocks(self, blocks: list[WeeklyBlockWrite]) -> list[FakeBlock]:
        self.replace_calls += 1
        self.blocks = [
            FakeBlock(
                id=f"wa_{index}",
                day_of_week=block.day_of_week,
                start_time=block.start_time,
                end_time=block.end_time,
                slot_duration_minutes=block.slot_duration_minutes,
            )
            for index, block in enumerate(blocks)
        ]
        return list(self.blocks)


@pytest.fixture(autouse=True)
def fixed_now(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(scheduling_service_module, "utc_now", lambda: NOW)


def block(day: int, start: str, end: str, duration: int) -> WeeklyBlockWrite:
    return WeeklyBlockWrite(day_of_week=day, start_time=start, end_time=end, slot_duration_minutes=duration)


@pytest.mark.asyncio
async def test_create_slot_in_future_is_stored_in_utc() -> None:
    repository = FakeSchedulingRepository()
    service = SchedulingService(repository)

    slot = await service.create_slot(
        SlotCreate(startAt="2026-03-02T18:00:00+01:00", durationMinutes=45, title="Intro call"),
    )

    assert slot.start_at == datetime(2026, 3, 2, 17, 0, tzinfo=UTC)
    assert slot.duration_minutes == 45
    assert repository.slots[slot.id].title == "Intro call"


@pytest.mark.asyncio
async def test_create_slot_in_past_is_rejected() -> None:
    service = SchedulingService(FakeSchedulingRepository())

    with pytest.raises(BusinessRuleException, match="future"):
        await service.create_slot(SlotCreate(start_at=NOW - timedelta(minutes=1), duration_minutes=30))


@pytest.mark.parametrize("duration", [4, 481])
def test_slot_duration_outside_bounds_fails_validation(duration: int) -> None:
    with pytest.raises(ValidationError):
        SlotCreate(start_at=NOW + timedelta(days=1), duration_minutes=duration)


@pytest.mark.asyncio
async def test_delete_missing_slot_is_not_found() -> None:
    service = SchedulingService(FakeSchedulingRepository())

    with pytest.raises(NotFoundException):
        await service.delete_slot("slot_missing")


@pytest.mark.asyncio
async def test_delete_booked_slot_is_conflict() -> None:
    slot = FakeSlot(id="slot_1", start_at=NOW + timedelta(days=1), duration_minutes=60)
    repository = FakeSchedulingRepository(slots={slot.id: slot}, booked_slot_ids={slot.id})

    with pytest.raises(ConflictException):
        await SchedulingService(repository).delete_slot(slot.id)

    assert slot.id in repository.slots


@pytest.mark.asyncio
async def test_delete_free_slot_removes_it() -> None:
    slot = FakeSlot(id="slot_1", start_at=NOW + timedelta(days=1), duration_minutes=60)
    repository = FakeSchedulingRepository(slots={slot.id: slot})

    await SchedulingService(repository).delete_slot(slot.id)

    assert repository.slots == {}


@pytest.mark.asyncio
async def test_weekly_replace_swaps_whole_template() -> None:
    existing = FakeBlock("wa_old", 2, time(8, 0), time(9, 0), 60)
    repository = FakeSchedulingRepository(blocks=[existing])

    saved = await SchedulingService(repository).save_weekly_availability(
        WeeklyAvailabilityReplace(blocks=[block(1, "09:00", "12:00", 60), block(4, "14:00", "17:00", 30)]),
    )

    assert repository.replace_calls == 1
    assert [(item.day_of_week, item.start_time) for item in saved] == [(1, time(9, 0)), (4, time(14, 0))]
    assert existing not in repository.blocks


@pytest.mark.asyncio
async def test_weekly_replace_with_empty_list_clears_template() -> None:
    repository = FakeSchedulingRepository(blocks=[FakeBlock("wa_old", 2, time(8, 0), time(9, 0), 60)])

    saved = await SchedulingService(repository).save_weekly_availability(WeeklyAvailabilityReplace(blocks=[]))

    assert saved == []
    assert repository.blocks == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("invalid", "message"),
    [
        (block(1, "12:00", "09:00", 60), "after start_time"),
        (block(1, "09:00", "09:00", 30), "after start_time"),
        (block(1, "09:00", "09:30", 60), "longer than the block"),
        (block(1, "09:00:30", "10:00", 30), "whole minutes"),
    ],
)
async def test_invalid_weekly_block_rejects_whole_replace(invalid: WeeklyBlockWrite, message: str) -> None:
    existing = FakeBlock("wa_old", 2, time(8, 0), time(9, 0), 60)
    repository = FakeSchedulingRepository(blocks=[existing])

    with pytest.raises(BusinessRuleException, match=message):
        await SchedulingService(repository).save_weekly_availability(
            WeeklyAvailabilityReplace(blocks=[block(3, "10:00", "11:00", 60), invalid]),
        )

    assert repository.replace_calls == 0
    assert repository.blocks == [existing]


@pytest.mark.parametrize("day", [-1, 7])
def test_weekly_block_day_outside_week_fails_validation(day: int) -> None:
    with pytest.raises(ValidationError):
        block(day, "09:00", "10:00", 30)


def test_weekly_block_read_serializes_times_as_hours_and_minutes() -> None:
    payload = WeeklyBlockRead.model_validate(
        FakeBlock("wa_1", 1, time(9, 0), time(12, 30), 30),
    ).model_dump(by_alias=True)

    assert payload == {
        "id": "wa_1",
        "dayOfWeek": 1,
        "startTime": "09:00",
        "endTime": "12:30",
        "slotDurationMinutes": 30,
    }
