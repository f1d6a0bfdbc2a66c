"""Seed idempotent demo availability for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import time, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.core.config import get_settings
from coachbook.core.database import SessionLocal, close_engine
from coachbook.core.security import hash_password
from coachbook.modules.scheduling.models import OneOffSlot
from coachbook.modules.scheduling.repository import SchedulingRepository
from coachbook.modules.scheduling.schemas import WeeklyAvailabilityReplace, WeeklyBlockWrite
from coachbook.modules.scheduling.service import SchedulingService
from coachbook.shared.timeframe import local_to_utc
from coachbook.shared.utils import utc_now

DEMO_WEEKLY_BLOCKS = (
    WeeklyBlockWrite(day_of_week=1, start_time=time(9, 0), end_time=time(12, 0), slot_duration_minutes=60),
    WeeklyBlockWrite(day_of_week=3, start_time=time(9, 0), end_time=time(12, 0), slot_duration_minutes=60),
    WeeklyBlockWrite(day_of_week=4, start_time=time(14, 0), end_time=time(17, 0), slot_duration_minutes=30),
)

DEMO_SLOT_DAY_OFFSETS = (1, 2, 3, 4, 5)
DEMO_SLOT_START_MINUTE = 18 * 60
DEMO_SLOT_DURATION_MINUTES = 60
DEMO_SLOT_TITLE = "Intro call"


@dataclass(slots=True)
class SeedStats:
    weekly_blocks_created: int = 0
    slots_created: int = 0


async def _ensure_weekly_template(session: AsyncSession) -> int:
    service = SchedulingService(SchedulingRepository(session))
    if await service.get_weekly_availability():
        return 0
    blocks = await service.save_weekly_availability(WeeklyAvailabilityReplace(blocks=list(DEMO_WEEKLY_BLOCKS)))
    return len(blocks)


async def _ensure_demo_slots(session: AsyncSession) -> int:
    settings = get_settings()
    repository = SchedulingRepository(session)
    today = utc_now().astimezone(settings.coach_zone).date()

    created = 0
    for day_offset in DEMO_SLOT_DAY_OFFSETS:
        start_at = local_to_utc(today + timedelta(days=day_offset), DEMO_SLOT_START_MINUTE, settings.coach_zone)
        if start_at is None:
            continue
        existing = await session.scalar(select(OneOffSlot).where(OneOffSlot.start_at == start_at))
        if existing is not None:
            continue
        await repository.create_slot(start_at, DEMO_SLOT_DURATION_MINUTES, DEMO_SLOT_TITLE)
        created += 1
    return created


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()

    async with SessionLocal() as session:
        try:
            stats.weekly_blocks_created = await _ensure_weekly_template(session)
            stats.slots_created = await _ensure_demo_slots(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Seed idempotent demo data for Coachbook (weekly template, one-off slots).",
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    parser.add_argument(
        "--admin-password",
        help="Also print a bcrypt hash of this password for ADMIN_PASSWORD_HASH.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    print("Demo seed completed.")
    print(f"- Weekly blocks created: {stats.weekly_blocks_created}")
    print(f"- One-off slots created: {stats.slots_created}")


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    try:
        stats = asyncio.run(_run_seed(allow_production=args.allow_production))
    except Exception as exc:
        print(f"Demo seed failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    _print_summary(stats)
    if args.admin_password:
        print("")
        print(f"ADMIN_PASSWORD_HASH={hash_password(args.admin_password)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
