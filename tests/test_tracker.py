from __future__ import annotations

import asyncio
from datetime import datetime, time, timedelta, timezone

from core.tracker import Tracker


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def test_commands_follow_cooldown() -> None:
    clock = FakeClock()
    tracker = Tracker(cooldown_seconds=3600, clock=clock)

    async def run() -> None:
        assert await tracker.available_commands(["$wa", "$ha"]) == ["$wa", "$ha"]
        await tracker.mark_used("$wa")
        assert await tracker.available_commands(["$wa", "$ha"]) == ["$ha"]
        clock.advance(minutes=59)
        assert await tracker.available_commands(["$wa"]) == []
        clock.advance(minutes=1)
        assert await tracker.available_commands(["$wa"]) == ["$wa"]

    asyncio.run(run())


def test_time_until_next_available() -> None:
    clock = FakeClock()
    tracker = Tracker(cooldown_seconds=3600, clock=clock)

    async def run() -> None:
        assert await tracker.time_until_next_available([]) is None
        assert await tracker.time_until_next_available(["$wa"]) == timedelta(0)
        await tracker.mark_used("$wa")
        clock.advance(minutes=10)
        await tracker.mark_used("$ha")
        wait = await tracker.time_until_next_available(["$wa", "$ha"])
        assert wait == timedelta(minutes=50)

    asyncio.run(run())


def test_budget_never_goes_negative() -> None:
    tracker = Tracker(cooldown_seconds=60, initial_budget=1)

    async def run() -> None:
        assert await tracker.decrement_budget() == 0
        assert await tracker.decrement_budget() == 0
        await tracker.set_budget(-3)
        assert tracker.remaining == 0
        await tracker.set_budget(7)
        assert tracker.remaining == 7

    asyncio.run(run())


def test_flags_and_snapshot() -> None:
    clock = FakeClock()
    tracker = Tracker(cooldown_seconds=60, initial_budget=3, clock=clock)
    reset_at = clock.now + timedelta(hours=1)

    async def run() -> None:
        assert await tracker.toggle_paused() is True
        assert await tracker.toggle_paused() is False
        await tracker.set_paused(True)
        await tracker.set_claim_available(False)
        await tracker.set_reset_hint(reset_at)
        await tracker.mark_used("$wa")

    asyncio.run(run())
    snapshot = tracker.snapshot()
    assert snapshot.paused
    assert not snapshot.claim_available
    assert snapshot.reset_at == reset_at
    assert snapshot.remaining == 3
    assert snapshot.cooldowns == {"$wa": clock.now}

    # Snapshots are copies.
    snapshot.cooldowns.clear()
    assert tracker.snapshot().cooldowns


def test_daily_runs_once_per_day_after_schedule() -> None:
    clock = FakeClock()
    tracker = Tracker(cooldown_seconds=60, clock=clock)
    schedule = time(9, 0)

    async def run() -> None:
        early = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
        assert not await tracker.should_run_daily(schedule, early)
        assert await tracker.should_run_daily(schedule, clock.now)
        await tracker.mark_daily_run()
        assert not await tracker.should_run_daily(schedule, clock.now + timedelta(hours=2))
        next_day = datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)
        assert await tracker.should_run_daily(schedule, next_day)

    asyncio.run(run())
