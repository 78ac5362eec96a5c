from __future__ import annotations

import asyncio
from datetime import timedelta

from core.config import AutomationConfig
from core.ports import ChatActionError
from core.scheduler import (
    AFTER_SEND_SECONDS,
    DAILY_PAUSE_SECONDS,
    EMPTY_BUDGET_SECONDS,
    IDLE_SECONDS,
    RollScheduler,
    cooldown_remaining,
)
from core.stats import EventType, Stats
from core.tracker import Tracker


class FakeClient:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[int, str]] = []

    async def send_text(self, channel_id: int, text: str) -> None:
        if self.fail:
            raise ChatActionError("rate limited")
        self.sent.append((channel_id, text))


class FakeSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _scheduler(
    client: FakeClient,
    tracker: Tracker,
    sleep: FakeSleep,
    channels=(20,),
    **overrides,
) -> tuple[RollScheduler, Stats]:
    options = {"auto_daily": False, "roll_commands": ("$wa", "$ha")}
    options.update(overrides)
    stats = Stats()
    scheduler = RollScheduler(client, tracker, stats, AutomationConfig(**options), channels, sleep=sleep)
    return scheduler, stats


def test_sends_first_available_command_and_spends_budget() -> None:
    client = FakeClient()
    tracker = Tracker(cooldown_seconds=3600, initial_budget=5)
    sleep = FakeSleep()
    scheduler, stats = _scheduler(client, tracker, sleep)

    asyncio.run(scheduler.run_cycle())
    asyncio.run(scheduler.run_cycle())

    assert client.sent == [(20, "$wa"), (20, "$ha")]
    assert tracker.remaining == 3
    assert stats.rolls_executed == 2
    assert sleep.calls == [AFTER_SEND_SECONDS, AFTER_SEND_SECONDS]


def test_one_roll_per_channel_per_cycle() -> None:
    client = FakeClient()
    tracker = Tracker(cooldown_seconds=3600, initial_budget=5)
    scheduler, _ = _scheduler(client, tracker, FakeSleep(), channels=(20, 21))

    asyncio.run(scheduler.run_cycle())

    assert client.sent == [(20, "$wa"), (21, "$ha")]


def test_empty_budget_waits_without_sending() -> None:
    client = FakeClient()
    tracker = Tracker(cooldown_seconds=3600, initial_budget=0)
    sleep = FakeSleep()
    scheduler, _ = _scheduler(client, tracker, sleep)

    asyncio.run(scheduler.run_cycle())

    assert client.sent == []
    assert sleep.calls == [EMPTY_BUDGET_SECONDS]


def test_paused_or_disabled_idles() -> None:
    client = FakeClient()
    tracker = Tracker(cooldown_seconds=3600, initial_budget=5)
    sleep = FakeSleep()
    scheduler, _ = _scheduler(client, tracker, sleep)
    asyncio.run(tracker.set_paused(True))

    asyncio.run(scheduler.run_cycle())

    disabled, _ = _scheduler(client, Tracker(cooldown_seconds=3600, initial_budget=5), sleep, auto_roll=False)
    asyncio.run(disabled.run_cycle())

    assert client.sent == []
    assert sleep.calls == [IDLE_SECONDS, IDLE_SECONDS]


def test_no_channels_idles() -> None:
    sleep = FakeSleep()
    scheduler, _ = _scheduler(FakeClient(), Tracker(cooldown_seconds=60, initial_budget=5), sleep, channels=())

    asyncio.run(scheduler.run_cycle())

    assert sleep.calls == [IDLE_SECONDS]


def test_all_commands_on_cooldown_sleeps_until_capped_wait() -> None:
    client = FakeClient()
    tracker = Tracker(cooldown_seconds=3600, initial_budget=5)
    sleep = FakeSleep()
    scheduler, _ = _scheduler(client, tracker, sleep, roll_commands=("$wa",))

    async def run() -> None:
        await tracker.mark_used("$wa")
        await scheduler.run_cycle()

    asyncio.run(run())

    assert client.sent == []
    assert sleep.calls == [60.0]
    assert tracker.remaining == 5


def test_send_failure_keeps_budget_and_cooldown() -> None:
    client = FakeClient(fail=True)
    tracker = Tracker(cooldown_seconds=3600, initial_budget=5)
    sleep = FakeSleep()
    scheduler, stats = _scheduler(client, tracker, sleep)

    asyncio.run(scheduler.run_cycle())

    assert tracker.remaining == 5
    assert tracker.snapshot().cooldowns == {}
    assert stats.rolls_executed == 0
    assert stats.activity_log()[-1].event_type is EventType.ERROR
    assert sleep.calls == [AFTER_SEND_SECONDS]


def test_daily_commands_run_once_in_first_channel() -> None:
    client = FakeClient()
    tracker = Tracker(cooldown_seconds=3600, initial_budget=0)
    sleep = FakeSleep()
    scheduler, stats = _scheduler(client, tracker, sleep, channels=(20, 21), auto_daily=True, daily_time="00:00")

    asyncio.run(scheduler.run_cycle())
    asyncio.run(scheduler.run_cycle())

    assert client.sent == [(20, "$daily"), (20, "$dk")]
    assert sleep.calls == [DAILY_PAUSE_SECONDS, EMPTY_BUDGET_SECONDS, EMPTY_BUDGET_SECONDS]
    assert tracker.snapshot().last_daily is not None
    assert any(event.event_type is EventType.SUCCESS for event in stats.activity_log())


def test_run_stops_on_shutdown() -> None:
    tracker = Tracker(cooldown_seconds=3600, initial_budget=0)
    shutdown = asyncio.Event()
    cycles: list[float] = []

    async def sleep(seconds: float) -> None:
        cycles.append(seconds)
        if len(cycles) == 3:
            shutdown.set()

    scheduler = RollScheduler(FakeClient(), tracker, Stats(), AutomationConfig(auto_daily=False), [20], sleep=sleep)
    asyncio.run(scheduler.run(shutdown))

    assert cycles == [EMPTY_BUDGET_SECONDS] * 3


def test_cooldown_remaining() -> None:
    tracker = Tracker(cooldown_seconds=3600)
    assert cooldown_remaining(tracker, "$wa") is None

    asyncio.run(tracker.mark_used("$wa"))
    remaining = cooldown_remaining(tracker, "$wa")
    assert timedelta(minutes=59) < remaining <= timedelta(hours=1)
