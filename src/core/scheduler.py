"""Periodic roll and daily-command scheduler."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Awaitable, Callable, Iterable, Optional

from core.config import AutomationConfig
from core.ports import ChatActionError, ChatClientPort
from core.stats import EventType, Stats
from core.timefmt import parse_time_of_day
from core.tracker import Tracker

LOGGER = logging.getLogger(__name__)

DAILY_COMMANDS = ("$daily", "$dk")
DAILY_PAUSE_SECONDS = 2.0
IDLE_SECONDS = 5.0
EMPTY_BUDGET_SECONDS = 10.0
AFTER_SEND_SECONDS = 1.0
MAX_COOLDOWN_WAIT_SECONDS = 60.0


class RollScheduler:
    """Sends roll commands while the budget lasts and the daily commands once a day."""

    def __init__(
        self,
        client: ChatClientPort,
        tracker: Tracker,
        stats: Stats,
        config: AutomationConfig,
        channels: Iterable[int],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._tracker = tracker
        self._stats = stats
        self._config = config
        self._channels = list(channels)
        self._sleep = sleep
        self._daily_time: time = parse_time_of_day(config.daily_time) or time(0, 0)

    async def run(self, shutdown: asyncio.Event) -> None:
        LOGGER.info("Scheduler started for %s channel(s)", len(self._channels))
        while not shutdown.is_set():
            await self.run_cycle()
        LOGGER.info("Scheduler stopped")

    async def run_cycle(self) -> None:
        """One pass: daily commands, then at most one roll per channel."""

        if not self._channels:
            await self._sleep(IDLE_SECONDS)
            return

        if self._config.auto_daily and not self._tracker.paused:
            if await self._tracker.should_run_daily(self._daily_time):
                await self.run_daily()

        if not self._config.auto_roll or self._tracker.paused:
            await self._sleep(IDLE_SECONDS)
            return

        for channel_id in self._channels:
            if self._tracker.remaining <= 0:
                LOGGER.debug("No rolls remaining, waiting for reset")
                await self._sleep(EMPTY_BUDGET_SECONDS)
                return

            command = await self._next_command()
            if command is None:
                return
            await self._roll(channel_id, command)

    async def _next_command(self) -> Optional[str]:
        commands = list(self._config.roll_commands)
        available = await self._tracker.available_commands(commands)
        if available:
            return available[0]

        wait = await self._tracker.time_until_next_available(commands)
        if wait is None:
            await self._sleep(IDLE_SECONDS)
            return None
        seconds = min(wait.total_seconds(), MAX_COOLDOWN_WAIT_SECONDS)
        LOGGER.debug("All roll commands on cooldown, sleeping %.0fs", seconds)
        await self._sleep(max(seconds, AFTER_SEND_SECONDS))
        return None

    async def _roll(self, channel_id: int, command: str) -> None:
        try:
            await self._client.send_text(channel_id, command)
        except ChatActionError as exc:
            LOGGER.warning("Failed to send %s to %s: %s", command, channel_id, exc)
            self._stats.log_event(EventType.ERROR, f"Failed to send {command}")
            await self._sleep(AFTER_SEND_SECONDS)
            return

        await self._tracker.mark_used(command)
        remaining = await self._tracker.decrement_budget()
        self._stats.rolls_executed += 1
        self._stats.log_event(EventType.ROLL, f"Sent {command} ({remaining} left)")
        LOGGER.info("Sent %s to %s, %s rolls left", command, channel_id, remaining)
        await self._sleep(AFTER_SEND_SECONDS)

    async def run_daily(self) -> None:
        """Send the daily commands to the first channel."""

        channel_id = self._channels[0]
        LOGGER.info("Running daily commands")
        for index, command in enumerate(DAILY_COMMANDS):
            if index:
                await self._sleep(DAILY_PAUSE_SECONDS)
            try:
                await self._client.send_text(channel_id, command)
            except ChatActionError as exc:
                LOGGER.warning("Failed to send %s: %s", command, exc)
                self._stats.log_event(EventType.ERROR, f"Failed to send {command}")
        await self._tracker.mark_daily_run()
        self._stats.log_event(EventType.SUCCESS, "Daily commands sent")


def cooldown_remaining(tracker: Tracker, command: str) -> Optional[timedelta]:
    """Time left on command's cooldown from a snapshot; None if never used."""

    last_used = tracker.snapshot().cooldowns.get(command)
    if last_used is None:
        return None
    remaining = tracker.cooldown - (datetime.now(timezone.utc) - last_used)
    return max(remaining, timedelta(0))
