"""Cooldown and budget accounting (core domain).

The tracker is advisory: the real budget and cooldowns live server-side, so
the local counters are only a best guess between two status messages. Every
mutation goes through one asyncio lock; readers take a snapshot, which is
consistent because it is built without awaiting.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Iterable, Optional

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TrackerSnapshot:
    """Read-only view for the dashboard and the scheduler."""

    remaining: int
    reset_at: Optional[datetime]
    claim_available: bool
    paused: bool
    last_daily: Optional[datetime]
    cooldowns: dict[str, datetime]


class Tracker:
    """Per-command cooldowns, remaining-roll budget, and automation flags."""

    def __init__(
        self,
        cooldown_seconds: int,
        initial_budget: int = 0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._duration = timedelta(seconds=cooldown_seconds)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._cooldowns: dict[str, datetime] = {}
        self._remaining = max(initial_budget, 0)
        self._reset_at: Optional[datetime] = None
        self._claim_available = True
        self._paused = False
        self._last_daily: Optional[datetime] = None

    @property
    def cooldown(self) -> timedelta:
        return self._duration

    def _is_ready(self, command: str, now: datetime) -> bool:
        last_used = self._cooldowns.get(command)
        return last_used is None or now - last_used >= self._duration

    async def available_commands(self, all_commands: Iterable[str]) -> list[str]:
        """Commands never used or past their cooldown, in input order."""

        async with self._lock:
            now = self._clock()
            return [command for command in all_commands if self._is_ready(command, now)]

    async def mark_used(self, command: str) -> None:
        async with self._lock:
            self._cooldowns[command] = self._clock()

    async def time_until_next_available(self, all_commands: Iterable[str]) -> Optional[timedelta]:
        """Zero if anything is ready now, else the smallest remaining wait.

        Returns None only when all_commands is empty.
        """

        async with self._lock:
            now = self._clock()
            waits: list[timedelta] = []
            for command in all_commands:
                last_used = self._cooldowns.get(command)
                if last_used is None:
                    return timedelta(0)
                remaining = self._duration - (now - last_used)
                if remaining <= timedelta(0):
                    return timedelta(0)
                waits.append(remaining)
            return min(waits) if waits else None

    async def decrement_budget(self) -> int:
        """Consume one action locally; a zero counter stays at zero."""

        async with self._lock:
            if self._remaining > 0:
                self._remaining -= 1
            return self._remaining

    async def set_budget(self, remaining: int) -> None:
        async with self._lock:
            self._remaining = max(remaining, 0)

    async def set_reset_hint(self, instant: Optional[datetime]) -> None:
        async with self._lock:
            self._reset_at = instant

    async def set_claim_available(self, available: bool) -> None:
        async with self._lock:
            self._claim_available = available

    async def set_paused(self, paused: bool) -> None:
        async with self._lock:
            self._paused = paused
        LOGGER.info("Automation %s", "paused" if paused else "resumed")

    async def toggle_paused(self) -> bool:
        async with self._lock:
            self._paused = not self._paused
            paused = self._paused
        LOGGER.info("Automation %s", "paused" if paused else "resumed")
        return paused

    async def mark_daily_run(self) -> None:
        async with self._lock:
            self._last_daily = self._clock()

    async def should_run_daily(self, schedule: time, local_now: Optional[datetime] = None) -> bool:
        """True once per local calendar day, at or after the scheduled time."""

        local_now = local_now or self._clock().astimezone()
        async with self._lock:
            last = self._last_daily
        if last is not None and last.astimezone(local_now.tzinfo).date() == local_now.date():
            return False
        return local_now.time() >= schedule

    # Lock-free readers: plain attribute reads never interleave with a writer
    # on a single event loop.

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def claim_available(self) -> bool:
        return self._claim_available

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def reset_at(self) -> Optional[datetime]:
        return self._reset_at

    def snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(
            remaining=self._remaining,
            reset_at=self._reset_at,
            claim_available=self._claim_available,
            paused=self._paused,
            last_daily=self._last_daily,
            cooldowns=dict(self._cooldowns),
        )
