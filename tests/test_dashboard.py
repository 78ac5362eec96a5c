from __future__ import annotations

import asyncio
from typing import Optional

from core.config import AutomationConfig
from core.lookup import LookupCoordinator
from core.preferences import PreferenceStore
from core.stats import EventType, Stats
from core.tracker import Tracker
from frontend.dashboard import DashboardApp


class FailingPersistence:
    def __init__(self) -> None:
        self.document: Optional[str] = None
        self.fail_writes = False

    def read(self) -> Optional[str]:
        return self.document

    def write(self, document: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.document = document


class IdleClient:
    async def send_text(self, channel_id: int, text: str) -> None:
        return None


def _dashboard(persistence: FailingPersistence) -> tuple[DashboardApp, Stats, PreferenceStore]:
    stats = Stats()
    preferences = PreferenceStore(persistence)
    preferences.load()
    app = DashboardApp(
        stats=stats,
        tracker=Tracker(cooldown_seconds=3600, initial_budget=10),
        preferences=preferences,
        coordinator=LookupCoordinator(IdleClient()),
        verifier=None,
        automation=AutomationConfig(),
        channels=[],
    )
    return app, stats, preferences


def test_failed_wishlist_write_is_reported_and_app_keeps_running() -> None:
    persistence = FailingPersistence()
    app, stats, preferences = _dashboard(persistence)
    persistence.fail_writes = True

    async def run() -> None:
        async with app.run_test() as pilot:
            await app._add({"name": "Rem", "series": None})
            await app._remove("Rem")
            await pilot.pause()
            assert app.is_running

    asyncio.run(run())
    errors = [event for event in stats.activity_log() if event.event_type is EventType.ERROR]
    assert len(errors) == 2
    assert all("disk full" in event.message for event in errors)
    # Both changes stay in memory even though neither was written.
    assert preferences.count() == 0


def test_successful_add_logs_wishlist_event() -> None:
    app, stats, preferences = _dashboard(FailingPersistence())

    async def run() -> None:
        async with app.run_test():
            await app._add({"name": "Rem", "series": "Re:Zero"})

    asyncio.run(run())
    assert preferences.is_wanted("Rem", "Re:Zero") is not None
    assert any(event.event_type is EventType.WISHLIST for event in stats.activity_log())
