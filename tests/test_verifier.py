from __future__ import annotations

import asyncio
from typing import Optional

from core.lookup import LookupSummary
from core.models import PreferenceEntry
from core.preferences import PreferenceStore
from core.verifier import CharacterVerifier, VerificationReport, WishlistVerifier


class FakeCoordinator:
    def __init__(self, known: dict[str, LookupSummary]) -> None:
        self._known = known
        self.requests: list[tuple[str, int]] = []

    async def request(self, query: str, channel_id: int) -> Optional[LookupSummary]:
        self.requests.append((query, channel_id))
        return self._known.get(query.lower())


class MemoryPersistence:
    def __init__(self) -> None:
        self.document: Optional[str] = None
        self.fail_writes = False

    def read(self) -> Optional[str]:
        return self.document

    def write(self, document: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.document = document


class FakeSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


KNOWN = {
    "rem": LookupSummary(name="Rem", series="Re:Zero", found=True),
    "saber": LookupSummary(name="Artoria Pendragon", series="Fate/stay night", found=True),
}


def _store(persistence: Optional[MemoryPersistence] = None) -> PreferenceStore:
    store = PreferenceStore(persistence or MemoryPersistence())
    store.load()
    return store


def test_positive_results_are_cached() -> None:
    coordinator = FakeCoordinator(KNOWN)
    verifier = CharacterVerifier(coordinator, channel_id=20)

    async def run() -> None:
        first = await verifier.verify("rem")
        second = await verifier.verify("REM")
        assert first is second
        assert first.exists
        assert first.canonical_name == "Rem"
        assert first.series == "Re:Zero"

    asyncio.run(run())
    assert coordinator.requests == [("rem", 20)]
    assert verifier.cached("Rem") is not None

    verifier.clear_cache()
    assert verifier.cached("Rem") is None


def test_negative_results_are_not_cached() -> None:
    coordinator = FakeCoordinator(KNOWN)
    verifier = CharacterVerifier(coordinator, channel_id=20)

    async def run() -> None:
        assert not (await verifier.verify("Nobody")).exists
        assert not (await verifier.verify("Nobody")).exists

    asyncio.run(run())
    assert len(coordinator.requests) == 2


def test_verify_unverified_updates_store_and_reports() -> None:
    store = _store()
    sleep = FakeSleep()
    wishlist = WishlistVerifier(CharacterVerifier(FakeCoordinator(KNOWN), 20), store, pause_seconds=3.0, sleep=sleep)

    async def run() -> VerificationReport:
        await store.add(PreferenceEntry(name="saber"))
        await store.add(PreferenceEntry(name="Nobody"))
        await store.add(PreferenceEntry(name="Rem", verified=True))
        return await wishlist.verify_unverified()

    report = asyncio.run(run())
    assert (report.total, report.verified, report.failed) == (2, 1, 1)
    assert report.success_rate == 50.0
    assert sleep.calls == [3.0]
    assert [entry.name for entry in store.verified()] == ["Artoria Pendragon", "Rem"]
    assert store.entries()[0].series == "Fate/stay night"


def test_add_and_verify_uses_canonical_name() -> None:
    store = _store()
    wishlist = WishlistVerifier(CharacterVerifier(FakeCoordinator(KNOWN), 20), store, sleep=FakeSleep())

    async def run() -> None:
        assert await wishlist.add_and_verify("rem")
        assert not await wishlist.add_and_verify("Nobody")
        assert await wishlist.add_unverified("Ram", "Re:Zero")

    asyncio.run(run())
    entries = store.entries()
    assert [(entry.name, entry.verified) for entry in entries] == [("Rem", True), ("Ram", False)]
    assert entries[1].notes == "Pending verification"


def test_empty_report_rate() -> None:
    assert VerificationReport().success_rate == 0.0


def test_verify_unverified_keeps_going_when_writes_fail() -> None:
    persistence = MemoryPersistence()
    store = _store(persistence)
    wishlist = WishlistVerifier(CharacterVerifier(FakeCoordinator(KNOWN), 20), store, sleep=FakeSleep())

    async def run() -> VerificationReport:
        await store.add(PreferenceEntry(name="rem"))
        await store.add(PreferenceEntry(name="saber"))
        persistence.fail_writes = True
        return await wishlist.verify_unverified()

    report = asyncio.run(run())
    assert (report.verified, report.save_errors) == (2, 2)
    assert [entry.name for entry in store.verified()] == ["Rem", "Artoria Pendragon"]
