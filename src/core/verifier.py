"""Wishlist verification through character lookups."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from core.lookup import LookupCoordinator
from core.models import PreferenceEntry
from core.preferences import PreferenceStore, PreferenceStoreError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    original_name: str
    exists: bool
    canonical_name: Optional[str] = None
    series: Optional[str] = None
    external_id: Optional[str] = None


@dataclass
class VerificationReport:
    total: int = 0
    verified: int = 0
    failed: int = 0
    save_errors: int = 0
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.verified / self.total * 100.0


class CharacterVerifier:
    """Looks characters up in one channel and caches positive answers."""

    def __init__(self, coordinator: LookupCoordinator, channel_id: int) -> None:
        self._coordinator = coordinator
        self._channel_id = channel_id
        self._cache: dict[str, VerificationResult] = {}

    async def verify(self, name: str) -> VerificationResult:
        key = name.lower()
        cached = self._cache.get(key)
        if cached is not None:
            LOGGER.debug("Using cached verification for '%s'", name)
            return cached

        summary = await self._coordinator.request(name, self._channel_id)
        if summary is None or not summary.found:
            return VerificationResult(original_name=name, exists=False)

        result = VerificationResult(
            original_name=name,
            exists=True,
            canonical_name=summary.name or name,
            series=summary.series or None,
        )
        self._cache[key] = result
        return result

    def cached(self, name: str) -> Optional[VerificationResult]:
        return self._cache.get(name.lower())

    def clear_cache(self) -> None:
        self._cache.clear()
        LOGGER.info("Verification cache cleared")


class WishlistVerifier:
    """Verifies wishlist entries and adds new ones after a lookup."""

    def __init__(
        self,
        verifier: CharacterVerifier,
        store: PreferenceStore,
        pause_seconds: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._verifier = verifier
        self._store = store
        self._pause_seconds = pause_seconds
        self._sleep = sleep

    async def verify_unverified(self) -> VerificationReport:
        pending = self._store.unverified()
        report = VerificationReport(total=len(pending))
        LOGGER.info("Starting verification of %s unverified characters", report.total)

        for index, entry in enumerate(pending):
            if index:
                await self._sleep(self._pause_seconds)
            result = await self._verifier.verify(entry.name)
            report.results.append(result)
            if result.exists:
                try:
                    await self._store.update_verification(
                        entry.name,
                        True,
                        canonical_name=result.canonical_name,
                        series=result.series,
                        external_id=result.external_id,
                    )
                except PreferenceStoreError:
                    # The in-memory entry is updated; only the write failed.
                    report.save_errors += 1
                    LOGGER.exception("Failed to save verification of %s", entry.name)
                report.verified += 1
                LOGGER.info("Verified: %s -> %s", entry.name, result.canonical_name)
            else:
                report.failed += 1
                LOGGER.warning("Character not found: %s", entry.name)
        return report

    async def add_and_verify(self, name: str, series: Optional[str] = None) -> bool:
        result = await self._verifier.verify(name)
        if not result.exists:
            LOGGER.warning("Character '%s' was not found by the game bot", name)
            return False
        entry = PreferenceEntry(
            name=result.canonical_name or name,
            series=result.series or series,
            external_id=result.external_id,
            verified=True,
        )
        return await self._store.add(entry)

    async def add_unverified(self, name: str, series: Optional[str] = None) -> bool:
        entry = PreferenceEntry(
            name=name,
            series=series,
            verified=False,
            notes="Pending verification",
        )
        return await self._store.add(entry)
