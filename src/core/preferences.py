"""Wishlist store with fuzzy name matching (core domain).

Entries are kept in insertion order. Matching returns the first qualifying
entry rather than the best one, so an earlier registration wins when two
entries could both fuzzy-match a rolled character.

Every mutation persists the whole document before returning. The document
is serialized only after the in-memory change is complete, so the medium
sees either the old or the new state. A failed write raises
PreferenceStoreError and the in-memory change stays in place; callers must
retry the save.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein

from core.models import PreferenceEntry
from core.ports import PreferencePersistence

LOGGER = logging.getLogger(__name__)


class PreferenceStoreError(RuntimeError):
    """The wishlist could not be written to its durable medium."""


def similarity(left: str, right: str) -> float:
    """Normalized Levenshtein similarity in [0, 1]; 1.0 means identical."""

    return Levenshtein.normalized_similarity(left, right)


def _clamp_priority(priority: int) -> int:
    return max(0, min(priority, 255))


class PreferenceStore:
    """Ordered, persisted collection of PreferenceEntry records."""

    def __init__(
        self,
        persistence: PreferencePersistence,
        fuzzy_enabled: bool = True,
        fuzzy_threshold: float = 0.8,
        priority_verified: bool = True,
    ) -> None:
        self._persistence = persistence
        self._fuzzy_enabled = fuzzy_enabled
        self._fuzzy_threshold = fuzzy_threshold
        self._priority_verified = priority_verified
        self._entries: list[PreferenceEntry] = []
        self._last_updated = datetime.now(timezone.utc)
        self._lock = asyncio.Lock()

    # Persistence -----------------------------------------------------------

    def load(self) -> int:
        """Load entries from the medium; bad data leaves the store empty."""

        try:
            document = self._persistence.read()
        except (OSError, ValueError):
            LOGGER.exception("Failed to read wishlist, starting empty")
            self._entries = []
            return 0

        if document is None:
            LOGGER.info("Wishlist not found, creating a new one")
            self._entries = []
            try:
                self._save()
            except PreferenceStoreError:
                LOGGER.exception("Could not create the wishlist file")
            return 0

        try:
            self._entries, self._last_updated = self._decode(document)
        except (ValueError, KeyError, TypeError) as exc:
            LOGGER.warning("Malformed wishlist data (%s), starting empty", exc)
            self._entries = []
            return 0

        LOGGER.info("Loaded %s characters from wishlist", len(self._entries))
        return len(self._entries)

    @staticmethod
    def _decode(document: str) -> tuple[list[PreferenceEntry], datetime]:
        raw = json.loads(document)
        if not isinstance(raw, dict) or not isinstance(raw.get("characters"), list):
            raise ValueError("wishlist root must hold a 'characters' list")
        if not all(isinstance(item, dict) for item in raw["characters"]):
            raise ValueError("wishlist characters must be objects")
        entries = [PreferenceEntry.from_dict(item) for item in raw["characters"]]
        last_raw = raw.get("last_updated")
        last_updated = datetime.fromisoformat(last_raw) if last_raw else datetime.now(timezone.utc)
        return entries, last_updated

    def _encode(self) -> str:
        payload = {
            "characters": [entry.to_dict() for entry in self._entries],
            "last_updated": self._last_updated.isoformat(),
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def _save(self) -> None:
        self._last_updated = datetime.now(timezone.utc)
        document = self._encode()
        try:
            self._persistence.write(document)
        except OSError as exc:
            raise PreferenceStoreError(f"Failed to write wishlist: {exc}") from exc
        LOGGER.debug("Saved wishlist (%s entries)", len(self._entries))

    async def save(self) -> None:
        """Persist the current state; used to retry after a failed write."""

        async with self._lock:
            self._save()

    # Mutations -------------------------------------------------------------

    def _find(self, name: str) -> Optional[PreferenceEntry]:
        lowered = name.lower()
        return next((entry for entry in self._entries if entry.name.lower() == lowered), None)

    async def add(self, entry: PreferenceEntry) -> bool:
        """Append entry; False when the name is already present."""

        async with self._lock:
            if self._find(entry.name) is not None:
                LOGGER.warning("Character '%s' already in wishlist", entry.name)
                return False
            entry.added_at = datetime.now(timezone.utc)
            entry.priority = _clamp_priority(entry.priority)
            self._entries.append(entry)
            self._save()
        LOGGER.info("Added '%s' to wishlist", entry.name)
        return True

    async def remove(self, name: str) -> bool:
        async with self._lock:
            lowered = name.lower()
            kept = [entry for entry in self._entries if entry.name.lower() != lowered]
            if len(kept) == len(self._entries):
                return False
            self._entries = kept
            self._save()
        LOGGER.info("Removed '%s' from wishlist", name)
        return True

    async def update_verification(
        self,
        name: str,
        verified: bool,
        canonical_name: Optional[str] = None,
        series: Optional[str] = None,
        external_id: Optional[str] = None,
    ) -> bool:
        async with self._lock:
            entry = self._find(name)
            if entry is None:
                return False
            entry.verified = verified
            if canonical_name:
                holder = self._find(canonical_name)
                if holder is not None and holder is not entry:
                    LOGGER.warning(
                        "Not renaming '%s' to '%s': name already in wishlist", entry.name, canonical_name
                    )
                else:
                    entry.name = canonical_name
            if series is not None:
                entry.series = series
            if external_id is not None:
                entry.external_id = external_id
            self._save()
        LOGGER.info("Updated verification for '%s'", name)
        return True

    async def set_priority(self, name: str, priority: int) -> bool:
        async with self._lock:
            entry = self._find(name)
            if entry is None:
                return False
            entry.priority = _clamp_priority(priority)
            self._save()
        LOGGER.info("Set priority %s for '%s'", priority, name)
        return True

    async def import_entries(self, entries: Iterable[PreferenceEntry]) -> int:
        """Append entries whose names are not present yet; returns the count."""

        async with self._lock:
            added = 0
            for entry in entries:
                if self._find(entry.name) is None:
                    self._entries.append(entry)
                    added += 1
            self._save()
        LOGGER.info("Imported %s characters", added)
        return added

    async def import_document(self, document: str) -> int:
        entries, _ = self._decode(document)
        return await self.import_entries(entries)

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._entries)
            self._entries = []
            self._save()
        LOGGER.info("Cleared %s characters from wishlist", count)
        return count

    # Queries ---------------------------------------------------------------

    def export(self) -> str:
        """Serialized form, identical to what is written to the medium."""

        return self._encode()

    def entries(self) -> list[PreferenceEntry]:
        """Entries in insertion order."""

        return list(self._entries)

    def list_all(self) -> list[PreferenceEntry]:
        entries = list(self._entries)
        if self._priority_verified:
            entries.sort(key=lambda entry: (not entry.verified, -entry.priority))
        else:
            entries.sort(key=lambda entry: -entry.priority)
        return entries

    def verified(self) -> list[PreferenceEntry]:
        return [entry for entry in self._entries if entry.verified]

    def unverified(self) -> list[PreferenceEntry]:
        return [entry for entry in self._entries if not entry.verified]

    def search(self, query: str) -> list[PreferenceEntry]:
        lowered = query.lower()
        return [
            entry
            for entry in self._entries
            if lowered in entry.name.lower() or (entry.series and lowered in entry.series.lower())
        ]

    def count(self) -> int:
        return len(self._entries)

    def is_wanted(self, name: str, series: Optional[str] = None) -> Optional[PreferenceEntry]:
        """First entry matching name (and series), or None."""

        for entry in self._entries:
            if self._matches(entry, name, series):
                return entry
        return None

    def _matches(self, entry: PreferenceEntry, name: str, series: Optional[str]) -> bool:
        wanted = entry.name.lower()
        candidate = name.lower()
        if wanted == candidate:
            return self._matches_series(entry, series)
        if self._fuzzy_enabled and similarity(wanted, candidate) >= self._fuzzy_threshold:
            return self._matches_series(entry, series)
        return False

    def _matches_series(self, entry: PreferenceEntry, series: Optional[str]) -> bool:
        # A stored entry without series accepts any series.
        if entry.series is None or series is None:
            return True
        wanted = entry.series.lower()
        candidate = series.lower()
        if wanted == candidate:
            return True
        if self._fuzzy_enabled:
            return similarity(wanted, candidate) >= self._fuzzy_threshold
        return False
