"""Ports (interfaces) used by the core.

Ports define the minimal contracts for the chat client and storage adapters
so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol


class ChatActionError(RuntimeError):
    """An outbound chat action (send, react, click) was rejected or failed."""


class ChatClientPort(Protocol):
    """Outbound actions required by the engine, scheduler, and lookups.

    Implementations raise ChatActionError on failure.
    """

    async def send_text(self, channel_id: int, text: str) -> None:
        ...

    async def add_reaction(self, channel_id: int, message_id: int, glyph: str) -> None:
        ...

    async def click_button(
        self,
        message_id: int,
        channel_id: int,
        guild_id: Optional[int],
        application_id: int,
        action_id: str,
    ) -> None:
        ...


class PreferencePersistence(Protocol):
    """Durable medium for the wishlist document."""

    def read(self) -> Optional[str]:
        """Return the stored document, or None when nothing was saved yet."""
        ...

    def write(self, document: str) -> None:
        ...


class StatsStoragePort(Protocol):
    """Storage for cumulative statistics and the roll log."""

    def load_stats(self) -> dict[str, int]:
        ...

    def save_stats(self, stats: dict[str, int]) -> None:
        ...

    def save_roll(self, roll) -> None:
        ...
