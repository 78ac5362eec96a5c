"""Correlates character lookups with the game bot's replies.

The game bot does not echo the query, so a reply is matched to the pending
request by channel only. There is a single pending slot: concurrent callers
queue on a lock and run one after another, and only the oldest (the one
holding the slot) is satisfied by a reply.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from core.classifier import extract_reward_value, first_line
from core.models import CharacterOffer, ClassifiedEvent, LookupResult, Unrecognized
from core.ports import ChatActionError, ChatClientPort

LOGGER = logging.getLogger(__name__)

LOOKUP_TIMEOUT_SECONDS = 10.0
LOOKUP_COMMAND = "$im"


@dataclass(frozen=True)
class LookupSummary:
    name: str
    series: str
    found: bool
    image_url: Optional[str] = None
    reward_value: Optional[int] = None


def summary_from_event(event: ClassifiedEvent) -> Optional[LookupSummary]:
    """Extract a lookup answer from an event, if it carries one."""

    if isinstance(event, LookupResult):
        return LookupSummary(
            name=event.name,
            series=event.series,
            found=event.found,
            image_url=event.image_url,
            reward_value=event.reward_value,
        )
    if isinstance(event, CharacterOffer):
        return LookupSummary(
            name=event.name,
            series=event.series,
            found=True,
            image_url=event.image_url,
            reward_value=event.reward_value,
        )
    if isinstance(event, Unrecognized):
        embed = event.message.first_embed
        if embed is None or not embed.author_name:
            return None
        return LookupSummary(
            name=embed.author_name,
            series=first_line(embed.description),
            found=True,
            image_url=embed.image_url,
            reward_value=extract_reward_value(embed.footer_text),
        )
    return None


class LookupCoordinator:
    """Single-slot pending-request registry with a timeout."""

    def __init__(self, client: ChatClientPort, timeout: float = LOOKUP_TIMEOUT_SECONDS) -> None:
        self._client = client
        self._timeout = timeout
        self._request_lock = asyncio.Lock()
        self._pending: Optional[tuple[int, asyncio.Future]] = None

    def is_pending(self, channel_id: Optional[int] = None) -> bool:
        if self._pending is None:
            return False
        return channel_id is None or self._pending[0] == channel_id

    async def request(self, query: str, channel_id: int) -> Optional[LookupSummary]:
        """Send a lookup and wait for its reply; None on timeout or failure."""

        async with self._request_lock:
            future: asyncio.Future = asyncio.get_running_loop().create_future()
            self._pending = (channel_id, future)
            try:
                try:
                    await self._client.send_text(channel_id, f"{LOOKUP_COMMAND} {query}")
                except ChatActionError as exc:
                    LOGGER.warning("Failed to send lookup for '%s': %s", query, exc)
                    return None
                try:
                    return await asyncio.wait_for(future, timeout=self._timeout)
                except asyncio.TimeoutError:
                    LOGGER.info("Lookup for '%s' timed out", query)
                    return None
            finally:
                self._pending = None

    def offer(self, event: ClassifiedEvent, channel_id: int) -> bool:
        """Resolve the pending request with event; False when discarded."""

        if self._pending is None:
            return False
        expected_channel, future = self._pending
        if channel_id != expected_channel or future.done():
            return False
        summary = summary_from_event(event)
        if summary is None:
            return False
        future.set_result(summary)
        self._pending = None
        return True
