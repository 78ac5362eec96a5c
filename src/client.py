"""Discord client factory for rollwatch.

The gateway client only observes: every event is mapped to a core event and
put on the inbound queue. Outbound actions go through DiscordHttpClient so
that the core never touches discord.py objects.
"""

from __future__ import annotations

import asyncio
import logging
import os

import discord
from dotenv import load_dotenv

from adapters.discord_mapper import message_event, reaction_event, ready_event
from core.models import GatewayEvent
from core.stats import ConnectionStatus, EventType, Stats

LOGGER = logging.getLogger(__name__)


def load_token() -> str:
    """Read DISCORD_TOKEN via python-dotenv to keep secrets out of the repo."""

    load_dotenv()
    token = os.getenv("DISCORD_TOKEN")
    # Fail fast on missing credentials to avoid an opaque login error.
    if not token:
        raise RuntimeError("Missing DISCORD_TOKEN in environment")
    return token


class GatewayClient(discord.Client):
    """discord.Client that forwards events to an asyncio queue in arrival order."""

    def __init__(self, queue: "asyncio.Queue[GatewayEvent]", stats: Stats) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self._queue = queue
        self._stats = stats

    async def on_connect(self) -> None:
        self._stats.connection_status = ConnectionStatus.CONNECTING

    async def on_resumed(self) -> None:
        self._stats.connection_status = ConnectionStatus.CONNECTED
        self._stats.log_event(EventType.INFO, "Gateway session resumed")

    async def on_disconnect(self) -> None:
        self._stats.connection_status = ConnectionStatus.RECONNECTING
        LOGGER.warning("Gateway disconnected, waiting for reconnect")

    async def on_ready(self) -> None:
        if self.user is None:
            return
        await self._queue.put(ready_event(self.user))

    async def on_message(self, message: discord.Message) -> None:
        await self._queue.put(message_event(message))

    async def on_message_edit(self, _before: discord.Message, after: discord.Message) -> None:
        await self._queue.put(message_event(after, edited=True))

    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        await self._queue.put(reaction_event(payload))


def build_client(queue: "asyncio.Queue[GatewayEvent]", stats: Stats) -> GatewayClient:
    LOGGER.info("Initializing Discord gateway client")
    return GatewayClient(queue, stats)
