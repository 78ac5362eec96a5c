"""Decision engine: maps classified game-bot messages to actions.

This module is integration-agnostic. It reaches the chat service only through
ChatClientPort, and persistence only through StatsStoragePort, so tests drive
it with fakes.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.classifier import classify, clip_text
from core.config import EngineConfig
from core.lookup import LookupCoordinator
from core.models import (
    BudgetStatus,
    CharacterOffer,
    CooldownStatus,
    GatewayEvent,
    LookupResult,
    LootOffer,
    Message,
    MessageEvent,
    ReactionEvent,
    ReadyEvent,
    ReadySignal,
    Unrecognized,
)
from core.ports import ChatActionError, ChatClientPort, StatsStoragePort
from core.preferences import PreferenceStore
from core.stats import (
    BotInfoActivity,
    ConnectionStatus,
    EventType,
    RollActivity,
    RollEntry,
    Stats,
    UserMessageActivity,
)
from core.timefmt import reset_instant_from_hint
from core.tracker import Tracker

LOGGER = logging.getLogger(__name__)

CLAIM_GLYPH = "💖"
LOOT_GLYPH = "💎"
CLAIM_DELAY_SECONDS = (0.1, 0.6)
LOOT_DELAY_SECONDS = (0.05, 0.25)


class Decision(str, Enum):
    """Outcome of handling one game-bot message."""

    SKIPPED_CLAIMED = "skipped_claimed"
    SKIPPED_PAUSED = "skipped_paused"
    NOT_PREFERRED = "not_preferred"
    CLAIM_UNAVAILABLE = "claim_unavailable"
    CLAIMED = "claimed"
    CLAIM_FAILED = "claim_failed"
    LOOT_DISABLED = "loot_disabled"
    LOOT_COLLECTED = "loot_collected"
    LOOT_FAILED = "loot_failed"
    LOOKUP = "lookup"
    INFO = "info"


class DecisionEngine:
    """Classifies inbound messages and takes claim and loot actions."""

    def __init__(
        self,
        client: ChatClientPort,
        tracker: Tracker,
        preferences: PreferenceStore,
        stats: Stats,
        config: EngineConfig,
        coordinator: Optional[LookupCoordinator] = None,
        stats_storage: Optional[StatsStoragePort] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        claim_delay: tuple[float, float] = CLAIM_DELAY_SECONDS,
        loot_delay: tuple[float, float] = LOOT_DELAY_SECONDS,
    ) -> None:
        self._client = client
        self._tracker = tracker
        self._preferences = preferences
        self._stats = stats
        self._config = config
        self._coordinator = coordinator
        self._stats_storage = stats_storage
        self._sleep = sleep
        self._claim_delay = claim_delay
        self._loot_delay = loot_delay

    # Routing ---------------------------------------------------------------

    def _is_target_channel(self, channel_id: int) -> bool:
        targets = self._config.target_channels
        return not targets or channel_id in targets

    def _is_game_bot(self, message: Message) -> bool:
        author = message.author
        return author.id == self._config.game_bot_id or "mudae" in author.name.lower()

    def on_ready(self, event: ReadyEvent) -> None:
        self._stats.user_id = event.user_id
        self._stats.username = event.username
        self._stats.connection_status = ConnectionStatus.CONNECTED
        self._stats.log_event(EventType.SUCCESS, f"Connected as {event.username}")
        LOGGER.info("Connected as %s (%s)", event.username, event.user_id)

    def on_reaction(self, event: ReactionEvent) -> None:
        LOGGER.debug(
            "Reaction %s by %s on message %s", event.emoji, event.user_id, event.message_id
        )

    async def handle(self, message: Message) -> Optional[Decision]:
        """Handle one inbound message; None when it is not for the engine."""

        if not self._is_target_channel(message.channel_id):
            return None

        if not self._is_game_bot(message):
            if message.author.id == self._stats.user_id:
                return None
            if message.content:
                self._stats.add_channel_activity(
                    UserMessageActivity(
                        username=message.author.name,
                        content=clip_text(message.content),
                    )
                )
            return None

        event = classify(message)
        LOGGER.debug("Message %s classified as %s", message.id, type(event).__name__)

        if isinstance(event, CharacterOffer):
            return await self._on_character(event, message)
        if isinstance(event, LootOffer):
            return await self._on_loot(event, message)
        if isinstance(event, BudgetStatus):
            await self._tracker.set_budget(event.remaining_count)
            # Each budget report is authoritative, including a missing hint.
            await self._tracker.set_reset_hint(
                reset_instant_from_hint(event.reset_hint, datetime.now(timezone.utc))
            )
            self._info(f"Rolls remaining: {event.remaining_count}")
            return Decision.INFO
        if isinstance(event, CooldownStatus):
            await self._tracker.set_claim_available(event.available)
            self._info("Claim available" if event.available else "Claim on cooldown")
            return Decision.INFO
        if isinstance(event, ReadySignal):
            self._info(f"Ready: {clip_text(event.text)}")
            return Decision.INFO
        if isinstance(event, LookupResult):
            if self._coordinator is not None:
                self._coordinator.offer(event, message.channel_id)
            if event.found:
                self._info(f"Lookup: {event.name} ({event.series})")
            return Decision.INFO
        if isinstance(event, Unrecognized):
            embed = message.first_embed
            if self._coordinator is not None and embed is not None and embed.author_name:
                self._coordinator.offer(event, message.channel_id)
            if event.summary:
                self._info(event.summary)
            return Decision.INFO
        return None

    def _info(self, text: str) -> None:
        self._stats.add_channel_activity(BotInfoActivity(message=text))

    # Character offers ------------------------------------------------------

    async def _on_character(self, offer: CharacterOffer, message: Message) -> Decision:
        if (
            self._coordinator is not None
            and not offer.has_claim_affordance
            and self._coordinator.is_pending(offer.channel_id)
        ):
            self._coordinator.offer(offer, offer.channel_id)
            return Decision.LOOKUP

        preferred = offer.is_preferred or (
            self._config.wishlist.enabled
            and self._preferences.is_wanted(offer.name, offer.series) is not None
        )
        decision = await self._decide_claim(offer, message, preferred)
        self._record_roll(offer, preferred, claimed=decision is Decision.CLAIMED)
        return decision

    async def _decide_claim(
        self, offer: CharacterOffer, message: Message, preferred: bool
    ) -> Decision:
        if offer.already_claimed:
            LOGGER.debug("%s is already claimed", offer.name)
            return Decision.SKIPPED_CLAIMED
        if self._tracker.paused:
            return Decision.SKIPPED_PAUSED
        if not preferred:
            return Decision.NOT_PREFERRED

        self._stats.wishlist_matches += 1
        self._stats.log_event(EventType.WISHLIST, f"Wishlist match: {offer.name}")
        LOGGER.info("Wishlist match: %s (%s)", offer.name, offer.series)

        if not self._tracker.claim_available:
            LOGGER.info("Claim on cooldown, not claiming %s", offer.name)
            return Decision.CLAIM_UNAVAILABLE

        await self._sleep(random.uniform(*self._claim_delay))
        if await self._activate(message, offer.claim_action_id, CLAIM_GLYPH):
            self._stats.characters_claimed += 1
            self._stats.log_event(EventType.CLAIM, f"Claimed {offer.name}")
            LOGGER.info("Claimed %s", offer.name)
            return Decision.CLAIMED

        self._stats.log_event(EventType.ERROR, f"Failed to claim {offer.name}")
        return Decision.CLAIM_FAILED

    def _record_roll(self, offer: CharacterOffer, preferred: bool, claimed: bool) -> None:
        self._stats.characters_rolled += 1
        entry = RollEntry(
            character_name=offer.name,
            series=offer.series,
            reward_value=offer.reward_value,
            claimed=claimed,
            is_wished=preferred,
            channel_id=offer.channel_id,
        )
        self._stats.add_roll(entry)
        self._stats.add_channel_activity(
            RollActivity(
                character_name=offer.name,
                reward_value=offer.reward_value,
                is_wished=preferred,
                claimed=claimed,
            )
        )
        self._stats.log_event(EventType.ROLL, f"Rolled {offer.name} ({offer.series})")
        if self._stats_storage is not None:
            self._stats_storage.save_roll(entry)

    # Loot offers -----------------------------------------------------------

    async def _on_loot(self, offer: LootOffer, message: Message) -> Decision:
        if not self._config.automation.auto_react_kakera or self._tracker.paused:
            return Decision.LOOT_DISABLED

        await self._sleep(random.uniform(*self._loot_delay))
        if await self._activate(message, offer.action_id, LOOT_GLYPH):
            self._stats.kakera_collected += 1
            self._stats.log_event(EventType.KAKERA, f"Collected {offer.loot_kind.value} kakera")
            return Decision.LOOT_COLLECTED

        self._stats.log_event(EventType.WARNING, "Failed to collect kakera")
        return Decision.LOOT_FAILED

    # Actions ---------------------------------------------------------------

    async def _activate(self, message: Message, action_id: Optional[str], glyph: str) -> bool:
        """Click action_id when present, else (or on failure) react with glyph."""

        if action_id:
            try:
                await self._client.click_button(
                    message.id,
                    message.channel_id,
                    message.guild_id,
                    self._config.game_bot_id,
                    action_id,
                )
                return True
            except ChatActionError as exc:
                LOGGER.warning("Button click failed on %s, reacting instead: %s", message.id, exc)

        try:
            await self._client.add_reaction(message.channel_id, message.id, glyph)
            return True
        except ChatActionError as exc:
            LOGGER.warning("Reaction failed on %s: %s", message.id, exc)
            return False


async def run_event_loop(
    engine: DecisionEngine,
    queue: "asyncio.Queue[GatewayEvent]",
    shutdown: asyncio.Event,
) -> None:
    """Consume gateway events in arrival order until shutdown is set."""

    while not shutdown.is_set():
        try:
            event = await asyncio.wait_for(queue.get(), timeout=1.0)
        except asyncio.TimeoutError:
            continue
        try:
            if isinstance(event, ReadyEvent):
                engine.on_ready(event)
            elif isinstance(event, ReactionEvent):
                engine.on_reaction(event)
            elif isinstance(event, MessageEvent):
                if event.edited:
                    # Edits restate rolls that were already handled.
                    LOGGER.debug("Ignoring edit of message %s", event.message.id)
                else:
                    await engine.handle(event.message)
        except Exception:
            LOGGER.exception("Failed to handle gateway event %s", type(event).__name__)
        finally:
            queue.task_done()
