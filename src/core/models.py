"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types. Inbound messages are frozen
snapshots; classified events form a closed union, one class per observed
message shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class Author:
    """Message author as seen by the gateway."""

    id: int
    name: str
    bot: bool = False


@dataclass(frozen=True)
class EmbedField:
    name: str
    value: str


@dataclass(frozen=True)
class Embed:
    """Rich content block. Every part is optional and absence is meaningful."""

    title: Optional[str] = None
    description: Optional[str] = None
    author_name: Optional[str] = None
    footer_text: Optional[str] = None
    fields: tuple[EmbedField, ...] = ()
    image_url: Optional[str] = None
    color: Optional[int] = None


@dataclass(frozen=True)
class ButtonEmoji:
    name: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class Button:
    """Interactive button; custom_id is the opaque id used to click it."""

    type: int = 2
    style: Optional[int] = None
    label: Optional[str] = None
    custom_id: Optional[str] = None
    emoji: Optional[ButtonEmoji] = None


@dataclass(frozen=True)
class Message:
    """Normalized inbound message used by the classifier and the engine."""

    id: int
    channel_id: int
    author: Author
    content: str = ""
    embeds: tuple[Embed, ...] = ()
    components: tuple[tuple[Button, ...], ...] = ()
    guild_id: Optional[int] = None

    def iter_buttons(self):
        """Yield buttons row by row, left to right."""

        for row in self.components:
            yield from row

    @property
    def first_embed(self) -> Optional[Embed]:
        return self.embeds[0] if self.embeds else None


class LootKind(str, Enum):
    PURPLE = "purple"
    BLUE = "blue"
    TEAL = "teal"
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    PINK = "pink"
    RAINBOW = "rainbow"
    LIGHT = "light"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CharacterOffer:
    name: str
    series: str
    message_id: int
    channel_id: int
    reward_value: Optional[int] = None
    image_url: Optional[str] = None
    already_claimed: bool = False
    claim_rank: Optional[int] = None
    is_preferred: bool = False
    has_claim_affordance: bool = False
    claim_action_id: Optional[str] = None


@dataclass(frozen=True)
class LootOffer:
    message_id: int
    channel_id: int
    loot_kind: LootKind = LootKind.UNKNOWN
    action_id: Optional[str] = None


@dataclass(frozen=True)
class LookupResult:
    name: str
    series: str
    found: bool = True
    image_url: Optional[str] = None
    reward_value: Optional[int] = None


@dataclass(frozen=True)
class BudgetStatus:
    remaining_count: int
    reset_hint: Optional[str] = None


@dataclass(frozen=True)
class CooldownStatus:
    available: bool
    reset_hint: Optional[str] = None


@dataclass(frozen=True)
class ReadySignal:
    text: str = ""


@dataclass(frozen=True)
class Unrecognized:
    message: Message
    summary: str = ""


ClassifiedEvent = Union[
    CharacterOffer,
    LootOffer,
    LookupResult,
    BudgetStatus,
    CooldownStatus,
    ReadySignal,
    Unrecognized,
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PreferenceEntry:
    """A wanted character. Name is unique case-insensitively within a store."""

    name: str
    series: Optional[str] = None
    external_id: Optional[str] = None
    verified: bool = False
    added_at: datetime = field(default_factory=_utcnow)
    notes: Optional[str] = None
    priority: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "series": self.series,
            "character_id": self.external_id,
            "verified": self.verified,
            "added_date": self.added_at.isoformat(),
            "notes": self.notes,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "PreferenceEntry":
        """Build an entry from its persisted form; raises on missing fields."""

        added_raw = raw.get("added_date")
        added_at = datetime.fromisoformat(added_raw) if added_raw else _utcnow()
        if added_at.tzinfo is None:
            added_at = added_at.replace(tzinfo=timezone.utc)
        return cls(
            name=str(raw["name"]),
            series=raw.get("series"),
            external_id=raw.get("character_id"),
            verified=bool(raw.get("verified", False)),
            added_at=added_at,
            notes=raw.get("notes"),
            priority=int(raw.get("priority", 0)),
        )


# Gateway events delivered to the inbound consumer in arrival order.


@dataclass(frozen=True)
class ReadyEvent:
    user_id: int
    username: str


@dataclass(frozen=True)
class MessageEvent:
    message: Message
    edited: bool = False


@dataclass(frozen=True)
class ReactionEvent:
    message_id: int
    channel_id: int
    user_id: int
    emoji: str


GatewayEvent = Union[ReadyEvent, MessageEvent, ReactionEvent]
