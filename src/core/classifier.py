"""Message classification (core domain).

The game bot has no machine-readable API, so every inbound message is mapped
to exactly one ClassifiedEvent by an ordered table of heuristic rules. The
first rule whose predicate matches wins; anything left over becomes
Unrecognized. Patterns live at module level so each rule can be tested on
its own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from core.models import (
    BudgetStatus,
    CharacterOffer,
    ClassifiedEvent,
    CooldownStatus,
    Embed,
    LookupResult,
    LootKind,
    LootOffer,
    Message,
    ReadySignal,
    Unrecognized,
)

REWARD_PATTERN = re.compile(r"(\d+)\s*<:kakera")
CLAIM_RANK_PATTERN = re.compile(r"Claims: #(\d+)")
CLAIM_EMOJI_PATTERN = re.compile(r"^(💖|❤️?|💕|💗|💘|💝)$")
ROLLS_LEFT_PATTERN = re.compile(r"(\d+)\s*rolls?\s*left", re.IGNORECASE)
LIMITED_MINUTES_PATTERN = re.compile(r"(\d+)\s*min\s*left", re.IGNORECASE)
RESET_HOURS_PATTERN = re.compile(r"reset\s+(?:in\s+)?(\d+)\s*(?:h|hour|hours|hr|hrs)\b", re.IGNORECASE)
RESET_MINUTES_PATTERN = re.compile(r"reset\s+(?:in\s+)?(\d+)\s*(?:m|min|minute|minutes)\b", re.IGNORECASE)
DAILY_READY_PATTERN = re.compile(r"(\$daily|\$dk|\bdaily\b).*\b(available|ready)\b", re.IGNORECASE)

OWNERSHIP_PHRASE = "Belongs to"
PREFERRED_GLYPHS = ("💖", "❤️")
LOOT_MARKER = "kakera"
LIMITED_MARKER = "roulette is limited"

LOOT_COLORS: dict[int, LootKind] = {
    0x9B59B6: LootKind.PURPLE,
    0x3498DB: LootKind.BLUE,
    0x1ABC9C: LootKind.TEAL,
    0x2ECC71: LootKind.GREEN,
    0xF1C40F: LootKind.YELLOW,
    0xE67E22: LootKind.ORANGE,
    0xE74C3C: LootKind.RED,
    0xFFB6C1: LootKind.PINK,
    0x00FFFF: LootKind.RAINBOW,
    0xFFFFFF: LootKind.LIGHT,
}

SUMMARY_CHARS = 50


@dataclass(frozen=True)
class ClassifierRule:
    """One entry of the classification table."""

    name: str
    matches: Callable[[Message], bool]
    extract: Callable[[Message], ClassifiedEvent]


def clip_text(value: str, limit: int = SUMMARY_CHARS) -> str:
    """Clip text to limit characters, ending with an ellipsis when cut."""

    if len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def first_line(text: Optional[str]) -> str:
    if not text:
        return ""
    lines = text.splitlines()
    return lines[0].strip() if lines else ""


def extract_reward_value(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    match = REWARD_PATTERN.search(text)
    return int(match.group(1)) if match else None


def is_claim_emoji(name: str) -> bool:
    return bool(CLAIM_EMOJI_PATTERN.match(name))


def loot_kind_from_color(color: Optional[int]) -> LootKind:
    if color is None:
        return LootKind.UNKNOWN
    return LOOT_COLORS.get(color, LootKind.UNKNOWN)


def _plain(text: str) -> str:
    # Bold markers split numbers from their units ("**9** rolls left").
    return text.replace("*", "").replace("__", "")


def _has_author_and_description(embed: Optional[Embed]) -> bool:
    return bool(embed and embed.author_name and embed.description)


def _is_lookup_result(message: Message) -> bool:
    embed = message.first_embed
    if not _has_author_and_description(embed):
        return False
    if any(True for _ in message.iter_buttons()):
        return False
    if OWNERSHIP_PHRASE in (embed.description or ""):
        return False
    return bool(embed.fields)


def _extract_lookup_result(message: Message) -> LookupResult:
    embed = message.first_embed
    return LookupResult(
        name=embed.author_name or embed.title or "",
        series=first_line(embed.description),
        found=True,
        image_url=embed.image_url,
        reward_value=extract_reward_value(embed.footer_text),
    )


def _is_character_offer(message: Message) -> bool:
    return _has_author_and_description(message.first_embed)


def find_claim_button(message: Message) -> tuple[bool, Optional[str]]:
    """Return (found, custom_id) for the first heart/marry button."""

    for button in message.iter_buttons():
        emoji_name = button.emoji.name if button.emoji else None
        if emoji_name and is_claim_emoji(emoji_name):
            return True, button.custom_id
        label = button.label or ""
        if "💖" in label or "marry" in label.lower():
            return True, button.custom_id
    return False, None


def _extract_character_offer(message: Message) -> CharacterOffer:
    embed = message.first_embed
    description = embed.description or ""
    rank_match = CLAIM_RANK_PATTERN.search(description)
    has_button, button_id = find_claim_button(message)
    return CharacterOffer(
        name=embed.author_name or "",
        series=first_line(description),
        message_id=message.id,
        channel_id=message.channel_id,
        reward_value=extract_reward_value(embed.footer_text),
        image_url=embed.image_url,
        already_claimed=OWNERSHIP_PHRASE in description,
        claim_rank=int(rank_match.group(1)) if rank_match else None,
        is_preferred=any(glyph in description for glyph in PREFERRED_GLYPHS),
        has_claim_affordance=has_button,
        claim_action_id=button_id,
    )


def _is_loot_button(button) -> bool:
    return bool(button.emoji and button.emoji.name and LOOT_MARKER in button.emoji.name)


def _is_loot_offer(message: Message) -> bool:
    return any(_is_loot_button(button) for button in message.iter_buttons())


def _extract_loot_offer(message: Message) -> LootOffer:
    embed = message.first_embed
    action_id = next(
        (button.custom_id for button in message.iter_buttons() if _is_loot_button(button)),
        None,
    )
    return LootOffer(
        message_id=message.id,
        channel_id=message.channel_id,
        loot_kind=loot_kind_from_color(embed.color if embed else None),
        action_id=action_id,
    )


def _is_budget_status(message: Message) -> bool:
    text = _plain(message.content).lower()
    return (
        "rolls left" in text
        or ("roll" in text and "reset" in text)
        or LIMITED_MARKER in text
    )


def _extract_budget_status(message: Message) -> BudgetStatus:
    text = _plain(message.content)
    if LIMITED_MARKER in text.lower():
        minutes = LIMITED_MINUTES_PATTERN.search(text)
        return BudgetStatus(
            remaining_count=0,
            reset_hint=f"{int(minutes.group(1))}m" if minutes else None,
        )

    count_match = ROLLS_LEFT_PATTERN.search(text)
    count = int(count_match.group(1)) if count_match else 0

    reset_hint = None
    hours = RESET_HOURS_PATTERN.search(text)
    if hours:
        reset_hint = f"{int(hours.group(1))}h"
    else:
        minutes = RESET_MINUTES_PATTERN.search(text)
        if minutes:
            reset_hint = f"{int(minutes.group(1))}m"
    return BudgetStatus(remaining_count=count, reset_hint=reset_hint)


def _is_cooldown_status(message: Message) -> bool:
    text = _plain(message.content).lower()
    return "claim" in text and ("available" in text or "reset" in text)


def _extract_cooldown_status(message: Message) -> CooldownStatus:
    text = _plain(message.content).lower()
    available = "can claim" in text or "claim available" in text
    return CooldownStatus(available=available)


def _is_ready_signal(message: Message) -> bool:
    return bool(DAILY_READY_PATTERN.search(_plain(message.content)))


def _extract_ready_signal(message: Message) -> ReadySignal:
    return ReadySignal(text=clip_text(_plain(message.content).strip()))


def summarize(message: Message) -> str:
    """Best-effort one-line description of a message for the activity feed."""

    embed = message.first_embed
    if embed and embed.author_name:
        series = first_line(embed.description)
        return f"{embed.author_name} ({series})" if series else embed.author_name
    if message.content:
        return clip_text(message.content)
    return ""


RULES: tuple[ClassifierRule, ...] = (
    ClassifierRule("lookup_result", _is_lookup_result, _extract_lookup_result),
    ClassifierRule("character_offer", _is_character_offer, _extract_character_offer),
    ClassifierRule("loot_offer", _is_loot_offer, _extract_loot_offer),
    ClassifierRule("budget_status", _is_budget_status, _extract_budget_status),
    ClassifierRule("cooldown_status", _is_cooldown_status, _extract_cooldown_status),
    ClassifierRule("ready_signal", _is_ready_signal, _extract_ready_signal),
)


def classify(message: Message, rules: Iterable[ClassifierRule] = RULES) -> ClassifiedEvent:
    """Return the event for the first matching rule, else Unrecognized."""

    for rule in rules:
        if rule.matches(message):
            return rule.extract(message)
    return Unrecognized(message=message, summary=summarize(message))


def matching_rule(message: Message, rules: Iterable[ClassifierRule] = RULES) -> Optional[str]:
    """Name of the rule that would classify message; None for Unrecognized."""

    for rule in rules:
        if rule.matches(message):
            return rule.name
    return None
