"""Shared activity formatting helpers.

Keeping formatting here prevents drift between the dashboard and the CLI
listings and keeps lines consistent regardless of where they are shown.
"""

from __future__ import annotations

from typing import Optional

from rich.text import Text

from core.models import PreferenceEntry
from core.stats import (
    ActivityEvent,
    BotInfoActivity,
    ChannelActivity,
    EventType,
    RollActivity,
    RollEntry,
    UserMessageActivity,
)

EVENT_STYLES: dict[EventType, tuple[str, str]] = {
    EventType.INFO: ("ℹ", "blue"),
    EventType.SUCCESS: ("✓", "green"),
    EventType.WARNING: ("⚠", "yellow"),
    EventType.ERROR: ("✗", "red"),
    EventType.ROLL: ("🎲", "cyan"),
    EventType.CLAIM: ("💖", "magenta"),
    EventType.KAKERA: ("💎", "yellow"),
    EventType.WISHLIST: ("⭐", "magenta"),
}


def format_reward(value: Optional[int]) -> str:
    return f" ({value}ka)" if value is not None else ""


def roll_indicator(is_wished: bool, claimed: bool) -> str:
    if is_wished:
        return "⭐"
    if claimed:
        return "💖"
    return "🎲"


def format_activity_event(event: ActivityEvent) -> Text:
    """One activity-log line: local time, icon, message."""

    icon, colour = EVENT_STYLES.get(event.event_type, ("•", "white"))
    timestamp = event.timestamp.astimezone().strftime("%H:%M:%S")
    return Text.assemble(
        (f"{timestamp} ", "grey50"),
        (f"{icon}  ", colour),
        (event.message, "white"),
    )


def format_channel_activity(item: ChannelActivity) -> Text:
    if isinstance(item, RollActivity):
        if item.is_wished:
            name_style = "bold magenta"
        elif item.claimed:
            name_style = "green"
        else:
            name_style = "white"
        return Text.assemble(
            (f"{roll_indicator(item.is_wished, item.claimed)}  ", "cyan"),
            (item.character_name, name_style),
            (format_reward(item.reward_value), "yellow"),
        )
    if isinstance(item, UserMessageActivity):
        return Text.assemble(
            (item.username, "cyan"),
            (": ", "grey50"),
            (item.content, "white"),
        )
    if isinstance(item, BotInfoActivity):
        return Text.assemble(("ℹ  ", "blue"), (item.message, "grey50"))
    return Text(str(item))


def format_roll(entry: RollEntry) -> str:
    """Plain one-line roll summary used by tables and exports."""

    series = f" ({entry.series})" if entry.series else ""
    return f"{roll_indicator(entry.is_wished, entry.claimed)} {entry.character_name}{series}{format_reward(entry.reward_value)}"


def format_preference(entry: PreferenceEntry) -> str:
    """Wishlist line: verification mark, name, series, priority."""

    mark = "✓" if entry.verified else "?"
    series = f" ({entry.series})" if entry.series else ""
    priority = f" [P{entry.priority}]" if entry.priority > 0 else ""
    return f"{mark} {entry.name}{series}{priority}"
