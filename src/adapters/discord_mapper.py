"""Discord-to-core message mapping adapter.

This keeps discord.py-specific details out of the core. Attributes are read
with getattr so partially populated gateway objects map cleanly.
"""

from __future__ import annotations

from typing import Any, Optional

from core.models import (
    Author,
    Button,
    ButtonEmoji,
    Embed,
    EmbedField,
    Message,
    MessageEvent,
    ReactionEvent,
    ReadyEvent,
)

BUTTON_COMPONENT_TYPE = 2


def _enum_value(value: Any) -> Optional[int]:
    """Unwrap discord.py enums (ButtonStyle, ComponentType, Colour) to ints."""

    if value is None:
        return None
    raw = getattr(value, "value", value)
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


def map_embed(raw: Any) -> Embed:
    author = getattr(raw, "author", None)
    footer = getattr(raw, "footer", None)
    image = getattr(raw, "image", None)
    fields = tuple(
        EmbedField(name=str(getattr(item, "name", "") or ""), value=str(getattr(item, "value", "") or ""))
        for item in getattr(raw, "fields", None) or ()
    )
    colour = getattr(raw, "color", None) or getattr(raw, "colour", None)
    return Embed(
        title=_optional_str(getattr(raw, "title", None)),
        description=_optional_str(getattr(raw, "description", None)),
        author_name=_optional_str(getattr(author, "name", None)),
        footer_text=_optional_str(getattr(footer, "text", None)),
        fields=fields,
        image_url=_optional_str(getattr(image, "url", None)),
        color=_enum_value(colour),
    )


def map_button(raw: Any) -> Optional[Button]:
    """Return a Button for button components, None for anything else."""

    if _enum_value(getattr(raw, "type", None)) != BUTTON_COMPONENT_TYPE:
        return None
    emoji_raw = getattr(raw, "emoji", None)
    emoji = None
    if emoji_raw is not None:
        emoji = ButtonEmoji(
            name=_optional_str(getattr(emoji_raw, "name", None)),
            id=_optional_str(getattr(emoji_raw, "id", None)),
        )
    return Button(
        type=BUTTON_COMPONENT_TYPE,
        style=_enum_value(getattr(raw, "style", None)),
        label=_optional_str(getattr(raw, "label", None)),
        custom_id=_optional_str(getattr(raw, "custom_id", None)),
        emoji=emoji,
    )


def map_components(raw_rows: Any) -> tuple[tuple[Button, ...], ...]:
    rows: list[tuple[Button, ...]] = []
    for row in raw_rows or ():
        # A bare component outside an action row is treated as a row of one.
        children = getattr(row, "children", None)
        if children is None:
            children = [row]
        buttons = tuple(button for button in map(map_button, children) if button is not None)
        rows.append(buttons)
    return tuple(rows)


def map_message(raw: Any) -> Message:
    """Build a core Message from a discord.py Message."""

    author_raw = getattr(raw, "author", None)
    author = Author(
        id=int(getattr(author_raw, "id", 0) or 0),
        name=str(getattr(author_raw, "name", "") or ""),
        bot=bool(getattr(author_raw, "bot", False)),
    )
    channel = getattr(raw, "channel", None)
    channel_id = getattr(raw, "channel_id", None) or getattr(channel, "id", 0)
    guild = getattr(raw, "guild", None)
    guild_id = getattr(guild, "id", None)
    return Message(
        id=int(getattr(raw, "id", 0) or 0),
        channel_id=int(channel_id or 0),
        author=author,
        content=str(getattr(raw, "content", "") or ""),
        embeds=tuple(map_embed(item) for item in getattr(raw, "embeds", None) or ()),
        components=map_components(getattr(raw, "components", None)),
        guild_id=int(guild_id) if guild_id is not None else None,
    )


def message_event(raw: Any, edited: bool = False) -> MessageEvent:
    return MessageEvent(message=map_message(raw), edited=edited)


def reaction_event(payload: Any) -> ReactionEvent:
    """Map a raw reaction payload (on_raw_reaction_add)."""

    return ReactionEvent(
        message_id=int(getattr(payload, "message_id", 0) or 0),
        channel_id=int(getattr(payload, "channel_id", 0) or 0),
        user_id=int(getattr(payload, "user_id", 0) or 0),
        emoji=str(getattr(payload, "emoji", "") or ""),
    )


def ready_event(user: Any) -> ReadyEvent:
    return ReadyEvent(
        user_id=int(getattr(user, "id", 0) or 0),
        username=str(getattr(user, "name", "") or ""),
    )
