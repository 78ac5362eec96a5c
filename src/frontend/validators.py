"""Validation helpers for config editing."""

from __future__ import annotations

from dataclasses import dataclass

from core.timefmt import parse_time_of_day


@dataclass
class ChannelIdInfo:
    normalized: int | None
    error: str | None = None


def parse_channel_id(raw_value: str) -> ChannelIdInfo:
    raw_value = raw_value.strip()
    if not raw_value:
        return ChannelIdInfo(None, "channel_id is required")
    # Copy-paste from a channel link: https://discord.com/channels/<guild>/<channel>
    if "/" in raw_value:
        raw_value = raw_value.rstrip("/").rsplit("/", 1)[-1]
    if not raw_value.isdigit():
        return ChannelIdInfo(None, "channel_id must be numeric")
    value = int(raw_value)
    if value <= 0:
        return ChannelIdInfo(None, "channel_id must be positive")
    return ChannelIdInfo(value)


def parse_daily_time(raw_value: str) -> str | None:
    """Return an error message, or None when raw_value is a valid HH:MM."""

    if parse_time_of_day(raw_value.strip()) is None:
        return "Use HH:MM (24h)"
    return None


def parse_threshold(raw_value: str) -> tuple[float | None, str | None]:
    stripped = raw_value.strip()
    if not stripped:
        return None, None
    try:
        value = float(stripped)
    except ValueError:
        return None, "Enter a number between 0 and 1"
    if not 0.0 <= value <= 1.0:
        return None, "Enter a number between 0 and 1"
    return value, None


def parse_roll_commands(raw_value: str) -> tuple[list[str], str | None]:
    """Split a comma or space separated command list; each must start with $."""

    commands = [item for item in raw_value.replace(",", " ").split() if item]
    if not commands:
        return [], "At least one roll command is required"
    invalid = [item for item in commands if not item.startswith("$") or len(item) < 2]
    if invalid:
        return [], f"Invalid command: {invalid[0]}"
    return commands, None
