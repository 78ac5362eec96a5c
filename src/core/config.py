"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Mudae's application id; also used as the interaction application_id.
GAME_BOT_ID = 432610292342587392


@dataclass(frozen=True)
class AutomationConfig:
    """Automation switches shared by the engine and the scheduler."""

    roll_commands: tuple[str, ...] = ("$wa", "$ha")
    roll_cooldown_seconds: int = 3600
    auto_roll: bool = True
    auto_react_kakera: bool = True
    auto_daily: bool = True
    daily_time: str = "00:00"
    initial_budget: int = 10


@dataclass(frozen=True)
class WishlistConfig:
    """Wishlist matching settings."""

    enabled: bool = True
    path: str = "wishlist.json"
    fuzzy_match: bool = True
    fuzzy_threshold: float = 0.8
    priority_verified: bool = True


@dataclass(frozen=True)
class EngineConfig:
    """Everything the decision engine needs besides its collaborators."""

    automation: AutomationConfig = field(default_factory=AutomationConfig)
    wishlist: WishlistConfig = field(default_factory=WishlistConfig)
    target_channels: frozenset[int] = frozenset()
    game_bot_id: int = GAME_BOT_ID


def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    return bool(value)


def automation_from_dict(raw: dict) -> AutomationConfig:
    """Build AutomationConfig from the config.json "automation" section."""

    defaults = AutomationConfig()
    commands = raw.get("roll_commands")
    if isinstance(commands, str):
        commands = [commands]
    commands = tuple(str(item).strip() for item in commands or () if str(item).strip())
    return AutomationConfig(
        roll_commands=commands or defaults.roll_commands,
        roll_cooldown_seconds=int(raw.get("roll_cooldown_seconds", defaults.roll_cooldown_seconds)),
        auto_roll=_as_bool(raw.get("auto_roll"), defaults.auto_roll),
        auto_react_kakera=_as_bool(raw.get("auto_react_kakera"), defaults.auto_react_kakera),
        auto_daily=_as_bool(raw.get("auto_daily"), defaults.auto_daily),
        daily_time=str(raw.get("daily_time", defaults.daily_time)),
        initial_budget=int(raw.get("initial_budget", defaults.initial_budget)),
    )


def wishlist_from_dict(raw: dict) -> WishlistConfig:
    defaults = WishlistConfig()
    threshold = float(raw.get("fuzzy_threshold", defaults.fuzzy_threshold))
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"fuzzy_threshold must be within [0, 1], got {threshold}")
    return WishlistConfig(
        enabled=_as_bool(raw.get("enabled"), defaults.enabled),
        path=str(raw.get("path", defaults.path)),
        fuzzy_match=_as_bool(raw.get("fuzzy_match"), defaults.fuzzy_match),
        fuzzy_threshold=threshold,
        priority_verified=_as_bool(raw.get("priority_verified"), defaults.priority_verified),
    )


def channels_from_list(raw_channels: list) -> tuple[list[int], dict[int, str]]:
    """Enabled channel ids in configured order plus an alias map."""

    channels: list[int] = []
    aliases: dict[int, str] = {}
    for entry in raw_channels or []:
        channel_id = entry.get("channel_id")
        if channel_id in (None, ""):
            continue
        if not entry.get("enabled", True):
            continue
        channel_id = int(channel_id)
        if channel_id not in channels:
            channels.append(channel_id)
        alias = entry.get("alias")
        if alias:
            aliases[channel_id] = alias
    return channels, aliases
