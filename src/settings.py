"""Static configuration for rollwatch.

All user-editable settings (channels, automation, wishlist, logging) live in
a single JSON file for quick edits without touching Python.
"""

import json
import os

from core.config import (
    EngineConfig,
    automation_from_dict,
    channels_from_list,
    wishlist_from_dict,
)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Where to store the SQLite database (cumulative stats and the roll log).
DB_PATH = os.path.join(os.path.dirname(__file__), "rollwatch.db")

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH} (copy config.example.json to start)")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Enabled channels, in order; the scheduler rolls in the first ones first.
CHANNELS, CHANNEL_ALIASES = channels_from_list(_CONFIG.get("channels", []))

# Roll commands, cooldown, daily schedule, and automation switches.
AUTOMATION = automation_from_dict(_CONFIG.get("automation", {}))

# Wishlist matching; the path is resolved against the project root.
WISHLIST = wishlist_from_dict(_CONFIG.get("wishlist", {}))
WISHLIST_PATH = _resolve_path(WISHLIST.path)

ENGINE = EngineConfig(
    automation=AUTOMATION,
    wishlist=WISHLIST,
    target_channels=frozenset(CHANNELS),
)

# Discord account details. Secrets stay in .env (DISCORD_TOKEN).
_discord = _CONFIG.get("discord", {})
BOT_ACCOUNT = bool(_discord.get("bot_account", True))
LOOKUP_TIMEOUT_SECONDS = float(_discord.get("lookup_timeout_seconds", 10))

# How often cumulative counters are flushed to SQLite.
STATS_SAVE_INTERVAL_SECONDS = int(_CONFIG.get("stats_save_interval_seconds", 60))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
