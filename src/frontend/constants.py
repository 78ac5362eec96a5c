"""Shared constants for the Textual UI."""

from __future__ import annotations

from pathlib import Path

DISCORD_BLURPLE = "#5865F2"
PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_PATH = PROJECT_ROOT / "config.json"
DB_PATH = PROJECT_ROOT / "src" / "rollwatch.db"

DEFAULT_CONFIG = {
    "channels": [],
    "automation": {
        "roll_commands": ["$wa", "$ha"],
        "roll_cooldown_seconds": 3600,
        "auto_roll": True,
        "auto_react_kakera": True,
        "auto_daily": True,
        "daily_time": "00:00",
        "initial_budget": 10,
    },
    "wishlist": {
        "enabled": True,
        "path": "wishlist.json",
        "fuzzy_match": True,
        "fuzzy_threshold": 0.8,
        "priority_verified": True,
    },
    "discord": {"bot_account": True, "lookup_timeout_seconds": 10},
    "stats_save_interval_seconds": 60,
    "logging": {
        "enabled": True,
        "level": "INFO",
        "console": True,
        "file": {"enabled": True, "path": "logs/rollwatch.log", "max_bytes": 5242880, "backup_count": 5},
        "redact": {"enabled": True, "patterns": ["DISCORD_TOKEN"]},
    },
}
