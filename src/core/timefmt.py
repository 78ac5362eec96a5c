"""Time helpers shared by the tracker, scheduler, and UI."""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta
from typing import Optional

_HOURS_HINT = re.compile(r"(\d+)\s*h(?:our|ours|r|rs)?\s*(?:(\d+)\s*m(?:in|inute|inutes)?)?")
_MINUTES_HINT = re.compile(r"(\d+)\s*m(?:in|inute|inutes)?")


def format_duration(duration: timedelta) -> str:
    """Render a duration as '1h 2m 3s', dropping leading zero units."""

    total = max(int(duration.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_clock(duration: timedelta) -> str:
    """Render a duration as HH:MM:SS (hours may exceed 24)."""

    total = max(int(duration.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_time_of_day(value: str) -> Optional[time]:
    """Parse 'HH:MM' into a time; None when malformed or out of range."""

    parts = value.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        return None
    hours, minutes = int(parts[0]), int(parts[1])
    if hours >= 24 or minutes >= 60:
        return None
    return time(hours, minutes)


def reset_instant_from_hint(hint: Optional[str], now: datetime) -> Optional[datetime]:
    """Turn a free-text hint such as '2h', '1h 20m' or '45m' into an instant."""

    if not hint:
        return None
    hours_match = _HOURS_HINT.search(hint)
    if hours_match:
        hours = int(hours_match.group(1))
        minutes = int(hours_match.group(2) or 0)
        return now + timedelta(hours=hours, minutes=minutes)
    minutes_match = _MINUTES_HINT.search(hint)
    if minutes_match:
        return now + timedelta(minutes=int(minutes_match.group(1)))
    return None


def format_until(instant: Optional[datetime], now: datetime) -> str:
    """Countdown label for the dashboard: Unknown, Available, or a duration."""

    if instant is None:
        return "Unknown"
    if instant <= now:
        return "Available"
    return format_duration(instant - now)
