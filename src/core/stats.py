"""Session statistics and activity feeds shown by the dashboard.

Counters are cumulative across restarts (see StatsStoragePort); feeds are
bounded and session-local.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    ROLL = "roll"
    CLAIM = "claim"
    KAKERA = "kakera"
    WISHLIST = "wishlist"


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


@dataclass(frozen=True)
class ActivityEvent:
    event_type: EventType
    message: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class RollEntry:
    character_name: str
    series: str
    reward_value: Optional[int]
    claimed: bool
    is_wished: bool
    channel_id: int = 0
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class RollActivity:
    character_name: str
    reward_value: Optional[int]
    is_wished: bool
    claimed: bool


@dataclass(frozen=True)
class UserMessageActivity:
    username: str
    content: str


@dataclass(frozen=True)
class BotInfoActivity:
    message: str


ChannelActivity = Union[RollActivity, UserMessageActivity, BotInfoActivity]

COUNTER_KEYS = (
    "characters_rolled",
    "characters_claimed",
    "wishlist_matches",
    "kakera_collected",
    "rolls_executed",
    "total_uptime_seconds",
)


class Stats:
    """Counters plus bounded activity, roll, and channel feeds."""

    def __init__(
        self,
        saved: Optional[dict[str, int]] = None,
        max_log_entries: int = 100,
        max_rolls: int = 50,
        max_channel_activity: int = 50,
    ) -> None:
        saved = saved or {}
        self.start_time = _utcnow()
        self.characters_rolled = int(saved.get("characters_rolled", 0))
        self.characters_claimed = int(saved.get("characters_claimed", 0))
        self.wishlist_matches = int(saved.get("wishlist_matches", 0))
        self.kakera_collected = int(saved.get("kakera_collected", 0))
        self.rolls_executed = int(saved.get("rolls_executed", 0))
        self._past_uptime = int(saved.get("total_uptime_seconds", 0))
        self.connection_status = ConnectionStatus.DISCONNECTED
        self.user_id = 0
        self.username: Optional[str] = None
        self._activity: deque[ActivityEvent] = deque(maxlen=max_log_entries)
        self._rolls: deque[RollEntry] = deque(maxlen=max_rolls)
        self._channel: deque[ChannelActivity] = deque(maxlen=max_channel_activity)

    def to_saved(self) -> dict[str, int]:
        return {
            "characters_rolled": self.characters_rolled,
            "characters_claimed": self.characters_claimed,
            "wishlist_matches": self.wishlist_matches,
            "kakera_collected": self.kakera_collected,
            "rolls_executed": self.rolls_executed,
            "total_uptime_seconds": self.total_uptime_seconds(),
        }

    def log_event(self, event_type: EventType, message: str) -> None:
        self._activity.append(ActivityEvent(event_type=event_type, message=message))

    def add_roll(self, entry: RollEntry) -> None:
        self._rolls.append(entry)

    def add_channel_activity(self, activity: ChannelActivity) -> None:
        self._channel.append(activity)

    def activity_log(self) -> list[ActivityEvent]:
        return list(self._activity)

    def roll_history(self) -> list[RollEntry]:
        return list(self._rolls)

    def channel_activity(self) -> list[ChannelActivity]:
        return list(self._channel)

    def uptime(self) -> timedelta:
        return _utcnow() - self.start_time

    def total_uptime_seconds(self) -> int:
        return self._past_uptime + max(int(self.uptime().total_seconds()), 0)
