from __future__ import annotations

from datetime import datetime, timezone

from adapters.activity_formatting import (
    format_activity_event,
    format_channel_activity,
    format_preference,
    format_reward,
    format_roll,
    roll_indicator,
)
from core.models import PreferenceEntry
from core.stats import ActivityEvent, BotInfoActivity, EventType, RollActivity, RollEntry, UserMessageActivity


def test_format_reward() -> None:
    assert format_reward(None) == ""
    assert format_reward(120) == " (120ka)"


def test_roll_indicator_prefers_wish_mark() -> None:
    assert roll_indicator(is_wished=True, claimed=True) == "⭐"
    assert roll_indicator(is_wished=False, claimed=True) == "💖"
    assert roll_indicator(is_wished=False, claimed=False) == "🎲"


def test_activity_event_line() -> None:
    timestamp = datetime(2024, 1, 1, 12, 0, 5, tzinfo=timezone.utc)
    line = format_activity_event(ActivityEvent(EventType.CLAIM, "Claimed Rem", timestamp))

    expected_clock = timestamp.astimezone().strftime("%H:%M:%S")
    assert line.plain == f"{expected_clock} 💖  Claimed Rem"


def test_channel_activity_lines() -> None:
    roll = format_channel_activity(RollActivity("Rem", 300, is_wished=True, claimed=False))
    assert roll.plain == "⭐  Rem (300ka)"

    user = format_channel_activity(UserMessageActivity(username="friend", content="hi"))
    assert user.plain == "friend: hi"

    info = format_channel_activity(BotInfoActivity(message="Rolls remaining: 3"))
    assert info.plain == "ℹ  Rolls remaining: 3"


def test_roll_and_preference_lines() -> None:
    roll = RollEntry("Rem", "Re:Zero", 300, claimed=True, is_wished=False)
    assert format_roll(roll) == "💖 Rem (Re:Zero) (300ka)"

    entry = PreferenceEntry(name="Rem", series="Re:Zero", verified=True, priority=3)
    assert format_preference(entry) == "✓ Rem (Re:Zero) [P3]"
    assert format_preference(PreferenceEntry(name="Ram")) == "? Ram"
