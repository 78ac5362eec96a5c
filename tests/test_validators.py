from __future__ import annotations

from frontend.validators import parse_channel_id, parse_daily_time, parse_roll_commands, parse_threshold


def test_parse_channel_id_accepts_ids_and_links() -> None:
    assert parse_channel_id("123456789012345678").normalized == 123456789012345678
    link = parse_channel_id("https://discord.com/channels/1/222/")
    assert link.normalized == 222
    assert link.error is None


def test_parse_channel_id_errors() -> None:
    assert parse_channel_id("  ").error == "channel_id is required"
    assert parse_channel_id("general").error == "channel_id must be numeric"
    assert parse_channel_id("0").error == "channel_id must be positive"


def test_parse_daily_time() -> None:
    assert parse_daily_time("07:30") is None
    assert parse_daily_time("7pm") == "Use HH:MM (24h)"


def test_parse_threshold() -> None:
    assert parse_threshold("0.75") == (0.75, None)
    assert parse_threshold("") == (None, None)
    assert parse_threshold("1.5")[1] is not None
    assert parse_threshold("high")[1] is not None


def test_parse_roll_commands() -> None:
    assert parse_roll_commands("$wa, $ha $ma") == (["$wa", "$ha", "$ma"], None)
    assert parse_roll_commands("")[1] == "At least one roll command is required"
    assert parse_roll_commands("$wa wa")[1] == "Invalid command: wa"
    assert parse_roll_commands("$")[1] == "Invalid command: $"
