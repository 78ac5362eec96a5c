from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

from core.timefmt import (
    format_clock,
    format_duration,
    format_until,
    parse_time_of_day,
    reset_instant_from_hint,
)

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_format_duration_drops_leading_units() -> None:
    assert format_duration(timedelta(hours=1, minutes=2, seconds=3)) == "1h 2m 3s"
    assert format_duration(timedelta(minutes=5)) == "5m 0s"
    assert format_duration(timedelta(seconds=9)) == "9s"
    assert format_duration(timedelta(seconds=-4)) == "0s"


def test_format_clock() -> None:
    assert format_clock(timedelta(hours=26, minutes=1, seconds=2)) == "26:01:02"


def test_format_until() -> None:
    assert format_until(None, NOW) == "Unknown"
    assert format_until(NOW - timedelta(seconds=1), NOW) == "Available"
    assert format_until(NOW + timedelta(minutes=3), NOW) == "3m 0s"


def test_parse_time_of_day() -> None:
    assert parse_time_of_day("07:30") == time(7, 30)
    assert parse_time_of_day("25:00") is None
    assert parse_time_of_day("soon") is None


def test_reset_instant_from_hint() -> None:
    assert reset_instant_from_hint(None, NOW) is None
    assert reset_instant_from_hint("2h", NOW) == NOW + timedelta(hours=2)
    assert reset_instant_from_hint("1h 20m", NOW) == NOW + timedelta(hours=1, minutes=20)
    assert reset_instant_from_hint("45m", NOW) == NOW + timedelta(minutes=45)
    assert reset_instant_from_hint("later", NOW) is None
