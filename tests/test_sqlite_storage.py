from __future__ import annotations

from datetime import datetime, timedelta, timezone

from adapters.sqlite_storage import SQLiteStorage
from core.stats import RollEntry, Stats


def _storage(tmp_path) -> SQLiteStorage:
    storage = SQLiteStorage(str(tmp_path / "rollwatch.db"))
    storage.init_db()
    return storage


def test_stats_round_trip(tmp_path) -> None:
    storage = _storage(tmp_path)
    assert storage.load_stats() == {}

    stats = Stats()
    stats.characters_rolled = 12
    stats.characters_claimed = 2
    storage.save_stats(stats.to_saved())
    stats.characters_rolled = 13
    storage.save_stats(stats.to_saved())

    loaded = storage.load_stats()
    assert loaded["characters_rolled"] == 13
    assert loaded["characters_claimed"] == 2
    assert Stats(saved=loaded).characters_rolled == 13


def test_rolls_listed_newest_first(tmp_path) -> None:
    storage = _storage(tmp_path)
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    storage.save_roll(RollEntry("Rem", "Re:Zero", 456, claimed=True, is_wished=True, channel_id=5, timestamp=base))
    storage.save_roll(
        RollEntry("Ram", "Re:Zero", None, claimed=False, is_wished=False, timestamp=base + timedelta(minutes=1))
    )

    rolls = storage.list_rolls()
    assert [roll.character_name for roll in rolls] == ["Ram", "Rem"]
    assert rolls[1].reward_value == 456
    assert rolls[1].claimed and rolls[1].is_wished
    assert rolls[1].channel_id == 5
    assert rolls[1].timestamp == base
    assert rolls[0].reward_value is None
    assert len(storage.list_rolls(limit=1)) == 1


def test_clear_rolls(tmp_path) -> None:
    storage = _storage(tmp_path)
    storage.save_roll(RollEntry("Rem", "Re:Zero", None, claimed=False, is_wished=False))

    assert storage.clear_rolls() == 1
    assert storage.list_rolls() == []
