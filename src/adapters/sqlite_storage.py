"""SQLite storage adapter.

Implements the core StatsStoragePort using a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

from core.stats import COUNTER_KEYS, RollEntry


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StatsStoragePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - stats: single row of cumulative counters
        - rolls: append-only log of observed rolls
        """

        with self._connect() as conn:
            # stats holds exactly one row (id = 1) so restarts keep the totals.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS stats (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    characters_rolled INTEGER NOT NULL DEFAULT 0,
                    characters_claimed INTEGER NOT NULL DEFAULT 0,
                    wishlist_matches INTEGER NOT NULL DEFAULT 0,
                    kakera_collected INTEGER NOT NULL DEFAULT 0,
                    rolls_executed INTEGER NOT NULL DEFAULT 0,
                    total_uptime_seconds INTEGER NOT NULL DEFAULT 0,
                    updated_at TIMESTAMP
                )
                """
            )
            # rolls is denormalized; the data tab reads it newest first.
            # Fields:
            # - character_name / series: as shown on the roll
            # - reward_value: kakera value, NULL when not shown
            # - claimed / is_wished: 0 or 1
            # - channel_id: raw channel id for reference
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS rolls (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    character_name TEXT NOT NULL,
                    series TEXT,
                    reward_value INTEGER,
                    claimed INTEGER NOT NULL DEFAULT 0,
                    is_wished INTEGER NOT NULL DEFAULT 0,
                    channel_id INTEGER,
                    date TIMESTAMP NOT NULL
                )
                """
            )

    def load_stats(self) -> dict[str, int]:
        """Return saved counters, or an empty dict on first run."""

        with self._connect() as conn:
            row = conn.execute("SELECT * FROM stats WHERE id = 1").fetchone()
        if row is None:
            return {}
        return {key: int(row[key]) for key in COUNTER_KEYS}

    def save_stats(self, stats: dict[str, int]) -> None:
        """Upsert the counter row."""

        values = [int(stats.get(key, 0)) for key in COUNTER_KEYS]
        now = datetime.now(timezone.utc).isoformat()
        columns = ", ".join(COUNTER_KEYS)
        placeholders = ", ".join("?" for _ in COUNTER_KEYS)
        updates = ", ".join(f"{key} = excluded.{key}" for key in COUNTER_KEYS)
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO stats (id, {columns}, updated_at)
                VALUES (1, {placeholders}, ?)
                ON CONFLICT(id) DO UPDATE SET {updates}, updated_at = excluded.updated_at
                """,
                (*values, now),
            )

    def save_roll(self, roll: RollEntry) -> None:
        """Persist a roll to the append-only rolls table."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO rolls (
                    character_name,
                    series,
                    reward_value,
                    claimed,
                    is_wished,
                    channel_id,
                    date
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    roll.character_name,
                    roll.series,
                    roll.reward_value,
                    int(roll.claimed),
                    int(roll.is_wished),
                    roll.channel_id,
                    roll.timestamp.isoformat(),
                ),
            )

    def list_rolls(self, limit: int = 200) -> list[RollEntry]:
        """Return the most recent rolls, newest first."""

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM rolls ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [
            RollEntry(
                character_name=row["character_name"],
                series=row["series"] or "",
                reward_value=row["reward_value"],
                claimed=bool(row["claimed"]),
                is_wished=bool(row["is_wished"]),
                channel_id=row["channel_id"] or 0,
                timestamp=datetime.fromisoformat(row["date"]),
            )
            for row in rows
        ]

    def clear_rolls(self) -> int:
        """Delete every logged roll and return the number removed."""

        with self._connect() as conn:
            cur = conn.execute("DELETE FROM rolls")
            return cur.rowcount
