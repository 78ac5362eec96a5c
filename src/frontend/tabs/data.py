"""Data tab for viewing and exporting the roll log."""

from __future__ import annotations

import csv
import json
import sqlite3
from dataclasses import asdict
from datetime import datetime
from typing import Any

from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Static

from adapters.sqlite_storage import SQLiteStorage

from ..constants import DB_PATH, PROJECT_ROOT


class DataTab(Container):
    """Data tab to browse logged rolls and export them to JSON/CSV."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._rows: list[dict[str, Any]] = []
        self._table_ready = False

    def compose(self):
        with Vertical(id="data-panel"):
            yield Static("Rolls", id="data-title")
            yield DataTable(id="data-table", cursor_type="row")
            with Horizontal(id="data-actions"):
                yield Button("Refresh", id="refresh-data")
                yield Button("Export JSON", id="export-json", variant="success")
                yield Button("Export CSV", id="export-csv")
            yield Static("", id="data-output")

    def on_mount(self) -> None:
        table = self.query_one("#data-table", DataTable)
        table.add_column("date", key="date", width=18)
        table.add_column("character", key="character_name", width=24)
        table.add_column("series", key="series", width=28)
        table.add_column("kakera", key="reward_value", width=10)
        table.add_column("wished", key="is_wished", width=7)
        table.add_column("claimed", key="claimed", width=8)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self._table_ready = True
        self._load_rolls()

    @on(Button.Pressed, "#refresh-data")
    def _on_refresh(self) -> None:
        self._load_rolls()

    @on(Button.Pressed, "#export-json")
    def _on_export_json(self) -> None:
        self._export_rows("json")

    @on(Button.Pressed, "#export-csv")
    def _on_export_csv(self) -> None:
        self._export_rows("csv")

    def _load_rolls(self) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#data-table", DataTable)
        table.clear()
        if not DB_PATH.exists():
            self._rows = []
            self._set_output(f"db not found: {DB_PATH}")
            return
        try:
            rolls = SQLiteStorage(str(DB_PATH)).list_rolls(limit=500)
        except sqlite3.Error as exc:
            self._rows = []
            self._set_output(f"db error: {exc}")
            return

        self._rows = []
        for index, roll in enumerate(rolls):
            row = asdict(roll)
            row["timestamp"] = roll.timestamp.isoformat()
            self._rows.append(row)
            table.add_row(
                roll.timestamp.astimezone().strftime("%Y-%m-%d %H:%M"),
                roll.character_name,
                roll.series,
                "" if roll.reward_value is None else str(roll.reward_value),
                "yes" if roll.is_wished else "",
                "yes" if roll.claimed else "",
                key=str(index),
            )
        self._set_output(f"loaded {len(rolls)} rolls from {DB_PATH}")

    def _export_rows(self, fmt: str) -> None:
        if not self._rows:
            self._set_output("No rolls to export.")
            return
        exports_dir = PROJECT_ROOT / "exports"
        exports_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = exports_dir / f"rolls-{timestamp}.{fmt}"
        try:
            if fmt == "json":
                path.write_text(json.dumps(self._rows, indent=2, ensure_ascii=False), encoding="utf-8")
            else:
                fieldnames = list(self._rows[0].keys())
                with path.open("w", encoding="utf-8", newline="") as handle:
                    writer = csv.DictWriter(handle, fieldnames=fieldnames)
                    writer.writeheader()
                    writer.writerows(self._rows)
            self._set_output(f"exported {len(self._rows)} rolls to {path}")
        except OSError as exc:
            self._set_output(f"export failed: {exc.strerror or exc}")

    def _set_output(self, message: str) -> None:
        self.query_one("#data-output", Static).update(message)
