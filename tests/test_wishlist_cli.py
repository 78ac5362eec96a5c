from __future__ import annotations

import argparse
import json
from typing import Optional

from core.preferences import PreferenceStore
from frontend.wishlist_cli import run_wishlist_command


class MemoryPersistence:
    def __init__(self, document: Optional[str] = None) -> None:
        self.document = document
        self.fail_writes = False

    def read(self) -> Optional[str]:
        return self.document

    def write(self, document: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.document = document


def _store(persistence: MemoryPersistence) -> PreferenceStore:
    store = PreferenceStore(persistence)
    store.load()
    return store


def _add_args(name: str, priority: int = 0) -> argparse.Namespace:
    return argparse.Namespace(wishlist_command="add", name=name, series=None, priority=priority)


def test_add_then_list() -> None:
    persistence = MemoryPersistence()
    store = _store(persistence)
    lines: list[str] = []

    assert run_wishlist_command(store, _add_args("Rem", priority=900), lines.append) == 0
    assert run_wishlist_command(store, argparse.Namespace(wishlist_command=None), lines.append) == 0

    assert lines[0] == "Added Rem."
    assert lines[1].startswith("1. ")
    assert json.loads(persistence.document)["characters"][0]["priority"] == 255


def test_write_failure_prints_error_and_exits_nonzero() -> None:
    persistence = MemoryPersistence()
    store = _store(persistence)
    persistence.fail_writes = True
    lines: list[str] = []

    assert run_wishlist_command(store, _add_args("Rem"), lines.append) == 1
    assert lines == ["Error: Failed to write wishlist: disk full"]


def test_import_of_malformed_file_is_reported(tmp_path) -> None:
    path = tmp_path / "import.json"
    path.write_text('{"characters": ["Rem"]}', encoding="utf-8")
    store = _store(MemoryPersistence())
    lines: list[str] = []

    code = run_wishlist_command(store, argparse.Namespace(wishlist_command="import", input=str(path)), lines.append)

    assert code == 1
    assert lines[0].startswith("Error: import failed:")
    assert store.count() == 0
