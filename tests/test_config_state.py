from __future__ import annotations

import json

from frontend.constants import DEFAULT_CONFIG
from frontend.state import ConfigState, ConfigStatus


def test_missing_file_starts_from_defaults_unsaved(tmp_path) -> None:
    state = ConfigState(tmp_path / "config.json")
    state.load()

    assert state.data == DEFAULT_CONFIG
    assert state.data is not DEFAULT_CONFIG
    assert state.status is ConfigStatus.MODIFIED
    assert state.can_save


def test_invalid_json_reports_error(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    state = ConfigState(path)
    state.load()

    assert state.data is None
    assert state.status is ConfigStatus.ERROR
    assert state.error.startswith("config.json error:")
    assert not state.can_save


def test_non_object_root_is_rejected(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    state = ConfigState(path)
    state.load()

    assert state.error == "config root must be an object"


def test_set_section_then_save_round_trips(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"channels": []}), encoding="utf-8")
    state = ConfigState(path)
    state.load()
    assert state.status is ConfigStatus.LOADED
    assert not state.can_save

    state.set_section("channels", [{"channel_id": "1", "enabled": True}])
    assert state.status is ConfigStatus.MODIFIED

    assert state.save()
    assert state.status is ConfigStatus.LOADED
    assert json.loads(path.read_text(encoding="utf-8")) == {"channels": [{"channel_id": "1", "enabled": True}]}


def test_save_without_data_fails(tmp_path) -> None:
    state = ConfigState(tmp_path / "config.json")

    assert not state.save()
    assert state.error == "Nothing to save"
