"""Config document held by the panel, with load/save and dirty tracking."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from .constants import DEFAULT_CONFIG


class ConfigStatus(str, Enum):
    LOADED = "loaded"
    MODIFIED = "modified *"
    ERROR = "error"


@dataclass
class ConfigState:
    path: Path
    data: dict[str, Any] | None = None
    dirty: bool = False
    error: str | None = None

    @property
    def status(self) -> ConfigStatus:
        if self.error:
            return ConfigStatus.ERROR
        if self.dirty:
            return ConfigStatus.MODIFIED
        return ConfigStatus.LOADED

    @property
    def can_save(self) -> bool:
        return self.data is not None and self.dirty

    def load(self) -> None:
        """Read the file; a missing file starts from defaults marked unsaved."""

        self.dirty = False
        self.error = None
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            self.data = copy.deepcopy(DEFAULT_CONFIG)
            self.dirty = True
            return
        except json.JSONDecodeError as exc:
            self.data = None
            self.error = f"{self.path.name} error: {exc.msg}"
            return
        if not isinstance(loaded, dict):
            self.data = None
            self.error = "config root must be an object"
            return
        self.data = loaded

    def save(self) -> bool:
        if self.data is None:
            self.error = "Nothing to save"
            return False
        try:
            self.path.write_text(json.dumps(self.data, indent=2, ensure_ascii=True) + "\n", encoding="utf-8")
        except OSError as exc:
            self.error = f"save failed: {exc.strerror or exc}"
            return False
        self.dirty = False
        self.error = None
        return True

    def set_section(self, key: str, value: Any) -> None:
        if self.data is None:
            self.data = {}
        self.data[key] = value
        self.dirty = True
