"""File persistence for the wishlist document."""

from __future__ import annotations

import os
import tempfile
from typing import Optional


class JsonFilePersistence:
    """PreferencePersistence over a single JSON file.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def read(self) -> Optional[str]:
        if not os.path.exists(self._path):
            return None
        with open(self._path, "r", encoding="utf-8") as handle:
            return handle.read()

    def write(self, document: str) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".wishlist-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(document)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
