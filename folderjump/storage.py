"""Key-value storage for small persisted blobs (the folder history).

Values are strings stored under string keys in one JSON object on disk.
Unlike preference loading, storage errors are raised as ``PersistenceError``
so callers can tell the user that history was not saved.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from platformdirs import user_data_dir

from .errors import PersistenceError

APP_NAME = "folderjump"
STORAGE_FILENAME = "storage.json"
STORAGE_PATH = Path(user_data_dir(APP_NAME, appauthor=False)) / STORAGE_FILENAME


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store used by print mode dry runs and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Persist string values in a JSON object file.

    A missing file reads as empty. A file that exists but cannot be read or
    decoded raises ``PersistenceError``.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return STORAGE_PATH if self._path is None else self._path

    def _read_all(self) -> dict[str, str]:
        path = self.path
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"cannot read {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"{path} does not contain a JSON object")
        return {key: value for key, value in data.items() if isinstance(key, str) and isinstance(value, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        path = self.path
        try:
            data = self._read_all()
        except PersistenceError:
            data = {}
        data[key] = value
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"cannot write {path}: {exc}") from exc


__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore", "STORAGE_PATH"]
