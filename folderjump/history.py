"""Recency-ordered, size-bounded history of opened folders.

The manager owns the list. Every mutation updates memory first and then
persists; persistence failures become notifications and the in-memory list
stays authoritative for the rest of the session.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from .errors import PathNotAccessible, PersistenceError
from .fs import FilesystemReader, LocalFilesystemReader
from .notifications import Notification, Notifier, ignore_notification
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_STORAGE_KEY = "folder-history-v2"
DEFAULT_MAX_HISTORY_ITEMS = 10


def decode_history(raw: str | None) -> list[Path]:
    """Decode the stored JSON array, ignoring non-string items.

    Malformed payloads decode to an empty list.
    """
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("ignoring malformed folder history payload")
        return []
    if not isinstance(data, list):
        return []
    return [Path(item) for item in data if isinstance(item, str) and item]


def encode_history(paths: Iterable[Path]) -> str:
    return json.dumps([str(path) for path in paths])


class HistoryManager:
    """Load, record, and remove remembered folder paths."""

    def __init__(
        self,
        store: KeyValueStore,
        max_items: int = DEFAULT_MAX_HISTORY_ITEMS,
        reader: FilesystemReader | None = None,
        notify: Notifier | None = None,
    ) -> None:
        self._store = store
        self.max_items = max(1, max_items)
        self._reader = reader if reader is not None else LocalFilesystemReader()
        self._notify = notify if notify is not None else ignore_notification
        self._items: list[Path] = []

    @property
    def items(self) -> tuple[Path, ...]:
        return tuple(self._items)

    def __contains__(self, path: object) -> bool:
        return path in self._items

    async def load(self) -> tuple[Path, ...]:
        """Read persisted history and drop paths that are no longer directories.

        The cleaned list is re-persisted when anything was dropped.
        """
        try:
            raw = self._store.get(HISTORY_STORAGE_KEY)
        except PersistenceError as exc:
            logger.warning("failed to load folder history: %s", exc)
            self._notify(Notification("failure", "Failed to load history", str(exc)))
            self._items = []
            return ()

        stored = decode_history(raw)
        cleaned: list[Path] = []
        for path in stored:
            if path in cleaned:
                continue
            if await self._is_directory(path):
                cleaned.append(path)
            else:
                logger.info("dropping inaccessible history entry %s", path)
        cleaned = cleaned[: self.max_items]
        self._items = cleaned
        logger.debug("loaded %d history items", len(cleaned))
        if cleaned != stored:
            self._persist()
        return self.items

    async def _is_directory(self, path: Path) -> bool:
        try:
            return await self._reader.is_directory(path)
        except PathNotAccessible:
            return False

    def record(self, path: Path) -> tuple[Path, ...]:
        """Move ``path`` to the front, trim to ``max_items``, and persist."""
        updated = [path, *(item for item in self._items if item != path)]
        self._items = updated[: self.max_items]
        self._persist()
        return self.items

    def remove(self, path: Path) -> bool:
        """Remove ``path`` if present and persist. Returns whether it was present."""
        if path not in self._items:
            return False
        self._items = [item for item in self._items if item != path]
        self._persist()
        return True

    def discard(self, paths: Iterable[Path]) -> bool:
        """Silently drop paths found to be stale during a search."""
        stale = set(paths)
        if not stale.intersection(self._items):
            return False
        self._items = [item for item in self._items if item not in stale]
        self._persist()
        return True

    def clear(self) -> None:
        self._items = []
        self._persist()

    def _persist(self) -> None:
        try:
            self._store.set(HISTORY_STORAGE_KEY, encode_history(self._items))
        except PersistenceError as exc:
            logger.warning("failed to save folder history: %s", exc)
            self._notify(Notification("failure", "Failed to save history", str(exc)))


__all__ = [
    "DEFAULT_MAX_HISTORY_ITEMS",
    "HISTORY_STORAGE_KEY",
    "HistoryManager",
    "decode_history",
    "encode_history",
]
