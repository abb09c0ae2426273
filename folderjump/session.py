"""Interactive session state: the event actor between the UI and the search core.

The session receives user intents (query text changed, navigate in/out,
open, add/remove history), owns the navigation state and the history
manager, and publishes a fresh ``ResultSnapshot`` whenever the orchestrator
reports progress.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from types import ModuleType, SimpleNamespace

from . import actions as os_actions
from .config import Preferences
from .debounce import QueryDebouncer
from .fs import FilesystemReader, LocalFilesystemReader
from .history import HistoryManager
from .navigation import NavigationState
from .notifications import Notification
from .search import FolderEntry, ResultSnapshot, SearchOrchestrator, SearchOutcome, SearchRequest
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class Session:
    """Own query, navigation, and history state for one interactive run."""

    def __init__(
        self,
        preferences: Preferences,
        store: KeyValueStore,
        *,
        reader: FilesystemReader | None = None,
        home: Path | None = None,
        on_snapshot: Callable[[ResultSnapshot], None] | None = None,
        on_notification: Callable[[Notification], None] | None = None,
        actions: ModuleType | SimpleNamespace | None = None,
    ) -> None:
        self.preferences = preferences
        reader = reader if reader is not None else LocalFilesystemReader()
        self.navigation = NavigationState()
        self.history = HistoryManager(
            store,
            max_items=preferences.max_history_items,
            reader=reader,
            notify=self.notify,
        )
        self.orchestrator = SearchOrchestrator(reader, home=home)
        self.debouncer = QueryDebouncer(self._on_effective_query, preferences.debounce_seconds)
        self.snapshot = ResultSnapshot(loading=True)
        self.notifications: list[Notification] = []
        self._on_snapshot = on_snapshot
        self._on_notification = on_notification
        self._actions = actions if actions is not None else os_actions
        self._tasks: set[asyncio.Task[object]] = set()

    @property
    def query(self) -> str:
        return self.navigation.query

    @property
    def effective_query(self) -> str:
        return self.debouncer.effective_query

    def bind(
        self,
        on_snapshot: Callable[[ResultSnapshot], None] | None = None,
        on_notification: Callable[[Notification], None] | None = None,
    ) -> None:
        """Attach presentation callbacks after construction."""
        if on_snapshot is not None:
            self._on_snapshot = on_snapshot
        if on_notification is not None:
            self._on_notification = on_notification

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        if self._on_notification is not None:
            self._on_notification(notification)

    def _set_snapshot(self, snapshot: ResultSnapshot) -> None:
        self.snapshot = snapshot
        if self._on_snapshot is not None:
            self._on_snapshot(snapshot)

    def build_request(self) -> SearchRequest:
        prefs = self.preferences
        return SearchRequest(
            roots=prefs.search_paths,
            query=self.effective_query,
            max_depth=prefs.search_depth,
            history=self.history.items,
            max_history_items=prefs.max_history_items,
            max_results=prefs.max_results,
            current_directory=self.navigation.current_directory,
        )

    async def start(self) -> SearchOutcome | None:
        """Load history and run the initial unfiltered search."""
        await self.history.load()
        return await self.refresh()

    async def refresh(self) -> SearchOutcome | None:
        """Search with the current effective query, directory, and history.

        Unexpected failures are reported as a notification; the previous rows
        stay visible and the loading flag is cleared. A failure from a search
        that a newer one already superseded is only logged.
        """
        self._set_snapshot(replace(self.snapshot, loading=True, message=None))
        started = self.orchestrator.current_generation
        try:
            outcome = await self.orchestrator.search(self.build_request(), on_update=self._set_snapshot)
        except Exception as exc:
            if self.orchestrator.current_generation > started + 1:
                logger.debug("superseded search failed", exc_info=True)
                return None
            logger.exception("search failed")
            self.notify(Notification("failure", "Search failed", str(exc)))
            self._set_snapshot(replace(self.snapshot, loading=False, message=None))
            return None
        if outcome is None:
            return None
        if outcome.stale_history:
            self.history.discard(outcome.stale_history)
        return outcome

    def request_refresh(self) -> None:
        """Schedule ``refresh`` from synchronous UI handlers."""
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _on_effective_query(self, text: str) -> None:
        del text
        await self.refresh()

    def set_query(self, text: str) -> None:
        """Record raw query text; the search runs once typing pauses."""
        if text == self.navigation.query:
            return
        self.navigation.query = text
        self.debouncer.push(text)

    def _reset_query(self) -> None:
        self.debouncer.set_immediately("")

    def navigate_into(self, entry: FolderEntry) -> None:
        self.navigation.navigate_into(entry.path)
        self._reset_query()
        self.request_refresh()

    def navigate_back(self) -> bool:
        if not self.navigation.navigate_back():
            return False
        self._reset_query()
        self.request_refresh()
        return True

    def add_to_history(self, entry: FolderEntry) -> None:
        self.history.record(entry.path)
        self.notify(Notification("success", "Added to Recent", entry.name))
        self.request_refresh()

    def remove_from_history(self, entry: FolderEntry) -> bool:
        if not self.history.remove(entry.path):
            return False
        self.notify(Notification("success", "Removed from Recent", entry.name))
        self.request_refresh()
        return True

    def open_entry(self, entry: FolderEntry) -> bool:
        """Open ``entry`` with the OS and remember it in history."""
        error = self._actions.open_path(entry.path)
        if error:
            self.notify(Notification("failure", "Failed to open folder", error))
            return False
        self.history.record(entry.path)
        self.request_refresh()
        return True

    def reveal_entry(self, entry: FolderEntry) -> bool:
        error = self._actions.reveal_path(entry.path)
        if error:
            self.notify(Notification("failure", "Failed to show folder", error))
            return False
        self.history.record(entry.path)
        self.request_refresh()
        return True

    def copy_entry_path(self, entry: FolderEntry) -> bool:
        error = self._actions.copy_path(entry.path)
        if error:
            self.notify(Notification("failure", "Failed to copy path", error))
            return False
        self.notify(Notification("success", "Copied path", str(entry.path)))
        return True

    async def wait_idle(self) -> None:
        """Wait for the debounce timer and scheduled refreshes to settle."""
        await self.debouncer.flush()
        await self.debouncer.wait()
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self.orchestrator.cancel()
        await self.debouncer.aclose()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()


__all__ = ["Session"]
