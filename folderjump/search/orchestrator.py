"""Search orchestration: history, parent roots, and live walks in one ranked list.

Each ``search`` call supersedes the previous one. Superseded calls keep
running until their next yield point but never publish another snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from ..errors import PathNotAccessible, RootSearchFailure
from ..fs import FilesystemReader
from .cancellation import CancellationToken, SearchGeneration
from .scoring import EMPTY_QUERY_SCORE, score_name
from .types import FolderEntry, ResultSnapshot, SearchOutcome, SearchRequest
from .walker import iter_batches

logger = logging.getLogger(__name__)

BROWSE_DEPTH = 1
SHALLOW_STAGE_DEPTH = 1
PARENT_DIRECTORY_REASON = "parent directory"


def rank_entries(entries: Iterable[FolderEntry], limit: int | None = None) -> tuple[FolderEntry, ...]:
    """Sort history rows first, then by descending score; ties keep insertion order."""
    ranked = sorted(entries, key=lambda entry: (not entry.is_from_history, -entry.score))
    if limit is not None:
        ranked = ranked[: max(0, limit)]
    return tuple(ranked)


def display_path(path: Path, home: Path | None = None) -> str:
    """Return ``path`` with the home directory abbreviated to ``~``."""
    home = Path.home() if home is None else home
    try:
        relative = path.relative_to(home)
    except ValueError:
        return str(path)
    if not relative.parts:
        return "~"
    return f"~/{relative.as_posix()}"


def folder_name(path: Path) -> str:
    return path.name or str(path)


class ResultCollection:
    """Running result list with path-level de-duplication."""

    def __init__(self) -> None:
        self._entries: list[FolderEntry] = []
        self._paths: set[Path] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def add(self, entry: FolderEntry, *, allow_duplicate: bool = False) -> bool:
        """Insert ``entry`` unless its path is already shown.

        History rows are always inserted; ``allow_duplicate`` extends that to
        other rows that must sit next to them (parent roots).
        """
        if entry.path in self._paths and not (allow_duplicate or entry.is_from_history):
            return False
        self._entries.append(entry)
        self._paths.add(entry.path)
        return True

    def extend(self, entries: Iterable[FolderEntry]) -> int:
        return sum(1 for entry in entries if self.add(entry))

    def ranked(self, limit: int | None = None) -> tuple[FolderEntry, ...]:
        return rank_entries(self._entries, limit)


class SearchOrchestrator:
    """Run ranked folder searches across roots with latest-request-wins semantics."""

    def __init__(self, reader: FilesystemReader, home: Path | None = None) -> None:
        self._reader = reader
        self._home = home
        self._generation = SearchGeneration()

    @property
    def home(self) -> Path:
        return Path.home() if self._home is None else self._home

    @property
    def current_generation(self) -> int:
        """Generation of the most recently started (or cancelled) search."""
        return self._generation.current

    def cancel(self) -> None:
        """Invalidate the in-flight search, if any."""
        self._generation.invalidate()

    async def search(
        self,
        request: SearchRequest,
        on_update: Callable[[ResultSnapshot], None] | None = None,
    ) -> SearchOutcome | None:
        """Run one search and return its ranked rows.

        ``on_update`` receives a re-sorted snapshot after every merged batch.
        Returns ``None`` when a newer search superseded this one.
        """
        token = self._generation.next_token()
        collection = ResultCollection()

        def publish(loading: bool, message: str | None = None) -> None:
            if token.cancelled or on_update is None:
                return
            on_update(
                ResultSnapshot(
                    entries=collection.ranked(request.max_results),
                    loading=loading,
                    message=message,
                )
            )

        stale_history: tuple[Path, ...] = ()
        if request.current_directory is not None:
            await self._walk_into(
                collection,
                request.current_directory,
                request.query,
                BROWSE_DEPTH,
                token,
                publish,
            )
        else:
            history_entries, stale_history = await self._history_entries(request, token)
            if token.cancelled:
                return None
            for entry in history_entries:
                collection.add(entry)

            if not request.query.strip():
                for entry in await self._parent_entries(request.roots, token):
                    collection.add(entry, allow_duplicate=True)
            else:
                publish(True, "Searching...")
                await self._progressive_search(collection, request, token, publish)

        if token.cancelled:
            return None
        entries = collection.ranked(request.max_results)
        publish(False)
        return SearchOutcome(entries=entries, stale_history=stale_history)

    async def _history_entries(
        self,
        request: SearchRequest,
        token: CancellationToken,
    ) -> tuple[list[FolderEntry], tuple[Path, ...]]:
        """Validate and score remembered folders; return ``(entries, stale_paths)``."""
        has_query = bool(request.query.strip())
        entries: list[FolderEntry] = []
        stale: list[Path] = []
        for path in request.history[: max(0, request.max_history_items)]:
            if token.cancelled:
                break
            try:
                is_dir = await self._reader.is_directory(path)
            except PathNotAccessible:
                is_dir = False
            if not is_dir:
                logger.info("history entry no longer resolves to a directory: %s", path)
                stale.append(path)
                continue

            name = folder_name(path)
            by_name = score_name(name, request.query, 0, is_from_history=True)
            by_path = score_name(display_path(path, self.home), request.query, 0, is_from_history=True)
            score, reason = by_name.score, by_name.reason
            if by_path.score > by_name.score:
                score, reason = by_path.score, f"{by_path.reason} (path)"
            if has_query and score <= 0:
                continue
            entries.append(
                FolderEntry(
                    path=path,
                    name=name,
                    score=score,
                    match_reason=reason,
                    is_from_history=True,
                )
            )
        return entries, tuple(stale)

    async def _check_root(self, root: Path) -> None:
        try:
            is_dir = await self._reader.is_directory(root)
        except PathNotAccessible as exc:
            raise RootSearchFailure(root, str(exc)) from exc
        if not is_dir:
            raise RootSearchFailure(root, "not a directory")

    async def _searchable_roots(self, roots: Iterable[Path], token: CancellationToken) -> list[Path]:
        searchable: list[Path] = []
        for root in roots:
            if token.cancelled:
                break
            try:
                await self._check_root(root)
            except RootSearchFailure as exc:
                logger.warning("Failed to search in %s: %s", root, exc.reason)
                continue
            searchable.append(root)
        return searchable

    async def _parent_entries(self, roots: Iterable[Path], token: CancellationToken) -> list[FolderEntry]:
        return [
            FolderEntry(
                path=root,
                name=folder_name(root),
                score=EMPTY_QUERY_SCORE,
                match_reason=PARENT_DIRECTORY_REASON,
                is_parent_directory=True,
                source_directory=root,
            )
            for root in await self._searchable_roots(roots, token)
        ]

    async def _progressive_search(
        self,
        collection: ResultCollection,
        request: SearchRequest,
        token: CancellationToken,
        publish: Callable[..., None],
    ) -> None:
        """Walk every root shallowly first, then re-walk to the full depth."""
        roots = await self._searchable_roots(request.roots, token)
        for root in roots:
            await self._walk_into(collection, root, request.query, SHALLOW_STAGE_DEPTH, token, publish)
            if token.cancelled:
                return

        if request.max_depth <= SHALLOW_STAGE_DEPTH:
            return
        for root in roots:
            await self._walk_into(
                collection,
                root,
                request.query,
                request.max_depth,
                token,
                publish,
                deep=True,
            )
            if token.cancelled:
                return

    async def _walk_into(
        self,
        collection: ResultCollection,
        directory: Path,
        query: str,
        max_depth: int,
        token: CancellationToken,
        publish: Callable[..., None],
        deep: bool = False,
    ) -> None:
        label = folder_name(directory)
        message = f"Searching deeper in {label}..." if deep else f"Searching {label}..."
        async for batch in iter_batches(directory, query, max_depth, reader=self._reader, token=token):
            if token.cancelled:
                return
            if collection.extend(batch):
                publish(True, message)


__all__ = [
    "ResultCollection",
    "SearchOrchestrator",
    "display_path",
    "folder_name",
    "rank_entries",
]
