"""Depth-bounded directory walker with progressive batch delivery.

The walker scores every visible subdirectory of one root and hands matches
back in small batches as soon as they are found, so a caller can render the
first rows before the whole subtree has been scanned.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path

from ..errors import PathNotAccessible
from ..fs import FilesystemReader
from .cancellation import CancellationToken
from .scoring import score_name
from .types import FolderEntry

logger = logging.getLogger(__name__)

WALK_RESULT_LIMIT = 20
WALK_BATCH_SIZE = 5


async def _list_names(reader: FilesystemReader, path: Path) -> list[str] | None:
    try:
        return await reader.list_entries(path)
    except PathNotAccessible as exc:
        logger.debug("skipping unreadable directory %s: %s", path, exc)
        return None


async def iter_batches(
    root: Path,
    query: str,
    max_depth: int,
    *,
    reader: FilesystemReader,
    token: CancellationToken | None = None,
    limit: int = WALK_RESULT_LIMIT,
    batch_size: int = WALK_BATCH_SIZE,
) -> AsyncIterator[list[FolderEntry]]:
    """Yield matching subdirectories of ``root`` in batches of ``batch_size``.

    Traversal is depth-first in listing order, starting at depth 0 for the
    direct children of ``root``. Hidden names are neither emitted nor entered.
    Recursion only happens while ``depth < max_depth`` and the query is
    non-empty. Unreadable paths are skipped with their subtree. At most
    ``limit`` entries are produced; nothing is yielded once ``token`` is
    cancelled.
    """

    def cancelled() -> bool:
        return token is not None and token.cancelled

    has_query = bool(query.split())
    names = await _list_names(reader, root)
    if names is None or cancelled():
        return

    stack: list[tuple[Iterator[str], Path, int]] = [(iter(names), root, 0)]
    batch: list[FolderEntry] = []
    found = 0
    while stack and found < limit:
        if cancelled():
            return
        remaining, parent, depth = stack[-1]
        name = next(remaining, None)
        if name is None:
            stack.pop()
            continue
        if name.startswith("."):
            continue

        child = parent / name
        try:
            if not await reader.is_directory(child):
                continue
        except PathNotAccessible as exc:
            logger.debug("skipping inaccessible path %s: %s", child, exc)
            continue

        result = score_name(name, query, depth)
        if not has_query or result.score > 0:
            batch.append(
                FolderEntry(
                    path=child,
                    name=name,
                    score=result.score,
                    match_reason=result.reason,
                    source_directory=root,
                )
            )
            found += 1
            if len(batch) >= batch_size:
                if cancelled():
                    return
                yield batch
                batch = []
            if found >= limit:
                break

        if depth < max_depth and has_query:
            if cancelled():
                return
            child_names = await _list_names(reader, child)
            if child_names is not None:
                stack.append((iter(child_names), child, depth + 1))

    if batch and not cancelled():
        yield batch


async def walk(
    root: Path,
    query: str,
    max_depth: int,
    on_batch: Callable[[list[FolderEntry]], None] | None = None,
    *,
    reader: FilesystemReader,
    token: CancellationToken | None = None,
) -> list[FolderEntry]:
    """Collect every batch from ``iter_batches``, reporting each to ``on_batch``."""
    results: list[FolderEntry] = []
    async for batch in iter_batches(root, query, max_depth, reader=reader, token=token):
        results.extend(batch)
        if on_batch is not None:
            on_batch(list(batch))
    return results


__all__ = ["WALK_BATCH_SIZE", "WALK_RESULT_LIMIT", "iter_batches", "walk"]
