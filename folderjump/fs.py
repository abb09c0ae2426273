"""Filesystem reader used by the walker and history validation.

The search core only needs two operations: list the names inside a directory
and check whether a path is a directory. Blocking syscalls are pushed off the
event loop so a slow disk never stalls keystroke handling.
"""

from __future__ import annotations

import asyncio
import errno
import os
import stat
from pathlib import Path
from typing import Protocol

from .errors import PathNotAccessible, PathNotFound


class FilesystemReader(Protocol):
    async def list_entries(self, path: Path) -> list[str]:
        """Return child names of ``path`` in listing order."""
        ...

    async def is_directory(self, path: Path) -> bool:
        """Return whether ``path`` resolves to a directory."""
        ...


def _translate_os_error(path: Path, exc: OSError) -> PathNotAccessible:
    if isinstance(exc, FileNotFoundError) or exc.errno in {errno.ENOENT, errno.ENOTDIR}:
        return PathNotFound(exc.errno, exc.strerror or "not found", str(path))
    return PathNotAccessible(exc.errno, exc.strerror or "not accessible", str(path))


def list_entry_names(path: Path) -> list[str]:
    """Synchronously list child names of ``path``.

    Raises ``PathNotAccessible`` (or ``PathNotFound``) instead of ``OSError``.
    """
    try:
        with os.scandir(path) as entries:
            return [entry.name for entry in entries]
    except OSError as exc:
        raise _translate_os_error(path, exc) from exc


def stat_is_directory(path: Path) -> bool:
    """Return whether ``path`` (following symlinks) is a directory."""
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError as exc:
        raise _translate_os_error(path, exc) from exc


class LocalFilesystemReader:
    """``FilesystemReader`` backed by the local operating system."""

    async def list_entries(self, path: Path) -> list[str]:
        return await asyncio.to_thread(list_entry_names, path)

    async def is_directory(self, path: Path) -> bool:
        return await asyncio.to_thread(stat_is_directory, path)


class MemoryFilesystemReader:
    """In-memory ``FilesystemReader`` over a ``{directory: [child names]}`` map.

    A path is a directory exactly when it is a key of ``tree``; listed names
    without a key are plain files. Paths in ``inaccessible`` fail every call.
    Listing a path in ``gates`` first waits for that event, which lets tests
    hold a walk at a known point.
    """

    def __init__(
        self,
        tree: dict[Path, list[str]],
        inaccessible: set[Path] | None = None,
        gates: dict[Path, asyncio.Event] | None = None,
    ) -> None:
        self.tree = {Path(path): list(names) for path, names in tree.items()}
        self.inaccessible = {Path(path) for path in inaccessible or ()}
        self.gates = dict(gates or {})
        self.listed: list[Path] = []

    async def list_entries(self, path: Path) -> list[str]:
        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)
        self.listed.append(path)
        if path in self.inaccessible:
            raise PathNotAccessible(errno.EACCES, "permission denied", str(path))
        if path not in self.tree:
            raise PathNotFound(errno.ENOENT, "not found", str(path))
        return list(self.tree[path])

    async def is_directory(self, path: Path) -> bool:
        await asyncio.sleep(0)
        if path in self.inaccessible:
            raise PathNotAccessible(errno.EACCES, "permission denied", str(path))
        return path in self.tree


__all__ = [
    "FilesystemReader",
    "LocalFilesystemReader",
    "MemoryFilesystemReader",
    "list_entry_names",
    "stat_is_directory",
]
