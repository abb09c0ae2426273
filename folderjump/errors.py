"""Error taxonomy shared by the search core and its collaborators.

Per-path failures are recovered where they occur; none of these errors is
fatal to an interactive session.
"""

from __future__ import annotations


class FolderJumpError(Exception):
    """Base class for folderjump errors."""


class PathNotAccessible(FolderJumpError, OSError):
    """A path could not be listed or stat'ed (permission or I/O error)."""


class PathNotFound(PathNotAccessible):
    """A path no longer exists (deleted or broken symlink)."""


class RootSearchFailure(FolderJumpError):
    """A configured search root could not be listed at all."""

    def __init__(self, root: object, reason: str = "") -> None:
        self.root = root
        self.reason = reason
        message = f"cannot search {root}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PersistenceError(FolderJumpError):
    """The key-value store could not be read or written."""
