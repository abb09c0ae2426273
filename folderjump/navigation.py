"""Browse/root navigation state with a back-stack.

This module intentionally has no UI or filesystem concerns.
"""

from __future__ import annotations

from pathlib import Path

MAX_BACK_STACK = 256


class NavigationState:
    """Track the browsed directory and the directories visited before it.

    ``current_directory is None`` means root search mode (all configured
    roots). Every transition clears the query text.
    """

    def __init__(self, max_entries: int = MAX_BACK_STACK) -> None:
        self.max_entries = max(1, max_entries)
        self.current_directory: Path | None = None
        self.back: list[Path] = []
        self.query = ""

    @property
    def is_browsing(self) -> bool:
        return self.current_directory is not None

    def navigate_into(self, path: Path) -> None:
        """Enter ``path``, remembering the current directory when browsing."""
        if self.current_directory is not None:
            self.back.append(self.current_directory)
            overflow = len(self.back) - self.max_entries
            if overflow > 0:
                del self.back[:overflow]
        self.current_directory = path
        self.query = ""

    def navigate_back(self) -> bool:
        """Return to the previous directory, or to root mode when the stack is empty.

        Only valid while browsing; returns ``False`` (and changes nothing) in
        root mode.
        """
        if self.current_directory is None:
            return False
        self.current_directory = self.back.pop() if self.back else None
        self.query = ""
        return True

    def reset(self) -> None:
        self.current_directory = None
        self.back.clear()
        self.query = ""

    @property
    def title(self) -> str:
        if self.current_directory is None:
            return "Folder search"
        return f"\U0001f4c1 {self.current_directory.name or self.current_directory}"

    @property
    def placeholder(self) -> str:
        if self.current_directory is None:
            return "Search folders..."
        return f"Search in {self.current_directory.name or self.current_directory}..."


__all__ = ["MAX_BACK_STACK", "NavigationState"]
