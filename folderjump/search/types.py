"""Datatypes for scored folder candidates and search snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ScoreResult:
    """Relevance score plus a diagnostic label for how it was derived."""

    score: int
    reason: str

    @property
    def matched(self) -> bool:
        return self.score > 0


@dataclass(frozen=True)
class FolderEntry:
    """One discovered or remembered directory row."""

    path: Path
    name: str
    score: int = 0
    match_reason: str = ""
    is_from_history: bool = False
    is_parent_directory: bool = False
    source_directory: Path | None = None


@dataclass(frozen=True)
class ResultSnapshot:
    """Ranked rows plus loading/progress state handed to the presentation layer."""

    entries: tuple[FolderEntry, ...] = ()
    loading: bool = False
    message: str | None = None


@dataclass(frozen=True)
class SearchRequest:
    """Inputs for one search invocation."""

    roots: tuple[Path, ...]
    query: str = ""
    max_depth: int = 3
    history: tuple[Path, ...] = ()
    max_history_items: int = 10
    max_results: int = 100
    current_directory: Path | None = None


@dataclass(frozen=True)
class SearchOutcome:
    """Final result of a completed (non-superseded) search."""

    entries: tuple[FolderEntry, ...]
    stale_history: tuple[Path, ...] = field(default_factory=tuple)


__all__ = [
    "FolderEntry",
    "ResultSnapshot",
    "ScoreResult",
    "SearchOutcome",
    "SearchRequest",
]
