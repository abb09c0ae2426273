"""Persistent JSON preferences.

Stores search roots, history size, search depth, result cap, and the
debounce delay. All access is defensive: malformed or missing values fall back
to defaults.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "folderjump"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_MAX_HISTORY_ITEMS = 10
DEFAULT_SEARCH_DEPTH = 3
MIN_SEARCH_DEPTH = 1
MAX_SEARCH_DEPTH = 5
DEFAULT_MAX_RESULTS = 100
DEFAULT_DEBOUNCE_MS = 300


@dataclass(frozen=True)
class Preferences:
    """Effective search preferences."""

    search_paths: tuple[Path, ...]
    max_history_items: int = DEFAULT_MAX_HISTORY_ITEMS
    search_depth: int = DEFAULT_SEARCH_DEPTH
    max_results: int = DEFAULT_MAX_RESULTS
    debounce_ms: int = DEFAULT_DEBOUNCE_MS

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def with_overrides(
        self,
        search_paths: Iterable[Path] | None = None,
        max_history_items: int | None = None,
        search_depth: int | None = None,
        max_results: int | None = None,
        debounce_ms: int | None = None,
    ) -> Preferences:
        """Return a copy with explicit (e.g. command-line) values applied."""
        changes: dict[str, object] = {}
        if search_paths is not None:
            paths = tuple(search_paths)
            if paths:
                changes["search_paths"] = paths
        if max_history_items is not None:
            changes["max_history_items"] = max(1, max_history_items)
        if search_depth is not None:
            changes["search_depth"] = clamp_search_depth(search_depth)
        if max_results is not None:
            changes["max_results"] = max(1, max_results)
        if debounce_ms is not None:
            changes["debounce_ms"] = max(0, debounce_ms)
        return replace(self, **changes)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Write failures are logged and otherwise ignored; preferences are not
    critical state.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("failed to write config %s: %s", CONFIG_PATH, exc)


def parse_search_paths(value: object, home: Path | None = None) -> tuple[Path, ...]:
    """Parse a comma-separated string (or list of strings) into root paths.

    Blank items are dropped and ``~`` is expanded. An empty result falls back
    to the user's home directory.
    """
    if isinstance(value, str):
        raw_items: list[object] = value.split(",")
    elif isinstance(value, list):
        raw_items = value
    else:
        raw_items = []

    paths: list[Path] = []
    for item in raw_items:
        if not isinstance(item, str):
            continue
        stripped = item.strip()
        if not stripped:
            continue
        path = Path(stripped).expanduser()
        if path not in paths:
            paths.append(path)
    if not paths:
        return (Path.home() if home is None else home,)
    return tuple(paths)


def _coerce_int(value: object, default: int, minimum: int) -> int:
    """Accept ints and integer strings; anything else (or too small) uses ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return default
    if not isinstance(value, int) or value < minimum:
        return default
    return value


def clamp_search_depth(value: int) -> int:
    return max(MIN_SEARCH_DEPTH, min(MAX_SEARCH_DEPTH, value))


def preferences_from_mapping(data: dict[str, object], home: Path | None = None) -> Preferences:
    depth = _coerce_int(data.get("search_depth"), DEFAULT_SEARCH_DEPTH, 1)
    return Preferences(
        search_paths=parse_search_paths(data.get("search_paths"), home=home),
        max_history_items=_coerce_int(data.get("max_history_items"), DEFAULT_MAX_HISTORY_ITEMS, 1),
        search_depth=clamp_search_depth(depth),
        max_results=_coerce_int(data.get("max_results"), DEFAULT_MAX_RESULTS, 1),
        debounce_ms=_coerce_int(data.get("debounce_ms"), DEFAULT_DEBOUNCE_MS, 0),
    )


def load_preferences() -> Preferences:
    """Load preferences from the config file with defaults for missing values."""
    return preferences_from_mapping(load_config())


def save_search_paths(paths: Iterable[Path]) -> None:
    """Persist search roots as the comma-separated string form."""
    serialized = ",".join(str(path) for path in paths)
    if not serialized:
        return
    config = load_config()
    config["search_paths"] = serialized
    save_config(config)


__all__ = [
    "CONFIG_PATH",
    "Preferences",
    "clamp_search_depth",
    "load_config",
    "load_preferences",
    "parse_search_paths",
    "preferences_from_mapping",
    "save_config",
    "save_search_paths",
]
