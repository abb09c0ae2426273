"""Command-line front door for folderjump.

Parses options, loads preferences and history, and either runs one search
and prints the ranked folders or launches the interactive picker.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from platformdirs import user_log_dir

from .app import PickerApp
from .config import APP_NAME, Preferences, load_preferences, save_search_paths
from .fs import LocalFilesystemReader
from .history import HistoryManager
from .notifications import Notification
from .search import SearchOrchestrator, SearchRequest
from .session import Session
from .storage import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _nonnegative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _absolute_path(value: str) -> Path:
    return Path(value).expanduser().absolute()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Search, browse, and reopen folders ranked by relevance and recency.",
    )
    parser.add_argument(
        "--root",
        dest="roots",
        action="append",
        type=_absolute_path,
        metavar="DIR",
        help="Search root (repeatable). Defaults to the configured roots or your home directory.",
    )
    parser.add_argument("--depth", type=_positive_int, default=None, help="Search depth (1-5).")
    parser.add_argument("--max-results", type=_positive_int, default=None, help="Maximum rows to show.")
    parser.add_argument("--max-history", type=_positive_int, default=None, help="Maximum remembered folders.")
    parser.add_argument("--debounce-ms", type=_nonnegative_int, default=None, help="Typing pause before searching.")
    parser.add_argument("--save-roots", action="store_true", help="Persist --root values as the default roots.")

    parser.add_argument("-q", "--query", default=None, help="Run one search, print ranked paths, and exit.")
    parser.add_argument(
        "--in",
        dest="directory",
        type=_absolute_path,
        default=None,
        metavar="DIR",
        help="With --query, list matches directly inside DIR instead of the roots.",
    )
    parser.add_argument("--json", action="store_true", help="With --query or --history, print JSON.")

    history = parser.add_mutually_exclusive_group()
    history.add_argument("--history", action="store_true", help="Print remembered folders and exit.")
    history.add_argument("--record", type=_absolute_path, metavar="DIR", help="Remember DIR as recently opened.")
    history.add_argument("--forget", type=_absolute_path, metavar="DIR", help="Remove DIR from recent folders.")
    history.add_argument("--clear-history", action="store_true", help="Forget every recent folder.")

    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--exit-on-open", action="store_true", help="Quit the picker after opening a folder.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs to this file.")
    return parser


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / f"{APP_NAME}.log"


def configure_logging(verbose: bool, interactive: bool, log_file: Path | None = None) -> None:
    """Log to stderr in print mode and to a file while the picker owns the screen."""
    level = logging.DEBUG if verbose else logging.WARNING
    if log_file is None and interactive:
        log_file = default_log_path()
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            log_file = None
    if log_file is not None:
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=str(log_file))
    elif interactive:
        logging.getLogger().addHandler(logging.NullHandler())
    else:
        logging.basicConfig(level=level, format="[%(name)s] %(levelname)s: %(message)s", stream=sys.stderr)


def resolve_preferences(args: argparse.Namespace) -> Preferences:
    return load_preferences().with_overrides(
        search_paths=args.roots,
        max_history_items=args.max_history,
        search_depth=args.depth,
        max_results=args.max_results,
        debounce_ms=args.debounce_ms,
    )


def _print_notification(notification: Notification) -> None:
    print(notification.format(), file=sys.stderr)


def _entry_payload(entry) -> dict[str, object]:
    return {
        "path": str(entry.path),
        "name": entry.name,
        "score": entry.score,
        "reason": entry.match_reason,
        "recent": entry.is_from_history,
        "root": entry.is_parent_directory,
        "source": str(entry.source_directory) if entry.source_directory is not None else None,
    }


async def run_query(
    preferences: Preferences,
    store: KeyValueStore,
    query: str,
    directory: Path | None = None,
    as_json: bool = False,
) -> int:
    """Run one search and print the ranked folders; returns a process exit code."""
    reader = LocalFilesystemReader()
    history = HistoryManager(
        store,
        max_items=preferences.max_history_items,
        reader=reader,
        notify=_print_notification,
    )
    await history.load()
    orchestrator = SearchOrchestrator(reader)
    try:
        outcome = await orchestrator.search(
            SearchRequest(
                roots=preferences.search_paths,
                query=query,
                max_depth=preferences.search_depth,
                history=history.items,
                max_history_items=preferences.max_history_items,
                max_results=preferences.max_results,
                current_directory=directory,
            )
        )
    except Exception as exc:
        logger.exception("search failed")
        _print_notification(Notification("failure", "Search failed", str(exc)))
        return 1
    if outcome is None:
        return 1
    if outcome.stale_history:
        history.discard(outcome.stale_history)
    if as_json:
        print(json.dumps([_entry_payload(entry) for entry in outcome.entries], indent=2))
    else:
        for entry in outcome.entries:
            print(entry.path)
    return 0 if outcome.entries else 1


async def run_history_command(args: argparse.Namespace, preferences: Preferences, store: KeyValueStore) -> int:
    history = HistoryManager(store, max_items=preferences.max_history_items, notify=_print_notification)
    await history.load()
    if args.record is not None:
        if not args.record.is_dir():
            raise SystemExit(f"Not a directory: {args.record}")
        history.record(args.record)
        return 0
    if args.forget is not None:
        if not history.remove(args.forget):
            print(f"Not in recent folders: {args.forget}", file=sys.stderr)
            return 1
        return 0
    if args.clear_history:
        history.clear()
        return 0
    if args.json:
        print(json.dumps([str(path) for path in history.items], indent=2))
    else:
        for path in history.items:
            print(path)
    return 0


async def run_interactive(args: argparse.Namespace, preferences: Preferences, store: KeyValueStore) -> int:
    from .terminal import TerminalController

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    session = Session(preferences, store)
    app = PickerApp(
        session,
        TerminalController(stdin_fd, stdout_fd),
        stdin_fd,
        no_color=args.no_color or bool(os.environ.get("NO_COLOR")),
        exit_on_open=args.exit_on_open,
    )
    await app.run()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and dispatch to print, history, or interactive mode."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.directory is not None and args.query is None:
        parser.error("--in requires --query")

    history_command = args.history or args.record or args.forget or args.clear_history
    interactive = args.query is None and not history_command
    configure_logging(args.verbose, interactive, args.log_file)

    preferences = resolve_preferences(args)
    logger.debug("preferences: %s", preferences)
    if args.save_roots:
        if not args.roots:
            parser.error("--save-roots requires --root")
        save_search_paths(preferences.search_paths)
    store = JsonFileStore()

    if history_command:
        return asyncio.run(run_history_command(args, preferences, store))
    if args.query is not None:
        return asyncio.run(run_query(preferences, store, args.query, args.directory, args.json))
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise SystemExit("Interactive mode needs a terminal; pass --query to search non-interactively.")
    try:
        return asyncio.run(run_interactive(args, preferences, store))
    except KeyboardInterrupt:
        return 130


__all__ = ["build_parser", "configure_logging", "main", "resolve_preferences", "run_query"]
