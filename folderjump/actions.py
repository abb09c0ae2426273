"""Operating-system actions for a selected folder.

Open in the default application, reveal in the file manager, and copy the
path to the clipboard. Each helper returns an error message string instead of
raising so the UI can show it as a notification.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

_CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
)


def _open_command(target: Path) -> list[str] | None:
    if sys.platform == "darwin":
        return ["open", str(target)]
    if shutil.which("xdg-open"):
        return ["xdg-open", str(target)]
    return None


def _spawn(cmd: list[str]) -> str | None:
    try:
        subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        logger.warning("failed to run %s: %s", cmd[0], exc)
        return f"Failed to run {cmd[0]}: {exc}"
    return None


def open_path(target: Path) -> str | None:
    """Open ``target`` with the platform's default handler, fire-and-forget."""
    if sys.platform.startswith("win"):
        try:
            os.startfile(str(target))  # type: ignore[attr-defined]
        except OSError as exc:
            return f"Failed to open {target}: {exc}"
        return None
    cmd = _open_command(target)
    if cmd is None:
        return "Cannot open: no 'open' or 'xdg-open' command found."
    return _spawn(cmd)


def reveal_path(target: Path) -> str | None:
    """Show ``target`` in the file manager (selected, where supported)."""
    if sys.platform == "darwin":
        return _spawn(["open", "-R", str(target)])
    if sys.platform.startswith("win"):
        return _spawn(["explorer", f"/select,{target}"])
    cmd = _open_command(target.parent if target.parent != target else target)
    if cmd is None:
        return "Cannot reveal: no 'xdg-open' command found."
    return _spawn(cmd)


def copy_path(target: Path) -> str | None:
    """Copy ``str(target)`` to the system clipboard."""
    for cmd in _CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]) is None:
            continue
        try:
            subprocess.run(list(cmd), input=str(target), text=True, check=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("clipboard command %s failed: %s", cmd[0], exc)
            return f"Failed to copy path: {exc}"
        return None
    return "Cannot copy: no clipboard command found."


__all__ = ["copy_path", "open_path", "reveal_path"]
