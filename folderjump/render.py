"""Full-screen rendering of the folder list.

Builds one ANSI string per frame from the current snapshot, query, and
selection. Rendering is pure so it can be tested without a terminal.
"""

from __future__ import annotations

from dataclasses import dataclass

from .ansi import BOLD, CYAN, DIM, GREEN, RED, RESET, REVERSE, YELLOW, clip_ansi_line, display_width, style
from .notifications import Notification
from .search import FolderEntry, ResultSnapshot
from .search.orchestrator import display_path, folder_name

HEADER_ROWS = 2
FOOTER_ROWS = 2
SPINNER_FRAMES = "|/-\\"
HELP_TEXT = "enter open  → into  ← back  ^R recent  ^X forget  ^O reveal  ^Y copy  esc quit"


@dataclass(frozen=True)
class ListView:
    """Everything needed to draw one frame."""

    title: str
    placeholder: str
    query: str
    snapshot: ResultSnapshot
    selected_idx: int = 0
    scroll_top: int = 0
    notification: Notification | None = None
    spinner_frame: int = 0

    @property
    def entries(self) -> tuple[FolderEntry, ...]:
        return self.snapshot.entries


def entry_accessory(entry: FolderEntry) -> str:
    """Right-hand label: ``Recent`` for history rows, else the root's name."""
    if entry.is_from_history:
        return "Recent"
    if entry.is_parent_directory:
        return "Root"
    if entry.source_directory is not None:
        return folder_name(entry.source_directory)
    return ""


def empty_view_text(query: str) -> tuple[str, str]:
    if query:
        return "No folders found", "Try a different search term"
    return "No folders found", "Start typing to search for folders"


def format_entry_row(entry: FolderEntry, width: int, selected: bool, no_color: bool = False) -> str:
    """Format ``name  ~/path ... accessory`` clipped to ``width`` columns.

    With color the selected row is drawn in reverse video. Without color a
    leading cursor column shows ``>`` on the selected row.
    """
    if no_color:
        cursor = ">" if selected else " "
        return clip_ansi_line(f"{cursor}{_row_body(entry, width - 1, no_color=True)}", width)
    row = _row_body(entry, width, no_color=False)
    if selected:
        pad = " " * max(0, width - display_width(row))
        return f"{REVERSE}{row.replace(RESET, RESET + REVERSE)}{pad}{RESET}"
    return row


def _row_body(entry: FolderEntry, width: int, no_color: bool) -> str:
    marker = "● " if entry.is_from_history else "  "
    name = style(entry.name, BOLD, no_color=no_color)
    subtitle = style(display_path(entry.path), DIM, no_color=no_color)
    left = f"{marker}{name}  {subtitle}"
    accessory = entry_accessory(entry)
    if not accessory:
        return clip_ansi_line(left, width)
    accessory_text = style(accessory, YELLOW if entry.is_from_history else CYAN, no_color=no_color)
    room = width - display_width(accessory) - 1
    left = clip_ansi_line(left, max(0, room))
    padding = max(1, width - display_width(left) - display_width(accessory))
    row = f"{left}{'' if no_color else RESET}{' ' * padding}{accessory_text}"
    return clip_ansi_line(row, width)


def visible_rows(total_rows: int) -> int:
    return max(1, total_rows - HEADER_ROWS - FOOTER_ROWS)


def clamp_scroll(selected_idx: int, scroll_top: int, count: int, rows: int) -> int:
    """Return a scroll offset that keeps ``selected_idx`` on screen."""
    if count <= rows:
        return 0
    if selected_idx < scroll_top:
        return selected_idx
    if selected_idx >= scroll_top + rows:
        return selected_idx - rows + 1
    return max(0, min(scroll_top, count - rows))


def render_lines(view: ListView, columns: int, rows: int, no_color: bool = False) -> list[str]:
    """Return exactly ``rows`` display lines for ``view``."""
    width = max(1, columns)
    lines: list[str] = []

    title = style(view.title, BOLD, no_color=no_color)
    if view.snapshot.loading:
        spinner = SPINNER_FRAMES[view.spinner_frame % len(SPINNER_FRAMES)]
        status = view.snapshot.message or "Loading..."
        title = f"{title}  {style(f'{spinner} {status}', DIM, no_color=no_color)}"
    lines.append(clip_ansi_line(title, width))

    if view.query:
        prompt = f"> {view.query}"
    else:
        prompt = f"> {style(view.placeholder, DIM, no_color=no_color)}"
    lines.append(clip_ansi_line(prompt, width))

    body_rows = visible_rows(rows)
    if not view.entries and not view.snapshot.loading:
        heading, description = empty_view_text(view.query)
        body = [style(heading, BOLD, no_color=no_color), style(description, DIM, no_color=no_color)]
    else:
        window = view.entries[view.scroll_top : view.scroll_top + body_rows]
        body = [
            format_entry_row(entry, width, view.scroll_top + offset == view.selected_idx, no_color)
            for offset, entry in enumerate(window)
        ]
    lines.extend(body[:body_rows])
    lines.extend([""] * (body_rows - min(len(body), body_rows)))

    if view.notification is not None:
        color = RED if view.notification.style == "failure" else GREEN
        lines.append(clip_ansi_line(style(view.notification.format(), color, no_color=no_color), width))
    else:
        count = len(view.entries)
        lines.append(style(f"{count} folder{'s' if count != 1 else ''}", DIM, no_color=no_color))
    lines.append(clip_ansi_line(style(HELP_TEXT, DIM, no_color=no_color), width))
    return lines[: max(1, rows)]


def render_screen(view: ListView, columns: int, rows: int, no_color: bool = False) -> str:
    """Return a full-frame redraw: home cursor, then each line cleared and written."""
    out = ["\033[H"]
    for idx, line in enumerate(render_lines(view, columns, rows, no_color)):
        if idx:
            out.append("\r\n")
        out.append("\033[2K")
        out.append(line)
    out.append("\033[0m")
    return "".join(out)


__all__ = [
    "ListView",
    "clamp_scroll",
    "empty_view_text",
    "entry_accessory",
    "format_entry_row",
    "render_lines",
    "render_screen",
    "visible_rows",
]
