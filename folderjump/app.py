"""Interactive folder picker on the asyncio event loop.

Keystrokes arrive through ``loop.add_reader`` on stdin, are decoded into key
tokens, and dispatched to the session. Every snapshot or notification from
the session triggers a redraw.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Callable

from .input import has_pending_bytes, read_key
from .notifications import Notification
from .render import ListView, clamp_scroll, render_screen, visible_rows
from .search import FolderEntry, ResultSnapshot
from .session import Session

logger = logging.getLogger(__name__)

SPINNER_INTERVAL_SECONDS = 0.12
QUIT_KEYS = frozenset({"ESC", "CTRL_C"})


def _default_terminal_size() -> tuple[int, int]:
    size = shutil.get_terminal_size((80, 24))
    return size.columns, size.lines


class PickerApp:
    """Key dispatch, selection state, and redraw scheduling for one session."""

    def __init__(
        self,
        session: Session,
        terminal,
        stdin_fd: int,
        *,
        no_color: bool = False,
        exit_on_open: bool = False,
        terminal_size: Callable[[], tuple[int, int]] = _default_terminal_size,
    ) -> None:
        self.session = session
        self.terminal = terminal
        self.stdin_fd = stdin_fd
        self.no_color = no_color
        self.exit_on_open = exit_on_open
        self._terminal_size = terminal_size
        self.selected_idx = 0
        self.scroll_top = 0
        self.notification: Notification | None = None
        self.spinner_frame = 0
        self.done = asyncio.Event()
        session.bind(on_snapshot=self._on_snapshot, on_notification=self._on_notification)

    @property
    def entries(self) -> tuple[FolderEntry, ...]:
        return self.session.snapshot.entries

    @property
    def selected(self) -> FolderEntry | None:
        if 0 <= self.selected_idx < len(self.entries):
            return self.entries[self.selected_idx]
        return None

    def _on_snapshot(self, snapshot: ResultSnapshot) -> None:
        if self.selected_idx >= len(snapshot.entries):
            self.selected_idx = max(0, len(snapshot.entries) - 1)
        self.redraw()

    def _on_notification(self, notification: Notification) -> None:
        self.notification = notification
        self.redraw()

    def view(self) -> ListView:
        navigation = self.session.navigation
        return ListView(
            title=navigation.title,
            placeholder=navigation.placeholder,
            query=self.session.query,
            snapshot=self.session.snapshot,
            selected_idx=self.selected_idx,
            scroll_top=self.scroll_top,
            notification=self.notification,
            spinner_frame=self.spinner_frame,
        )

    def redraw(self) -> None:
        columns, rows = self._terminal_size()
        self.scroll_top = clamp_scroll(self.selected_idx, self.scroll_top, len(self.entries), visible_rows(rows))
        self.terminal.write(render_screen(self.view(), columns, rows, self.no_color))

    def move_selection(self, delta: int) -> bool:
        if not self.entries:
            return False
        target = max(0, min(len(self.entries) - 1, self.selected_idx + delta))
        if target == self.selected_idx:
            return False
        self.selected_idx = target
        return True

    def _reset_selection(self) -> None:
        self.selected_idx = 0
        self.scroll_top = 0

    def _edit_query(self, text: str) -> None:
        self.session.set_query(text)
        self._reset_selection()

    def handle_key(self, key: str) -> None:
        """Dispatch one decoded key token."""
        if not key:
            return
        self.notification = None
        if key in QUIT_KEYS:
            self.done.set()
            return

        selected = self.selected
        if key == "UP":
            self.move_selection(-1)
        elif key == "DOWN":
            self.move_selection(1)
        elif key == "HOME":
            self.selected_idx = 0
        elif key == "END":
            self.selected_idx = max(0, len(self.entries) - 1)
        elif key == "BACKSPACE":
            self._edit_query(self.session.query[:-1])
        elif key == "CTRL_U":
            self._edit_query("")
        elif key == "RIGHT":
            if selected is not None:
                self.session.navigate_into(selected)
                self._reset_selection()
        elif key == "LEFT":
            if self.session.navigate_back():
                self._reset_selection()
        elif key == "ENTER":
            if selected is not None and self.session.open_entry(selected) and self.exit_on_open:
                self.done.set()
                return
        elif key == "CTRL_R":
            if selected is not None:
                self.session.add_to_history(selected)
        elif key == "CTRL_X":
            if selected is not None and not self.session.remove_from_history(selected):
                self.notification = Notification("info", "Not in Recent", selected.name)
        elif key == "CTRL_O":
            if selected is not None:
                self.session.reveal_entry(selected)
        elif key == "CTRL_Y":
            if selected is not None:
                self.session.copy_entry_path(selected)
        elif len(key) == 1 and key.isprintable():
            self._edit_query(self.session.query + key)
        self.redraw()

    def _on_readable(self) -> None:
        try:
            key = read_key(self.stdin_fd)
            if not key:
                # stdin reached EOF.
                self.done.set()
                return
            self.handle_key(key)
            while has_pending_bytes() and not self.done.is_set():
                self.handle_key(read_key(self.stdin_fd))
        except Exception:
            logger.exception("key handling failed")
            self.notification = Notification("failure", "Unexpected error", "see log for details")
            self.redraw()

    async def _spin(self) -> None:
        while not self.done.is_set():
            await asyncio.sleep(SPINNER_INTERVAL_SECONDS)
            if self.session.snapshot.loading:
                self.spinner_frame += 1
                self.redraw()

    async def run(self) -> None:
        """Run until the user quits; terminal state is always restored."""
        loop = asyncio.get_running_loop()
        with self.terminal.raw_mode():
            self.redraw()
            loop.add_reader(self.stdin_fd, self._on_readable)
            spinner = loop.create_task(self._spin())
            starter = loop.create_task(self.session.start())
            try:
                await self.done.wait()
            finally:
                loop.remove_reader(self.stdin_fd)
                spinner.cancel()
                starter.cancel()
                await asyncio.gather(spinner, starter, return_exceptions=True)
                await self.session.close()


__all__ = ["PickerApp"]
