"""Keystroke debouncing on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


class QueryDebouncer:
    """Propagate raw query text only after ``delay`` seconds without a newer keystroke.

    Each ``push`` cancels the pending timer task outright, so a superseded
    query can never reach ``callback``.
    """

    def __init__(
        self,
        callback: Callable[[str], Awaitable[None]],
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.delay = max(0.0, delay)
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self._firing: asyncio.Task[None] | None = None
        self._pending: str | None = None
        self.effective_query = ""

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def push(self, text: str) -> None:
        """Restart the timer for ``text``."""
        self._cancel_task()
        self._pending = text
        self._task = asyncio.get_running_loop().create_task(self._delayed(text))

    def cancel(self) -> None:
        """Drop any pending text without propagating it."""
        self._cancel_task()
        self._pending = None

    async def flush(self) -> None:
        """Propagate pending text immediately."""
        if self._pending is None:
            return
        text = self._pending
        self._cancel_task()
        await self._apply(text)

    async def wait(self) -> None:
        """Wait until the pending timer (if any) has fired and its callback finished."""
        while True:
            task = self._task or self._firing
            if task is None or task.done():
                return
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if task.cancelled():
                    continue
                raise

    async def aclose(self) -> None:
        """Cancel the pending timer and a callback that is still running, then wait for both."""
        current = asyncio.current_task()
        tasks = [
            task
            for task in (self._task, self._firing)
            if task is not None and not task.done() and task is not current
        ]
        self.cancel()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._firing = None

    def set_immediately(self, text: str) -> None:
        """Replace the effective query without invoking the callback."""
        self.cancel()
        self.effective_query = text

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _delayed(self, text: str) -> None:
        await asyncio.sleep(self.delay)
        self._task = None
        self._firing = asyncio.current_task()
        await self._apply(text)

    async def _apply(self, text: str) -> None:
        self._pending = None
        self.effective_query = text
        logger.debug("effective query is now %r", text)
        await self._callback(text)


__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "QueryDebouncer"]
