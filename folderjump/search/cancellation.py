"""Generation-counter cancellation for superseded searches."""

from __future__ import annotations


class SearchGeneration:
    """Monotonic counter; issuing a new token invalidates every older one."""

    def __init__(self) -> None:
        self.current = 0

    def next_token(self) -> CancellationToken:
        self.current += 1
        return CancellationToken(self, self.current)

    def invalidate(self) -> None:
        self.current += 1


class CancellationToken:
    """Cooperative cancellation flag checked at every yield point."""

    def __init__(self, source: SearchGeneration | None = None, generation: int = 0) -> None:
        self._source = source
        self._generation = generation
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self._source is not None and self._source.current != self._generation

    @property
    def generation(self) -> int:
        return self._generation


__all__ = ["CancellationToken", "SearchGeneration"]
