"""Context window bookkeeping for the active sequence."""

from __future__ import annotations

from simplechat.engines import BaseEngine
from simplechat.errors import ContextOverflowError


class ContextWindow:
    """Tracks occupied positions against the fixed window capacity.

    ``used()`` is read from the engine on every call rather than counted
    here, so it always matches what the engine has actually decoded.
    """

    def __init__(self, engine: BaseEngine, capacity: int | None = None) -> None:
        self._engine = engine
        self._capacity = capacity if capacity is not None else engine.n_ctx()

    def used(self) -> int:
        return self._engine.n_used()

    def capacity(self) -> int:
        return self._capacity

    def is_empty(self) -> bool:
        return self.used() == 0

    def would_overflow(self, batch_size: int) -> bool:
        return self.used() + batch_size > self._capacity

    def ensure_fits(self, batch_size: int) -> None:
        """Raise ContextOverflowError if the batch cannot be decoded."""
        used = self.used()
        if used + batch_size > self._capacity:
            raise ContextOverflowError(used=used, batch_size=batch_size, capacity=self._capacity)


__all__ = ["ContextWindow"]
