from __future__ import annotations

from collections import deque
from collections.abc import Iterator

import structlog

from Rollmark.metrics import inc_counter
from Rollmark.rules.types import RollResult

DEFAULT_CAPACITY = 50

log = structlog.get_logger()


class RollHistory:
    """Bounded in-memory roll log, newest first.

    Not thread-safe; callers sharing one history must serialize access.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"history capacity must be positive, got {capacity}")
        self._entries: deque[RollResult] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    @property
    def latest(self) -> RollResult | None:
        return self._entries[0] if self._entries else None

    def record(self, result: RollResult) -> None:
        if len(self._entries) == self.capacity:
            evicted = self._entries[-1]
            inc_counter("history.evicted")
            log.debug("history.evicted", notation=evicted.notation)
        # appendleft on a full deque drops the oldest entry from the right
        self._entries.appendleft(result)

    def list(self) -> list[RollResult]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RollResult]:
        return iter(self._entries)
