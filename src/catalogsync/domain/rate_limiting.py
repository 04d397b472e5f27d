"""Process-wide throttle for outbound catalog calls."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, TypeVar

from aiolimiter import AsyncLimiter

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = getLogger(__name__)

T = TypeVar("T")


class RateLimiter:
    """Bound concurrent calls and keep a minimum gap between dispatches.

    A task is dispatched once fewer than ``max_concurrent`` tasks are in flight
    and at least ``min_interval`` seconds have passed since the previous
    dispatch. Waiters are not admitted in arrival order.

    The spacing uses a leaky bucket of capacity one, which drains completely
    exactly ``min_interval`` seconds after the last acquisition.
    """

    def __init__(self, *, max_concurrent: int = 2, min_interval: float = 0.5) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.max_concurrent = max_concurrent
        self.min_interval = min_interval
        self._slots = asyncio.Semaphore(max_concurrent)
        self._spacing = AsyncLimiter(1, min_interval) if min_interval > 0 else None
        self._in_flight = 0
        self._dispatched = 0
        self._last_dispatch: float | None = None

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def dispatched(self) -> int:
        return self._dispatched

    @property
    def last_dispatch(self) -> float | None:
        """Event-loop time of the most recent dispatch."""
        return self._last_dispatch

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        async with self._slots:
            if self._spacing is not None:
                await self._spacing.acquire()
            self._last_dispatch = asyncio.get_running_loop().time()
            self._dispatched += 1
            self._in_flight += 1
            try:
                return await task()
            finally:
                self._in_flight -= 1
