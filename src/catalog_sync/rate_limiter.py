"""Category enrichment rate limiting.

This module provides a process-wide shared async admission gate used by every
per-category fetch. All concurrent tree walks, and all synchronizers in the
process, draw from a single request budget.
"""

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import TypeVar

from catalog_sync.config import get_sync_config

T = TypeVar("T")


class CategoryRateLimiter:
    """Asynchronous sliding-window rate limiter.

    Throttles task *start times* so that no more than `requests_per_second`
    starts fall within any `period_seconds` window. Admission is serialized by
    an asyncio.Lock, which wakes waiters in FIFO order, so tasks start in the
    order they were submitted. Completion order is up to the tasks.

    Args:
        requests_per_second: Maximum starts per window.
        period_seconds: Window length in seconds.
    """

    def __init__(self, *, requests_per_second: int = 5, period_seconds: float = 1.0) -> None:
        self._max_calls = int(requests_per_second)
        self._period = float(period_seconds)
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._recent: deque[float] = deque()

    @property
    def requests_per_second(self) -> int:
        return self._max_calls

    async def acquire(self) -> None:
        """Wait until a new task may start under the configured rate."""
        async with self._get_lock():
            now = time.monotonic()
            self._prune(now)

            while len(self._recent) >= self._max_calls:
                # Wait for the oldest start to leave the window.
                await asyncio.sleep(max(0.0, (self._recent[0] + self._period) - now))
                now = time.monotonic()
                self._prune(now)

            self._recent.append(now)

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run `task` once admitted and return its result.

        The limiter only delays the start. Exceptions raised by the task reach
        the caller unchanged.

        Args:
            task: Zero-argument callable returning an awaitable.
        """
        await self.acquire()
        return await task()

    def _get_lock(self) -> asyncio.Lock:
        """Return the admission lock for the running event loop.

        An asyncio.Lock is bound to the loop it first waits on, so a new lock is
        created whenever the limiter is used from a different loop (e.g. one
        `asyncio.run` per job). The window of recent starts is kept.
        """
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _prune(self, now: float) -> None:
        cutoff = now - self._period
        while self._recent and self._recent[0] <= cutoff:
            self._recent.popleft()


@lru_cache(maxsize=1)
def get_shared_rate_limiter() -> CategoryRateLimiter:
    """Return the process-wide limiter shared by all category enrichment calls.

    The rate comes from `SyncConfig.requests_per_second` at first use.
    """
    return CategoryRateLimiter(
        requests_per_second=get_sync_config().requests_per_second
    )
