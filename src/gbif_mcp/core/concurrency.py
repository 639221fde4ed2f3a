"""
Concurrency governor for outbound GBIF requests.

Bounds the number of in-flight HTTP round trips no matter how many tool
calls the agent fires at once. Pending callers are woken in arrival order
by ``asyncio.Semaphore``. Admission is strictly FIFO on Python 3.11+; on
3.10 it is best-effort, since a new caller can take a slot released before
the woken waiter runs. A slot is held for the whole round trip including
retries and released on completion, success or failure.

Example:
    from gbif_mcp.core.concurrency import ConcurrencyLimiter

    queue = ConcurrencyLimiter(max_concurrent=10, name="gbif")

    async with queue.acquire():
        await send_request()

    result = await queue.submit(lambda: fetch(url))
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyLimiter:
    """FIFO admission queue in front of the HTTP layer.

    Attributes:
        name: Label used in logs and ``get_stats()``
        max_concurrent: Round trips allowed in flight at once
    """

    def __init__(self, max_concurrent: int = 10, *, name: str = ""):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.name = name
        self.max_concurrent = max_concurrent
        self._slots = asyncio.Semaphore(max_concurrent)
        self._active = 0
        self._pending = 0
        self._processed = 0

    @property
    def active_count(self) -> int:
        return self._active

    @property
    def pending_count(self) -> int:
        return self._pending

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[None]:
        """Wait for a free slot and hold it for the body of the ``async with``.

        The slot is returned on exit whether the body returns or raises.
        """
        if self._active >= self.max_concurrent:
            logger.debug(
                "Request queued",
                extra={"queue": self.name, "active": self._active, "pending": self._pending + 1},
            )
        self._pending += 1
        try:
            await self._slots.acquire()
        finally:
            self._pending -= 1

        self._active += 1
        self._processed += 1
        try:
            yield
        finally:
            self._active -= 1
            self._slots.release()

    async def submit(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` once a slot is free and return its result.

        Args:
            task: Zero-argument callable returning an awaitable; it is not
                invoked until the slot is granted.
        """
        async with self.acquire():
            return await task()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "max_concurrent": self.max_concurrent,
            "active_count": self._active,
            "pending_count": self._pending,
            "total_processed": self._processed,
        }
