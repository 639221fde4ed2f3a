"""Per-minute request ceiling with server-requested cooldowns.

``RequestRateLimiter`` keeps a fixed 60-second counting window plus an
optional backoff deadline set whenever the API answers 429. Callers suspend
in :meth:`RequestRateLimiter.acquire` without blocking other tasks.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

from gbif_mcp.core.errors.resilience import RateLimitExceeded
from gbif_mcp.core.observability import audit_log
from gbif_mcp.core.resilience.models import Clock, SleepFunc

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class RequestRateLimiter:
    """Fixed-window per-minute counter with adaptive 429 backoff.

    Attributes:
        max_requests_per_minute: Admissions allowed per window
        backoff_multiplier: Growth factor for consecutive 429s without Retry-After
        max_backoff_time: Ceiling in seconds for computed backoff
        initial_backoff: First computed backoff in seconds
    """

    def __init__(
        self,
        max_requests_per_minute: int = 100,
        *,
        backoff_multiplier: float = 2.0,
        max_backoff_time: float = 60.0,
        initial_backoff: float = 1.0,
        window_seconds: float = WINDOW_SECONDS,
        clock: Optional[Clock] = None,
        sleep_func: Optional[SleepFunc] = None,
    ):
        self.max_requests_per_minute = max_requests_per_minute
        self.backoff_multiplier = backoff_multiplier
        self.max_backoff_time = max_backoff_time
        self.initial_backoff = initial_backoff
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._sleep = sleep_func or asyncio.sleep

        self.window_start = self._clock()
        self.request_count = 0
        self.backoff_until: Optional[float] = None
        self._last_backoff: Optional[float] = None

    async def acquire(self, *, wait: bool = True) -> float:
        """Suspend until a request may proceed, then count it.

        Args:
            wait: If False, raise instead of suspending.

        Returns:
            Total seconds spent waiting.

        Raises:
            RateLimitExceeded: If ``wait`` is False and no slot is free.
        """
        waited = 0.0
        while True:
            now = self._clock()

            if self.backoff_until is not None and now < self.backoff_until:
                delay = self.backoff_until - now
                if not wait:
                    raise RateLimitExceeded("GBIF backoff in effect", wait_needed=delay)
                audit_log("rate_limit_wait", reason="backoff", wait_ms=int(delay * 1000))
                await self._sleep(delay)
                waited += delay
                continue

            if now - self.window_start >= self.window_seconds:
                self.window_start = now
                self.request_count = 0

            if self.request_count < self.max_requests_per_minute:
                self.request_count += 1
                return waited

            delay = self.window_seconds - (now - self.window_start)
            if not wait:
                raise RateLimitExceeded(
                    f"Rate limit of {self.max_requests_per_minute} requests/minute reached",
                    wait_needed=delay,
                )
            audit_log(
                "rate_limit_wait",
                reason="window_full",
                wait_ms=int(delay * 1000),
                limit=self.max_requests_per_minute,
            )
            await self._sleep(delay)
            waited += delay

    def record_throttle(self, retry_after: Optional[float] = None) -> float:
        """Register a 429 response and return the imposed backoff in seconds.

        ``retry_after`` (from the Retry-After header) wins when present;
        otherwise the previous backoff is multiplied, capped at
        ``max_backoff_time``.
        """
        if retry_after is not None:
            delay = max(0.0, retry_after)
        elif self._last_backoff is None:
            delay = min(self.initial_backoff, self.max_backoff_time)
        else:
            delay = min(self._last_backoff * self.backoff_multiplier, self.max_backoff_time)

        self._last_backoff = delay
        self.backoff_until = self._clock() + delay
        audit_log(
            "rate_limit_backoff",
            level=logging.WARNING,
            backoff_ms=int(delay * 1000),
            retry_after_header=retry_after is not None,
        )
        return delay

    def record_success(self) -> None:
        """Reset the backoff ramp after a successful response."""
        self._last_backoff = None

    def get_stats(self) -> Dict[str, Any]:
        now = self._clock()
        window_age = now - self.window_start
        in_window = self.request_count if window_age < self.window_seconds else 0
        backoff_remaining = 0.0
        if self.backoff_until is not None:
            backoff_remaining = max(0.0, self.backoff_until - now)
        return {
            "max_requests_per_minute": self.max_requests_per_minute,
            "requests_in_window": in_window,
            "remaining": max(0, self.max_requests_per_minute - in_window),
            "window_reset_in": max(0.0, self.window_seconds - window_age),
            "backoff_remaining": backoff_remaining,
        }
