"""Resilience error classes raised by the request pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from gbif_mcp.core.resilience.models import CircuitState


class CircuitOpenError(Exception):
    """Circuit breaker is open and rejecting requests.

    Transient: callers should back off and retry later.

    Attributes:
        breaker_name: Name of the circuit breaker.
        state: State of the breaker when the call was rejected.
        retry_after: Seconds until the breaker admits a trial request.
    """

    def __init__(
        self,
        message: str,
        breaker_name: Optional[str] = None,
        state: Optional[CircuitState] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.breaker_name = breaker_name
        self.state = state
        self.retry_after = retry_after


class RateLimitExceeded(Exception):
    """Local request ceiling reached and the caller asked not to wait.

    The request pipeline absorbs rate limiting as a wait, so this only
    surfaces from ``RequestRateLimiter.acquire(wait=False)``.

    Attributes:
        wait_needed: Seconds until a slot would become available.
    """

    def __init__(self, message: str, wait_needed: Optional[float] = None):
        super().__init__(message)
        self.wait_needed = wait_needed
