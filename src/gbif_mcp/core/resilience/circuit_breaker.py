"""Circuit breaker guarding calls to the GBIF API.

State machine:

    CLOSED --(failure_threshold consecutive failures)--> OPEN
    OPEN --(can_request after recovery_timeout)--> HALF_OPEN
    HALF_OPEN --(any failure)--> OPEN
    HALF_OPEN --(success_threshold successes)--> CLOSED

The breaker is a plain in-memory object mutated only between suspension
points of the asyncio event loop, so it carries no lock.
"""

import logging
import time
from typing import Optional

from gbif_mcp.core.observability import audit_log
from gbif_mcp.core.resilience.models import BreakerStatus, CircuitState, Clock

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_THRESHOLD = 5
DEFAULT_SUCCESS_THRESHOLD = 2
DEFAULT_RECOVERY_TIMEOUT = 60.0


class CircuitBreaker:
    """Tracks recent call outcomes and decides whether new calls may proceed.

    Attributes:
        name: Identifier used in logs and errors
        failure_threshold: Consecutive failures that open the circuit
        success_threshold: Trial successes that close a half-open circuit
        recovery_timeout: Seconds an open circuit waits after the last failure
    """

    def __init__(
        self,
        name: str = "gbif",
        *,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        success_threshold: int = DEFAULT_SUCCESS_THRESHOLD,
        recovery_timeout: float = DEFAULT_RECOVERY_TIMEOUT,
        clock: Optional[Clock] = None,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock or time.monotonic

        self.state = CircuitState.CLOSED
        self.consecutive_failures = 0
        self.half_open_successes = 0
        self.last_failure_time: Optional[float] = None

    def _transition(self, new_state: CircuitState, action: str) -> None:
        old_state = self.state
        self.state = new_state
        audit_log(
            "circuit_state_change",
            level=logging.WARNING if new_state == CircuitState.OPEN else logging.INFO,
            breaker=self.name,
            old_state=old_state.value,
            new_state=new_state.value,
            action=action,
            consecutive_failures=self.consecutive_failures,
        )

    def retry_after(self) -> Optional[float]:
        """Seconds until an open circuit admits a trial request, else None."""
        if self.state != CircuitState.OPEN or self.last_failure_time is None:
            return None
        elapsed = self._clock() - self.last_failure_time
        return max(0.0, self.recovery_timeout - elapsed)

    def can_request(self) -> bool:
        """Check whether a request may be attempted.

        An open circuit whose recovery timeout has elapsed moves to
        HALF_OPEN here and admits the caller as a trial request.
        """
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            last_failure = self.last_failure_time or 0.0
            if self._clock() - last_failure >= self.recovery_timeout:
                self.half_open_successes = 0
                self._transition(CircuitState.HALF_OPEN, "probe")
                return True
            return False

        # HALF_OPEN: trial requests are serialized by the caller
        return True

    def record_success(self) -> None:
        """Record a successful call."""
        self.consecutive_failures = 0

        if self.state == CircuitState.HALF_OPEN:
            self.half_open_successes += 1
            if self.half_open_successes >= self.success_threshold:
                self.half_open_successes = 0
                self._transition(CircuitState.CLOSED, "recovery")

    def record_failure(self) -> None:
        """Record a failed call."""
        self.consecutive_failures += 1
        self.last_failure_time = self._clock()

        if self.state == CircuitState.HALF_OPEN:
            self.half_open_successes = 0
            self._transition(CircuitState.OPEN, "trial_failed")
        elif self.state == CircuitState.CLOSED and self.consecutive_failures >= self.failure_threshold:
            self._transition(CircuitState.OPEN, "tripped")

    def current_state(self) -> CircuitState:
        """Return the current state without triggering transitions."""
        return self.state

    def status(self) -> BreakerStatus:
        return BreakerStatus(
            name=self.name,
            state=self.state.value,
            consecutive_failures=self.consecutive_failures,
            half_open_successes=self.half_open_successes,
            retry_after=self.retry_after(),
        )

    def reset(self) -> None:
        """Return to CLOSED with all counters cleared."""
        self.state = CircuitState.CLOSED
        self.consecutive_failures = 0
        self.half_open_successes = 0
        self.last_failure_time = None
        logger.info("Circuit breaker reset", extra={"breaker": self.name})
