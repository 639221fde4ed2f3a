"""Resilience data models, enums, and protocols.

Defines the core types shared across the resilience sub-package:
- CircuitState enum for the breaker state machine
- Success / Retry / Fail outcome variants consumed by the retry loop
- Clock and SleepFunc protocols for injectable time
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, Union

from gbif_mcp.core.errors.upstream import UpstreamError


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"  # Normal operation
    OPEN = "OPEN"  # Rejecting requests
    HALF_OPEN = "HALF_OPEN"  # Admitting trial requests


@dataclass(frozen=True)
class Success:
    """The attempt returned a 2xx response."""

    payload: Any


@dataclass(frozen=True)
class Retry:
    """The attempt failed transiently; re-issue after ``delay`` seconds."""

    delay: float
    status_code: int
    reason: str
    message: str = ""


@dataclass(frozen=True)
class Fail:
    """The attempt failed terminally."""

    error: UpstreamError


Outcome = Union[Success, Retry, Fail]


class Clock(Protocol):
    """Protocol for injectable monotonic clock (seconds)."""

    def __call__(self) -> float: ...


class SleepFunc(Protocol):
    """Protocol for injectable sleep function."""

    async def __call__(self, seconds: float) -> None: ...


@dataclass
class BreakerStatus:
    """Snapshot of a circuit breaker for introspection."""

    name: str
    state: str
    consecutive_failures: int
    half_open_successes: int
    retry_after: Optional[float]
