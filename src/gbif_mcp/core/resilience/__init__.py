"""Resilience primitives for outbound GBIF requests.

Sub-modules:
    models           - CircuitState, Success/Retry/Fail outcomes, time protocols
    circuit_breaker  - CircuitBreaker state machine
    rate_limit       - RequestRateLimiter (per-minute window + 429 backoff)
    retry            - RetryClassifier and response parsing helpers
"""

from gbif_mcp.core.resilience.circuit_breaker import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_RECOVERY_TIMEOUT,
    DEFAULT_SUCCESS_THRESHOLD,
    CircuitBreaker,
)
from gbif_mcp.core.resilience.models import (
    BreakerStatus,
    CircuitState,
    Clock,
    Fail,
    Outcome,
    Retry,
    SleepFunc,
    Success,
)
from gbif_mcp.core.resilience.rate_limit import WINDOW_SECONDS, RequestRateLimiter
from gbif_mcp.core.resilience.retry import (
    RetryClassifier,
    extract_error_message,
    parse_retry_after,
)

__all__ = [
    "DEFAULT_FAILURE_THRESHOLD",
    "DEFAULT_RECOVERY_TIMEOUT",
    "DEFAULT_SUCCESS_THRESHOLD",
    "CircuitBreaker",
    "BreakerStatus",
    "CircuitState",
    "Clock",
    "Fail",
    "Outcome",
    "Retry",
    "SleepFunc",
    "Success",
    "WINDOW_SECONDS",
    "RequestRateLimiter",
    "RetryClassifier",
    "extract_error_message",
    "parse_retry_after",
]
