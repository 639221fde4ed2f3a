"""Classification of failed attempts into retry or terminal failure.

Rules, in order:

1. 429: always retryable; delay is Retry-After when present, else the rate
   limiter's computed backoff. No attempt ceiling.
2. 5xx: retryable up to ``retry_attempts`` with delay
   ``retry_delay * 2**attempt`` (attempt counted from 0).
3. Anything else (other 4xx, transport failures): terminal.
"""

import logging
from typing import Any, Mapping, Optional, Union

import httpx

from gbif_mcp.core.errors.upstream import HTTP_ERROR, NETWORK_ERROR, TIMEOUT, UpstreamError
from gbif_mcp.core.observability import redact_text
from gbif_mcp.core.resilience.models import Fail, Retry
from gbif_mcp.core.resilience.rate_limit import RequestRateLimiter

logger = logging.getLogger(__name__)


def parse_retry_after(headers: Mapping[str, str]) -> Optional[float]:
    """Parse the ``Retry-After`` header into seconds.

    Handles numeric values only.  RFC 7231 date-based values are not
    supported and return ``None``.
    """
    retry_after = headers.get("Retry-After") or headers.get("retry-after")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            pass
    return None


def extract_error_message(response: httpx.Response) -> str:
    """Extract a redacted error message from an HTTP error response.

    Uses the ``message`` / ``error`` field of a JSON body when there is one,
    then the body text, then the reason phrase.
    """
    try:
        data: Any = response.json()
    except ValueError:
        data = None

    msg: Optional[str] = None
    if isinstance(data, dict):
        error_field = data.get("error")
        if isinstance(error_field, dict):
            msg = error_field.get("message")
        elif isinstance(error_field, str):
            msg = error_field
        msg = data.get("message") or msg

    if not msg:
        msg = response.text[:200] if response.text else response.reason_phrase

    return redact_text(str(msg or f"HTTP {response.status_code}"))


class RetryClassifier:
    """Decides whether a failed attempt is retried and after what delay."""

    def __init__(
        self,
        rate_limiter: RequestRateLimiter,
        *,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        self.rate_limiter = rate_limiter
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

    def classify(
        self,
        status_code: int,
        headers: Mapping[str, str],
        attempt: int,
        message: str = "",
    ) -> Union[Retry, Fail]:
        """Classify a non-2xx response.

        Args:
            status_code: HTTP status of the failed attempt
            headers: Response headers
            attempt: Server-error retries already made for this request
            message: Upstream error message for the terminal error

        Returns:
            Retry with a delay in seconds, or Fail carrying an UpstreamError
        """
        if status_code == 429:
            delay = self.rate_limiter.record_throttle(parse_retry_after(headers))
            return Retry(delay=delay, status_code=status_code, reason="rate_limited", message=message)

        if 500 <= status_code < 600:
            if attempt < self.retry_attempts:
                delay = self.retry_delay * (2**attempt)
                return Retry(delay=delay, status_code=status_code, reason="server_error", message=message)
            logger.debug(
                "Server error retries exhausted",
                extra={"status_code": status_code, "attempts": attempt + 1},
            )

        return Fail(UpstreamError(HTTP_ERROR, message or f"HTTP {status_code}", status_code))

    def classify_response(self, response: httpx.Response, attempt: int) -> Union[Retry, Fail]:
        return self.classify(
            response.status_code,
            response.headers,
            attempt,
            extract_error_message(response),
        )

    def classify_transport_error(self, error: httpx.TransportError) -> Fail:
        """Transport failures are never retried."""
        code = TIMEOUT if isinstance(error, httpx.TimeoutException) else NETWORK_ERROR
        message = redact_text(str(error)) or type(error).__name__
        return Fail(UpstreamError(code, message))
