"""Upstream (GBIF API) error classes."""

from typing import Optional

HTTP_ERROR = "HTTP_ERROR"
TIMEOUT = "TIMEOUT"
NETWORK_ERROR = "NETWORK_ERROR"
DECODE_ERROR = "DECODE_ERROR"


class UpstreamError(Exception):
    """Terminal failure talking to the GBIF API.

    Raised after retries are exhausted or for a non-retryable response.

    Attributes:
        code: Failure category (``HTTP_ERROR``, ``TIMEOUT``, ``NETWORK_ERROR``,
            ``DECODE_ERROR``)
        message: Upstream error message, or the transport-level message
        status_code: HTTP status of the last attempt, None for transport failures
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        suffix = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{message}{suffix}")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "statusCode": self.status_code,
        }
