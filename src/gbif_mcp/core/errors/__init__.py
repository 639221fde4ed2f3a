"""Error hierarchy for gbif-mcp.

Usage:
    from gbif_mcp.core.errors import CircuitOpenError, UpstreamError
    from gbif_mcp.core.errors import error_to_response
"""

from gbif_mcp.core.errors.base import STATUS_MAPPINGS, error_to_response
from gbif_mcp.core.errors.resilience import CircuitOpenError, RateLimitExceeded
from gbif_mcp.core.errors.upstream import (
    DECODE_ERROR,
    HTTP_ERROR,
    NETWORK_ERROR,
    TIMEOUT,
    UpstreamError,
)

__all__ = [
    # Registry
    "STATUS_MAPPINGS",
    "error_to_response",
    # Resilience errors
    "CircuitOpenError",
    "RateLimitExceeded",
    # Upstream errors
    "UpstreamError",
    "HTTP_ERROR",
    "TIMEOUT",
    "NETWORK_ERROR",
    "DECODE_ERROR",
]
