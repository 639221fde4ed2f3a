"""Exception-to-ToolResponse mapping.

Translates the request pipeline's error taxonomy into standard error
responses with status-specific guidance for the caller.

Usage:
    from gbif_mcp.core.errors.base import error_to_response

    try:
        payload = await client.get("/species/5231190")
    except Exception as e:
        result = error_to_response(e)
        if result is not None:
            return result
        raise  # Unknown error, re-raise
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, Optional, Tuple

from gbif_mcp.core.errors.resilience import CircuitOpenError, RateLimitExceeded
from gbif_mcp.core.errors.upstream import NETWORK_ERROR, TIMEOUT, UpstreamError
from gbif_mcp.core.responses import ErrorCode, ErrorType, error_response

# status -> (code, type, message, remediation)
STATUS_MAPPINGS: Dict[int, Tuple[ErrorCode, ErrorType, str, str]] = {
    400: (
        ErrorCode.VALIDATION_ERROR,
        ErrorType.VALIDATION,
        "Invalid request",
        "Check the query parameters and try again",
    ),
    401: (
        ErrorCode.UNAUTHORIZED,
        ErrorType.AUTHENTICATION,
        "Authentication required for this GBIF endpoint",
        "Set GBIF_USERNAME and GBIF_PASSWORD",
    ),
    403: (
        ErrorCode.FORBIDDEN,
        ErrorType.AUTHORIZATION,
        "Access forbidden to this GBIF resource",
        "Check that the configured account may access this resource",
    ),
    404: (
        ErrorCode.NOT_FOUND,
        ErrorType.NOT_FOUND,
        "Resource not found in GBIF",
        "Check the identifier and try again",
    ),
    429: (
        ErrorCode.RATE_LIMIT_EXCEEDED,
        ErrorType.RATE_LIMIT,
        "Rate limit exceeded. Please try again later",
        "Wait before retrying and reduce request volume",
    ),
}

_UNAVAILABLE = (
    ErrorCode.UNAVAILABLE,
    ErrorType.UNAVAILABLE,
    "GBIF service temporarily unavailable",
    "Retry shortly",
)


def _upstream_to_response(exc: UpstreamError) -> dict:
    status = exc.status_code
    details = exc.to_dict()

    if exc.code == TIMEOUT:
        code, error_type, message, remediation = (
            ErrorCode.UPSTREAM_TIMEOUT,
            ErrorType.UNAVAILABLE,
            "GBIF request timed out",
            "Narrow the query or retry shortly",
        )
    elif exc.code == NETWORK_ERROR:
        code, error_type, message, remediation = _UNAVAILABLE
    elif status is not None and status in STATUS_MAPPINGS:
        code, error_type, message, remediation = STATUS_MAPPINGS[status]
        if status == 400 and exc.message:
            message = f"{message}: {exc.message}"
    elif status is not None and 500 <= status < 600:
        code, error_type, message, remediation = _UNAVAILABLE
    else:
        code, error_type, message, remediation = (
            ErrorCode.UPSTREAM_ERROR,
            ErrorType.INTERNAL,
            exc.message or "Unknown error occurred",
            "Retry the request or contact GBIF support",
        )

    return asdict(
        error_response(
            message,
            error_code=code,
            error_type=error_type,
            remediation=remediation,
            details=details,
        )
    )


def error_to_response(exc: Exception) -> Optional[dict]:
    """Convert a known exception to a standard error_response dict, or None if unknown.

    Args:
        exc: The exception to convert.

    Returns:
        A dict suitable for an MCP tool response, or None if the exception
        type is not part of the request pipeline's taxonomy.
    """
    if isinstance(exc, UpstreamError):
        return _upstream_to_response(exc)

    if isinstance(exc, CircuitOpenError):
        details = {"breaker": exc.breaker_name}
        if exc.retry_after is not None:
            details["retry_after_seconds"] = round(exc.retry_after, 1)
        return asdict(
            error_response(
                "GBIF service temporarily degraded, retry shortly",
                error_code=ErrorCode.CIRCUIT_OPEN,
                error_type=ErrorType.UNAVAILABLE,
                remediation="Back off and retry after the recovery window",
                details=details,
            )
        )

    if isinstance(exc, RateLimitExceeded):
        return asdict(
            error_response(
                str(exc),
                error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
                error_type=ErrorType.RATE_LIMIT,
                remediation="Wait before retrying",
                details={"wait_needed_seconds": exc.wait_needed},
            )
        )

    return None
