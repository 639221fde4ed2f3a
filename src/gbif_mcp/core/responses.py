"""
Response envelope returned by every gbif-mcp tool and CLI command.

``ToolResponse`` carries the GBIF payload (or the failure) plus a ``meta``
block; ``success_response`` and ``error_response`` are the only
constructors tools should use.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

RESPONSE_VERSION = "response-v2"


class ErrorCode(str, Enum):
    """Stable codes callers can branch on."""

    # Bad tool arguments or a GBIF 400
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Unknown taxon, occurrence or download key
    NOT_FOUND = "NOT_FOUND"

    # Credentials and quotas
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # GBIF or the client is unhealthy
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAVAILABLE = "UNAVAILABLE"
    CIRCUIT_OPEN = "CIRCUIT_OPEN"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"


class ErrorType(str, Enum):
    """Coarse failure class, telling an agent whether retrying can help."""

    VALIDATION = "validation"  # fix the arguments
    AUTHENTICATION = "authentication"  # configure GBIF credentials
    AUTHORIZATION = "authorization"  # account lacks access
    NOT_FOUND = "not_found"  # check the key
    RATE_LIMIT = "rate_limit"  # retry after waiting
    INTERNAL = "internal"  # retry later
    UNAVAILABLE = "unavailable"  # GBIF degraded, retry later


@dataclass
class ToolResponse:
    """
    Envelope for one tool result.

    Attributes:
        success: False when ``error`` is set
        data: GBIF payload under ``result``, or error code/type/remediation
        error: Human-readable failure message
        meta: Always carries ``version``; optionally ``warnings`` and ``truncation``
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": RESPONSE_VERSION})


def _build_meta(
    *,
    warnings: Optional[Sequence[str]] = None,
    truncation: Optional[Mapping[str, Any]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    meta: Dict[str, Any] = {"version": RESPONSE_VERSION}
    if warnings:
        meta["warnings"] = list(warnings)
    if truncation:
        meta["truncation"] = dict(truncation)
    if extra:
        meta.update(extra)
    return meta


def _enum_value(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else value


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
    truncation: Optional[Mapping[str, Any]] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> ToolResponse:
    """Build a successful ``ToolResponse``.

    Args:
        data: Base payload; keyword ``fields`` are merged over it
        warnings: Messages for the caller, e.g. the truncation notice
        truncation: Byte sizes recorded when the payload was cut down
        meta: Extra entries merged into ``meta``

    Example:
        >>> success_response(result={"key": 2435099}, warnings=["Response truncated"])
    """
    body: Dict[str, Any] = dict(data or {})
    body.update(fields)
    return ToolResponse(
        success=True,
        data=body,
        meta=_build_meta(warnings=warnings, truncation=truncation, extra=meta),
    )


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    meta: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Build a failed ``ToolResponse``.

    ``error_code`` and ``error_type`` default to ``INTERNAL_ERROR`` /
    ``internal``; values already present in ``data`` win.

    Example:
        >>> error_response(
        ...     "Resource not found in GBIF",
        ...     error_code=ErrorCode.NOT_FOUND,
        ...     error_type=ErrorType.NOT_FOUND,
        ...     remediation="Check the identifier and try again",
        ... )
    """
    body: Dict[str, Any] = dict(data or {})
    body.setdefault("error_code", _enum_value(error_code or ErrorCode.INTERNAL_ERROR))
    body.setdefault("error_type", _enum_value(error_type or ErrorType.INTERNAL))
    if remediation is not None:
        body.setdefault("remediation", remediation)
    if details:
        body.setdefault("details", dict(details))

    return ToolResponse(success=False, data=body, error=message, meta=_build_meta(extra=meta))
