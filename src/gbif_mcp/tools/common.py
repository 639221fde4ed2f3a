"""Shared helpers for GBIF tool handlers."""

import logging
from dataclasses import asdict
from typing import Any, Dict, Mapping, Optional

from gbif_mcp.config import ServerConfig
from gbif_mcp.core.observability import audit_log
from gbif_mcp.core.responses import success_response
from gbif_mcp.core.truncation import Plain, ResponseTruncator, ShapedResponse, Truncated, format_size

logger = logging.getLogger(__name__)


def build_truncator(config: ServerConfig) -> ResponseTruncator:
    return ResponseTruncator(config.response_limits.max_size_bytes)


def shape_result(
    payload: Any,
    *,
    config: ServerConfig,
    tool_name: str,
    params: Optional[Mapping[str, Any]] = None,
    truncator: Optional[ResponseTruncator] = None,
) -> Dict[str, Any]:
    """Fit a GBIF payload into the response budget and wrap it as a tool response.

    Args:
        payload: Decoded GBIF response
        config: Server configuration (response limits)
        tool_name: Tool name for logging
        params: Query parameters used, echoed in pagination hints
        truncator: Truncator to use; built from ``config`` when omitted

    Returns:
        ``ToolResponse`` as a dict with the payload under ``data.result``.
    """
    limits = config.response_limits
    truncator = truncator or build_truncator(config)

    shaped: ShapedResponse
    if limits.enable_truncation:
        shaped = truncator.truncate(payload, params)
    else:
        shaped = Plain(payload)

    body = shaped.body()
    size = truncator.size_of(body)
    if limits.enable_size_logging:
        if size > limits.warn_size_bytes:
            logger.warning(
                "Large tool response",
                extra={"tool": tool_name, "size": format_size(size), "warn_size": format_size(limits.warn_size_bytes)},
            )
        else:
            logger.debug("Tool response size", extra={"tool": tool_name, "size_bytes": size})

    if isinstance(shaped, Truncated):
        audit_log(
            "response_truncated",
            tool=tool_name,
            returned_count=shaped.envelope.metadata.returned_count,
            **shaped.details,
        )
        return asdict(
            success_response(
                result=body,
                warnings=[shaped.envelope.message],
                truncation=shaped.details,
            )
        )

    return asdict(success_response(result=body))
