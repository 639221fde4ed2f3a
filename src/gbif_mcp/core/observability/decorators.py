"""Decorators wrapping MCP tool handlers with logging, auditing and error mapping."""

import functools
import logging
import time
from dataclasses import asdict
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from pydantic import ValidationError

from gbif_mcp.core.errors import error_to_response
from gbif_mcp.core.observability.audit import audit_log
from gbif_mcp.core.responses import ErrorCode, ErrorType, error_response

logger = logging.getLogger(__name__)

T = TypeVar("T")


def validation_error_response(exc: ValidationError) -> Dict[str, Any]:
    """Convert a pydantic ValidationError into an error response dict."""
    problems = [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    summary = "; ".join(f"{p['field']}: {p['message']}" for p in problems)
    response = error_response(
        f"Invalid request: {summary}",
        error_code=ErrorCode.VALIDATION_ERROR,
        error_type=ErrorType.VALIDATION,
        remediation="Check the parameter values and try again",
        details={"errors": problems},
    )
    return asdict(response)


def mcp_tool(
    tool_name: Optional[str] = None, audit: bool = True
) -> Callable[[Callable[..., Awaitable[Dict[str, Any]]]], Callable[..., Awaitable[Dict[str, Any]]]]:
    """
    Decorator for async MCP tool handlers.

    Automatically:
    - Logs tool invocations with their duration
    - Creates audit log entries
    - Converts request-pipeline and validation errors into error responses

    Exceptions outside the pipeline taxonomy propagate unchanged.

    Args:
        tool_name: Override tool name (defaults to function name)
        audit: Whether to create audit log entries
    """

    def decorator(func: Callable[..., Awaitable[Dict[str, Any]]]) -> Callable[..., Awaitable[Dict[str, Any]]]:
        name = tool_name or func.__name__

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Dict[str, Any]:
            start = time.perf_counter()
            success = True
            error_msg = None

            try:
                return await func(*args, **kwargs)
            except ValidationError as e:
                success = False
                error_msg = "validation_error"
                return validation_error_response(e)
            except Exception as e:
                success = False
                error_msg = type(e).__name__
                response = error_to_response(e)
                if response is None:
                    logger.exception("Tool %s failed", name)
                    raise
                return response
            finally:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.debug(
                    "Tool %s completed",
                    name,
                    extra={"tool": name, "duration_ms": round(duration_ms, 2), "success": success},
                )
                if audit:
                    audit_log(
                        "tool_invocation",
                        tool=name,
                        success=success,
                        duration_ms=round(duration_ms, 2),
                        error=error_msg,
                    )

        return async_wrapper

    return decorator
