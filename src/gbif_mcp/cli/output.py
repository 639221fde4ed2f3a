"""JSON output helpers shared by CLI commands.

Every command prints exactly one JSON object (a ``ToolResponse``) to stdout.
Errors exit with status 1.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, Mapping, NoReturn, Optional

import click

from gbif_mcp.core.responses import error_response, success_response


def emit(payload: Mapping[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


def emit_success(data: Optional[Mapping[str, Any]] = None, **fields: Any) -> None:
    emit(asdict(success_response(data, **fields)))


def emit_response(response: Dict[str, Any]) -> None:
    """Print an already-built response dict, exiting 1 when it is an error."""
    emit(response)
    if not response.get("success", False):
        sys.exit(1)


def emit_error(
    message: str,
    *,
    code: str,
    error_type: str,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> NoReturn:
    emit(
        asdict(
            error_response(
                message,
                error_code=code,
                error_type=error_type,
                remediation=remediation,
                details=details,
            )
        )
    )
    sys.exit(1)
