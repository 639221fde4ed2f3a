"""Issue a single protected GET against the GBIF API."""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Dict, Tuple

import click

from gbif_mcp.cli.output import emit_error, emit_response
from gbif_mcp.config import ServerConfig
from gbif_mcp.core.client import GbifClient
from gbif_mcp.core.errors import error_to_response
from gbif_mcp.tools.common import shape_result

logger = logging.getLogger(__name__)


def parse_params(pairs: Tuple[str, ...]) -> Dict[str, Any]:
    """Turn ``key=value`` pairs into query params; repeated keys become lists."""
    params: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="-p/--param")
        if key in params:
            existing = params[key]
            params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


async def fetch(config: ServerConfig, path: str, params: Dict[str, Any]) -> Any:
    async with GbifClient(config) as client:
        return await client.get(path, params)


@click.command("get")
@click.argument("path")
@click.option("-p", "--param", "pairs", multiple=True, help="Query parameter as key=value (repeatable).")
@click.option("--no-truncate", is_flag=True, help="Return the full payload regardless of size.")
@click.pass_obj
def get_cmd(config: ServerConfig, path: str, pairs: Tuple[str, ...], no_truncate: bool) -> None:
    """GET PATH (e.g. /species/search) and print the JSON result."""
    params = parse_params(pairs)
    if not path.startswith("/"):
        path = "/" + path

    try:
        payload = asyncio.run(fetch(config, path, params))
    except Exception as e:
        response = error_to_response(e)
        if response is None:
            logger.exception("Unexpected error fetching %s", path)
            emit_error(
                f"Unexpected error: {e}",
                code="INTERNAL_ERROR",
                error_type="internal",
                details={"path": path},
            )
        emit_response(response)
        return

    if no_truncate:
        config = replace(config, response_limits=replace(config.response_limits, enable_truncation=False))
    emit_response(shape_result(payload, config=config, tool_name="cli-get", params=params))
