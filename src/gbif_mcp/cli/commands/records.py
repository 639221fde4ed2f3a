"""Collect occurrence records across search pages."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import click

from gbif_mcp.cli.commands.get import parse_params
from gbif_mcp.cli.output import emit_error, emit_response, emit_success
from gbif_mcp.config import ServerConfig
from gbif_mcp.core.client import GbifClient
from gbif_mcp.core.errors import error_to_response
from gbif_mcp.services import OccurrenceService

logger = logging.getLogger(__name__)


async def collect(
    config: ServerConfig,
    params: Dict[str, Any],
    *,
    page_size: int,
    max_records: Optional[int],
) -> List[Dict[str, Any]]:
    async with GbifClient(config) as client:
        service = OccurrenceService(client)
        return [
            record
            async for record in service.iter_search(params, page_size=page_size, max_records=max_records)
        ]


@click.command("records")
@click.option("-p", "--param", "pairs", multiple=True, help="Search filter as key=value (repeatable).")
@click.option(
    "--max",
    "max_records",
    type=click.IntRange(min=1),
    default=1000,
    show_default=True,
    help="Stop after this many records.",
)
@click.option(
    "--page-size",
    type=click.IntRange(1, 300),
    default=300,
    show_default=True,
    help="Records requested per page.",
)
@click.pass_obj
def records_cmd(config: ServerConfig, pairs: Tuple[str, ...], max_records: int, page_size: int) -> None:
    """Page through /occurrence/search and print the matching records."""
    params = parse_params(pairs)

    try:
        records = asyncio.run(collect(config, params, page_size=page_size, max_records=max_records))
    except Exception as e:
        response = error_to_response(e)
        if response is None:
            logger.exception("Unexpected error collecting occurrence records")
            emit_error(
                f"Unexpected error: {e}",
                code="INTERNAL_ERROR",
                error_type="internal",
                details={"filters": params},
            )
        emit_response(response)
        return

    emit_success(count=len(records), filters=params, records=records)
