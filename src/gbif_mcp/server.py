"""
gbif-mcp server: exposes the protected GBIF client as MCP tools over stdio.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from mcp.server.fastmcp import FastMCP

from gbif_mcp.config import ServerConfig, get_config
from gbif_mcp.core.client import GbifClient
from gbif_mcp.services import OccurrenceService, SpeciesService
from gbif_mcp.tools import (
    register_client_tools,
    register_occurrence_tools,
    register_species_tools,
)

logger = logging.getLogger(__name__)

SERVER_INSTRUCTIONS = (
    "Tools for the GBIF biodiversity API. Large search results are truncated "
    "to fit the response budget; follow the pagination hint in the result to "
    "page through the rest."
)


def create_server(config: Optional[ServerConfig] = None, *, client: Optional[GbifClient] = None) -> FastMCP:
    """
    Create and configure the FastMCP server.

    Args:
        config: Server configuration (uses global config if not provided)
        client: Shared GBIF client (built from ``config`` if not provided)

    Returns:
        Configured FastMCP server instance
    """
    config = config or get_config()
    client = client or GbifClient(config)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
        try:
            yield {"client": client}
        finally:
            await client.aclose()

    mcp = FastMCP(config.server_name, instructions=SERVER_INSTRUCTIONS, lifespan=lifespan)

    register_species_tools(mcp, SpeciesService(client), config)
    register_occurrence_tools(mcp, OccurrenceService(client), config)
    register_client_tools(mcp, client, config)

    logger.info(
        "Server created",
        extra={"server_name": config.server_name, "version": config.server_version, "base_url": config.gbif.base_url},
    )
    return mcp


def main() -> None:
    """Main entry point for the gbif-mcp server."""
    config = get_config()
    config.setup_logging()
    config.validate()

    server = create_server(config)
    logger.info("Starting gbif-mcp server over stdio")
    server.run()


if __name__ == "__main__":
    main()
