"""
Client maintenance tools for gbif-mcp.

Expose the protected client's breaker, cache and limiter state so an agent
can see why requests are being delayed or rejected.
"""

from dataclasses import asdict

from mcp.server.fastmcp import FastMCP

from gbif_mcp.config import ServerConfig
from gbif_mcp.core.client import GbifClient
from gbif_mcp.core.naming import canonical_tool
from gbif_mcp.core.responses import success_response


def register_client_tools(mcp: FastMCP, client: GbifClient, config: ServerConfig) -> None:
    """Register client maintenance tools with the FastMCP server."""

    @canonical_tool(
        mcp,
        canonical_name="client-status",
    )
    async def client_status() -> dict:
        """
        Report circuit breaker state, cache statistics and rate-limit usage.
        """
        return asdict(
            success_response(
                status=client.get_status(),
                base_url=config.gbif.base_url,
                server_version=config.server_version,
            )
        )

    @canonical_tool(
        mcp,
        canonical_name="client-clear-cache",
    )
    async def client_clear_cache() -> dict:
        """
        Drop every cached GBIF response.
        """
        before = client.cache_stats()
        client.clear_cache()
        return asdict(
            success_response(
                cleared_entries=before["entry_count"],
                freed_bytes=before["total_size_bytes"],
            )
        )

    @canonical_tool(
        mcp,
        canonical_name="client-reset-circuit",
    )
    async def client_reset_circuit() -> dict:
        """
        Force the circuit breaker back to CLOSED.

        Use after GBIF has recovered to stop waiting out the recovery window.
        """
        previous = client.circuit_state()
        client.reset_circuit_breaker()
        return asdict(success_response(previous_state=previous, state=client.circuit_state()))
