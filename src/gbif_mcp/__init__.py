"""GBIF MCP server: a protected GBIF API client exposed as MCP tools."""

from gbif_mcp.core.client import GbifClient
from gbif_mcp.core.truncation import ResponseTruncator

__all__ = ["GbifClient", "ResponseTruncator"]
