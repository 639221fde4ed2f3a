"""MCP tool registrations for gbif-mcp."""

from gbif_mcp.tools.client import register_client_tools
from gbif_mcp.tools.occurrence import register_occurrence_tools
from gbif_mcp.tools.species import register_species_tools

__all__ = [
    "register_client_tools",
    "register_occurrence_tools",
    "register_species_tools",
]
