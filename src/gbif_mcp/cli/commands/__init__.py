"""CLI commands."""

from gbif_mcp.cli.commands.get import get_cmd
from gbif_mcp.cli.commands.records import records_cmd
from gbif_mcp.cli.commands.serve import serve_cmd
from gbif_mcp.cli.commands.show_config import config_cmd

__all__ = ["config_cmd", "get_cmd", "records_cmd", "serve_cmd"]
