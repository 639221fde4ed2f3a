"""Run the MCP server over stdio."""

import click

from gbif_mcp.config import ServerConfig, set_config


@click.command("serve")
@click.pass_obj
def serve_cmd(config: ServerConfig) -> None:
    """Run the GBIF MCP server over stdio."""
    from gbif_mcp.server import create_server

    set_config(config)
    config.setup_logging()
    create_server(config).run()
