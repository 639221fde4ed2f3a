"""Print the effective configuration."""

import click

from gbif_mcp.cli.output import emit_success
from gbif_mcp.config import ServerConfig


@click.command("config")
@click.pass_obj
def config_cmd(config: ServerConfig) -> None:
    """Show the effective configuration with credentials masked."""
    emit_success(config=config.to_dict(masked=True))
