"""Entry point for the ``gbif-mcp`` command."""

from typing import Optional

import click

from gbif_mcp.cli.commands import config_cmd, get_cmd, records_cmd, serve_cmd
from gbif_mcp.cli.output import emit_error
from gbif_mcp.config import ServerConfig, _PACKAGE_VERSION


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML config file (overrides the layered lookup).",
)
@click.version_option(_PACKAGE_VERSION, prog_name="gbif-mcp")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str]) -> None:
    """GBIF MCP server and protected GBIF API client."""
    config = ServerConfig.from_env(config_file)
    try:
        config.validate()
    except ValueError as e:
        emit_error(
            str(e),
            code="VALIDATION_ERROR",
            error_type="validation",
            remediation="Fix the configuration file or environment variables",
        )
    ctx.obj = config


cli.add_command(serve_cmd)
cli.add_command(get_cmd)
cli.add_command(records_cmd)
cli.add_command(config_cmd)


if __name__ == "__main__":
    cli()
