"""Fixtures for gbif-mcp CLI tests."""

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Explicit config file so no user or project config leaks in."""
    for var in ("GBIF_BASE_URL", "GBIF_USERNAME", "GBIF_PASSWORD", "GBIF_MCP_CONFIG_FILE", "ENABLE_AUTH"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "gbif-mcp.toml"
    path.write_text(
        '[gbif]\nbase_url = "https://api.gbif.test/v1"\nusername = "ana"\npassword = "hunter2"\n\n'
        "[response_limits]\nmax_size_kb = 4\nwarn_size_kb = 2\n"
    )
    return path
