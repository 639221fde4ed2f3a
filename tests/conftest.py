"""Shared fixtures: deterministic time and a config pointed at a fake GBIF."""

import asyncio

import pytest

from gbif_mcp.config import ServerConfig


class FakeClock:
    """Monotonic clock that only moves when told to (or when slept on)."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(0.0, seconds)
        await asyncio.sleep(0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    """Default configuration against a placeholder base URL."""
    cfg = ServerConfig()
    cfg.gbif.base_url = "https://api.gbif.test/v1"
    return cfg
