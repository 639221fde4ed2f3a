"""The ``ServerConfig`` snapshot plus the process-wide ``get_config`` / ``set_config``.

Only the section fields and small helpers live here; file and environment
loading comes from ``_ServerConfigLoader`` in ``loader.py``.
"""

import logging
from dataclasses import asdict, dataclass, field
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from typing import Any, Dict, Optional

from gbif_mcp.config.domains import (
    CacheConfig,
    FeatureFlags,
    GbifApiConfig,
    RateLimitSettings,
    ResponseLimitsConfig,
)
from gbif_mcp.config.loader import _ServerConfigLoader
from gbif_mcp.core.observability import RedactionFilter, redact_sensitive


def _get_version() -> str:
    """Installed distribution version, or the release default when running from a checkout."""
    try:
        return get_package_version("gbif-mcp")
    except PackageNotFoundError:
        return "1.0.0"


_PACKAGE_VERSION = _get_version()


@dataclass
class ServerConfig(_ServerConfigLoader):
    """Everything the client, tools and CLI read at startup.

    Built by ``from_env()``; tests construct it directly and mutate sections.
    """

    # GBIF endpoint and retries
    gbif: GbifApiConfig = field(default_factory=GbifApiConfig)

    # Outbound request ceilings
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)

    # Response cache
    cache: CacheConfig = field(default_factory=CacheConfig)

    # Tool result size limits
    response_limits: ResponseLimitsConfig = field(default_factory=ResponseLimitsConfig)

    features: FeatureFlags = field(default_factory=FeatureFlags)

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = True
    mask_sensitive: bool = True

    # Server configuration
    server_name: str = "gbif-mcp"
    server_version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    @property
    def caching_enabled(self) -> bool:
        return self.cache.enabled and self.features.enable_caching

    def to_dict(self, *, masked: bool = True) -> Dict[str, Any]:
        """Plain-dict view of the configuration, credentials masked by default."""
        data = asdict(self)
        return redact_sensitive(data) if masked else data

    def setup_logging(self) -> None:
        """Attach a stderr handler to the ``gbif_mcp`` logger tree."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # one JSON-ish object per line
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        # stdout carries the MCP stdio protocol; logs go to stderr
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        if self.mask_sensitive:
            handler.addFilter(RedactionFilter())

        root_logger = logging.getLogger("gbif_mcp")
        root_logger.setLevel(level)
        root_logger.addHandler(handler)


# Process-wide snapshot for the server and CLI entry points
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Return the process-wide config, loading it from the environment on first use."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: Optional[ServerConfig]) -> None:
    """Install ``config`` as the process-wide config (``None`` forces a reload)."""
    global _config
    _config = config
