"""Configuration package for gbif-mcp.

Sub-modules:
    parsing  – Boolean/number parsing helpers
    domains  – GbifApiConfig, RateLimitSettings, CacheConfig,
               ResponseLimitsConfig, FeatureFlags
    server   – ServerConfig dataclass, get_config/set_config globals
    loader   – ServerConfig loading/validation mixin (_ServerConfigLoader)
"""

from gbif_mcp.config.domains import (  # noqa: F401
    CacheConfig,
    FeatureFlags,
    GbifApiConfig,
    RateLimitSettings,
    ResponseLimitsConfig,
)
from gbif_mcp.config.loader import CONFIG_FILE_ENV_VAR  # noqa: F401
from gbif_mcp.config.parsing import _parse_bool  # noqa: F401
from gbif_mcp.config.server import (  # noqa: F401
    _PACKAGE_VERSION,
    ServerConfig,
    get_config,
    set_config,
)
