"""File and environment loading for ``ServerConfig``.

``_ServerConfigLoader`` is mixed into the ``ServerConfig`` dataclass in
``server.py``; keeping the TOML/env plumbing here leaves that module to the
field declarations.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, cast

if TYPE_CHECKING:
    from gbif_mcp.config.server import ServerConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from gbif_mcp.config.domains import (
    CacheConfig,
    FeatureFlags,
    GbifApiConfig,
    RateLimitSettings,
    ResponseLimitsConfig,
)
from gbif_mcp.config.parsing import _parse_bool, _try_parse_float, _try_parse_int

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "GBIF_MCP_CONFIG_FILE"


class _ServerConfigLoader:
    """Loading and validation half of ``ServerConfig``.

    Every method runs with ``self`` bound to a ``ServerConfig``; the
    annotations below only exist for type checkers.
    """

    if TYPE_CHECKING:

        def __init_subclass__(cls, **kwargs: Any) -> None: ...

        gbif: GbifApiConfig
        rate_limit: RateLimitSettings
        cache: CacheConfig
        response_limits: ResponseLimitsConfig
        features: FeatureFlags
        log_level: str
        structured_logging: bool
        mask_sensitive: bool
        server_name: str
        server_version: str

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """
        Build a config from defaults, TOML files and the environment.

        Sources, highest precedence first:
        1. Environment variables
        2. Project TOML config (./gbif-mcp.toml)
        3. User TOML config (~/.gbif-mcp.toml)
        4. XDG config (~/.config/gbif-mcp/config.toml)
        5. Default values

        An explicit ``config_file`` (or ``$GBIF_MCP_CONFIG_FILE``) replaces
        steps 2-4.
        """
        config = cls()

        toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "gbif-mcp" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug(f"Loaded XDG config from {xdg_config}")

            home_config = Path.home() / ".gbif-mcp.toml"
            if home_config.exists():
                config._load_toml(home_config)
                logger.debug(f"Loaded user config from {home_config}")

            project_config = Path("gbif-mcp.toml")
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug(f"Loaded project config from {project_config}")

        config._load_env()

        return cast("ServerConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Overlay the sections present in one TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            if "gbif" in data:
                self.gbif = GbifApiConfig.from_toml_dict(data["gbif"])

            if "rate_limit" in data:
                self.rate_limit = RateLimitSettings.from_toml_dict(data["rate_limit"])

            if "cache" in data:
                self.cache = CacheConfig.from_toml_dict(data["cache"])

            if "response_limits" in data:
                self.response_limits = ResponseLimitsConfig.from_toml_dict(data["response_limits"])

            if "features" in data:
                self.features = FeatureFlags.from_toml_dict(data["features"])

            if "logging" in data:
                log = data["logging"]
                if "level" in log:
                    self.log_level = str(log["level"]).upper()
                if "structured" in log:
                    self.structured_logging = _parse_bool(log["structured"])
                if "mask_sensitive" in log:
                    self.mask_sensitive = _parse_bool(log["mask_sensitive"])

            if "server" in data:
                srv = data["server"]
                if "name" in srv:
                    self.server_name = srv["name"]
                if "version" in srv:
                    self.server_version = srv["version"]

        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.error(f"Error loading config file {path}: {e}")

    def _load_env(self) -> None:
        """Overlay environment variables; unparsable numbers are skipped."""
        env = os.environ

        # GBIF endpoint
        if base_url := env.get("GBIF_BASE_URL"):
            self.gbif.base_url = base_url
        if username := env.get("GBIF_USERNAME"):
            self.gbif.username = username
        if password := env.get("GBIF_PASSWORD"):
            self.gbif.password = password
        if user_agent := env.get("GBIF_USER_AGENT"):
            self.gbif.user_agent = user_agent
        if raw := env.get("GBIF_TIMEOUT"):
            if (timeout := _try_parse_float(raw, source="GBIF_TIMEOUT")) is not None:
                self.gbif.timeout = timeout
        if raw := env.get("GBIF_RETRY_ATTEMPTS"):
            if (attempts := _try_parse_int(raw, source="GBIF_RETRY_ATTEMPTS")) is not None:
                self.gbif.retry_attempts = attempts
        if raw := env.get("GBIF_RETRY_DELAY"):
            if (delay := _try_parse_float(raw, source="GBIF_RETRY_DELAY")) is not None:
                self.gbif.retry_delay = delay

        # Rate limiting
        if raw := env.get("RATE_LIMIT_MAX_REQUESTS"):
            if (max_requests := _try_parse_int(raw, source="RATE_LIMIT_MAX_REQUESTS")) is not None:
                self.rate_limit.max_requests_per_minute = max_requests
        if raw := env.get("RATE_LIMIT_CONCURRENT"):
            if (concurrent := _try_parse_int(raw, source="RATE_LIMIT_CONCURRENT")) is not None:
                self.rate_limit.max_concurrent_requests = concurrent
        if raw := env.get("RATE_LIMIT_BACKOFF_MULTIPLIER"):
            if (multiplier := _try_parse_float(raw, source="RATE_LIMIT_BACKOFF_MULTIPLIER")) is not None:
                self.rate_limit.backoff_multiplier = multiplier
        if raw := env.get("RATE_LIMIT_MAX_BACKOFF"):
            if (max_backoff := _try_parse_float(raw, source="RATE_LIMIT_MAX_BACKOFF")) is not None:
                self.rate_limit.max_backoff_time = max_backoff

        # Cache
        if raw := env.get("CACHE_ENABLED"):
            self.cache.enabled = _parse_bool(raw)
        if raw := env.get("CACHE_MAX_SIZE"):
            if (max_size := _try_parse_int(raw, source="CACHE_MAX_SIZE")) is not None:
                self.cache.max_size_mb = max_size
        if raw := env.get("CACHE_TTL"):
            if (ttl := _try_parse_float(raw, source="CACHE_TTL")) is not None:
                self.cache.ttl = ttl

        # Response limits (KB)
        if raw := env.get("RESPONSE_MAX_SIZE_KB"):
            if (max_kb := _try_parse_int(raw, source="RESPONSE_MAX_SIZE_KB")) is not None:
                self.response_limits.max_size_bytes = max_kb * 1024
        if raw := env.get("RESPONSE_WARN_SIZE_KB"):
            if (warn_kb := _try_parse_int(raw, source="RESPONSE_WARN_SIZE_KB")) is not None:
                self.response_limits.warn_size_bytes = warn_kb * 1024
        if raw := env.get("RESPONSE_ENABLE_TRUNCATION"):
            self.response_limits.enable_truncation = _parse_bool(raw)
        if raw := env.get("RESPONSE_ENABLE_SIZE_LOGGING"):
            self.response_limits.enable_size_logging = _parse_bool(raw)

        # Logging
        if level := env.get("LOG_LEVEL"):
            self.log_level = level.upper()
        if log_format := env.get("LOG_FORMAT"):
            self.structured_logging = log_format.strip().lower() == "json"
        if raw := env.get("LOG_MASK_SENSITIVE"):
            self.mask_sensitive = _parse_bool(raw)

        # Feature flags
        if raw := env.get("ENABLE_CACHE"):
            self.features.enable_caching = _parse_bool(raw)
        if raw := env.get("ENABLE_AUTH"):
            self.features.enable_authentication = _parse_bool(raw)

    def validate(self) -> None:
        """Validate the loaded configuration.

        Raises:
            ValueError: Listing every invalid field.
        """
        problems: List[str] = []

        if not self.gbif.base_url.startswith(("http://", "https://")):
            problems.append(f"gbif.base_url must be an http(s) URL, got {self.gbif.base_url!r}")
        if self.gbif.timeout <= 0:
            problems.append("gbif.timeout must be > 0")
        if self.gbif.retry_attempts < 0:
            problems.append("gbif.retry_attempts must be >= 0")
        if self.gbif.retry_delay < 0:
            problems.append("gbif.retry_delay must be >= 0")
        if self.rate_limit.max_requests_per_minute <= 0:
            problems.append("rate_limit.max_requests_per_minute must be > 0")
        if self.rate_limit.max_concurrent_requests <= 0:
            problems.append("rate_limit.max_concurrent_requests must be > 0")
        if self.rate_limit.backoff_multiplier < 1:
            problems.append("rate_limit.backoff_multiplier must be >= 1")
        if self.rate_limit.max_backoff_time <= 0:
            problems.append("rate_limit.max_backoff_time must be > 0")
        if self.cache.max_size_mb <= 0:
            problems.append("cache.max_size_mb must be > 0")
        if self.cache.ttl <= 0:
            problems.append("cache.ttl must be > 0")
        if self.response_limits.max_size_bytes <= 0:
            problems.append("response_limits.max_size_bytes must be > 0")
        if self.response_limits.warn_size_bytes > self.response_limits.max_size_bytes:
            problems.append("response_limits.warn_size_bytes must not exceed max_size_bytes")
        if self.features.enable_authentication and not self.gbif.has_credentials:
            problems.append("features.enable_authentication requires GBIF_USERNAME and GBIF_PASSWORD")

        if problems:
            raise ValueError("Invalid configuration: " + "; ".join(problems))
