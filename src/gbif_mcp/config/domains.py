"""Section dataclasses composing ``ServerConfig``.

One small class per concern: the GBIF endpoint, outbound rate limiting,
the response cache, response size limits and feature flags.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from gbif_mcp.config.parsing import _parse_bool

DEFAULT_BASE_URL = "https://api.gbif.org/v1"
DEFAULT_USER_AGENT = "GBIF-MCP-Server/1.0.0"


@dataclass
class GbifApiConfig:
    """GBIF endpoint and retry settings.

    Attributes:
        base_url: API root every request path is resolved against
        username: Optional GBIF account name (basic auth)
        password: Optional GBIF account password (basic auth)
        user_agent: User-Agent header sent with each request
        timeout: Per-request timeout in seconds
        retry_attempts: Server-error retries before failing
        retry_delay: Base delay in seconds for server-error retries
    """

    base_url: str = DEFAULT_BASE_URL
    username: Optional[str] = None
    password: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    retry_attempts: int = 3
    retry_delay: float = 1.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "GbifApiConfig":
        """Create config from the ``[gbif]`` TOML section."""
        return cls(
            base_url=str(data.get("base_url", DEFAULT_BASE_URL)),
            username=data.get("username"),
            password=data.get("password"),
            user_agent=str(data.get("user_agent", DEFAULT_USER_AGENT)),
            timeout=float(data.get("timeout", 30.0)),
            retry_attempts=int(data.get("retry_attempts", 3)),
            retry_delay=float(data.get("retry_delay", 1.0)),
        )


@dataclass
class RateLimitSettings:
    """Outbound request ceilings.

    Attributes:
        max_requests_per_minute: Requests admitted per 60-second window
        max_concurrent_requests: Requests in flight at once
        backoff_multiplier: Growth factor for consecutive 429 backoffs
        max_backoff_time: Cap for computed 429 backoff in seconds
    """

    max_requests_per_minute: int = 100
    max_concurrent_requests: int = 10
    backoff_multiplier: float = 2.0
    max_backoff_time: float = 60.0

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "RateLimitSettings":
        """Create config from the ``[rate_limit]`` TOML section."""
        return cls(
            max_requests_per_minute=int(data.get("max_requests_per_minute", 100)),
            max_concurrent_requests=int(data.get("max_concurrent_requests", 10)),
            backoff_multiplier=float(data.get("backoff_multiplier", 2.0)),
            max_backoff_time=float(data.get("max_backoff_time", 60.0)),
        )


@dataclass
class CacheConfig:
    """Response cache settings (GET requests only)."""

    enabled: bool = True
    max_size_mb: int = 100
    ttl: float = 3600.0

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "CacheConfig":
        """Create config from the ``[cache]`` TOML section."""
        return cls(
            enabled=_parse_bool(data.get("enabled", True)),
            max_size_mb=int(data.get("max_size_mb", 100)),
            ttl=float(data.get("ttl", 3600.0)),
        )


@dataclass
class ResponseLimitsConfig:
    """Size limits applied to tool results.

    Attributes:
        max_size_bytes: Results above this are truncated
        warn_size_bytes: Results above this are logged at warning level
        enable_truncation: Apply truncation at all
        enable_size_logging: Log result sizes
    """

    max_size_bytes: int = 250 * 1024
    warn_size_bytes: int = 200 * 1024
    enable_truncation: bool = True
    enable_size_logging: bool = True

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "ResponseLimitsConfig":
        """Create config from the ``[response_limits]`` TOML section.

        Sizes are given in KB (``max_size_kb`` / ``warn_size_kb``).
        """
        return cls(
            max_size_bytes=int(data.get("max_size_kb", 250)) * 1024,
            warn_size_bytes=int(data.get("warn_size_kb", 200)) * 1024,
            enable_truncation=_parse_bool(data.get("enable_truncation", True)),
            enable_size_logging=_parse_bool(data.get("enable_size_logging", True)),
        )


@dataclass
class FeatureFlags:
    enable_caching: bool = True
    enable_authentication: bool = False

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "FeatureFlags":
        return cls(
            enable_caching=_parse_bool(data.get("enable_caching", True)),
            enable_authentication=_parse_bool(data.get("enable_authentication", False)),
        )
