"""Parsing helpers for configuration values read from TOML and the environment."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _try_parse_int(value: Any, *, source: str) -> Optional[int]:
    """Parse an integer, logging and returning None when the value is invalid."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        logger.warning("Ignoring %s: expected integer, got %r", source, value)
        return None


def _try_parse_float(value: Any, *, source: str) -> Optional[float]:
    """Parse a float, logging and returning None when the value is invalid."""
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        logger.warning("Ignoring %s: expected number, got %r", source, value)
        return None
