"""Protected GBIF request core: client, cache, queue and response shaping."""

from gbif_mcp.core.cache import ResponseCache, make_cache_key
from gbif_mcp.core.client import GbifClient
from gbif_mcp.core.concurrency import ConcurrencyLimiter
from gbif_mcp.core.truncation import Plain, ResponseTruncator, Truncated, format_size

__all__ = [
    "GbifClient",
    "ResponseCache",
    "make_cache_key",
    "ConcurrencyLimiter",
    "ResponseTruncator",
    "Plain",
    "Truncated",
    "format_size",
]
