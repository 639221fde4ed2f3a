"""Size-bounded LRU cache for GET responses.

Entries are keyed by a request fingerprint (see :func:`make_cache_key`),
sized by their compact JSON encoding, and expire passively: a ``get`` on an
entry older than ``ttl`` is a miss and drops the entry. Reading an entry
refreshes both its recency and its age.
"""

import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from gbif_mcp.core.resilience.models import Clock
from gbif_mcp.core.serialization import payload_size

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached payload with its accounting data."""

    key: str
    value: Any
    size_bytes: int
    inserted_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at >= self.ttl


def make_cache_key(method: str, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build the fingerprint ``METHOD:path:<sorted params JSON>``.

    Parameter order does not matter: ``{"a": 1, "b": 2}`` and
    ``{"b": 2, "a": 1}`` yield the same key.
    """
    param_str = json.dumps(dict(params), sort_keys=True, default=str) if params else ""
    return f"{method.upper()}:{path}:{param_str}"


class ResponseCache:
    """LRU cache bounded by total payload bytes.

    Attributes:
        max_size_bytes: Budget for the sum of all entry sizes
        ttl: Seconds an entry stays valid after its last read or write
    """

    def __init__(
        self,
        max_size_bytes: int,
        ttl: float,
        *,
        clock: Optional[Clock] = None,
    ):
        self.max_size_bytes = max_size_bytes
        self.ttl = ttl
        self._clock = clock or time.monotonic
        # Ordered least- to most-recently used
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._total_size = 0
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or expired entry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        now = self._clock()
        if entry.is_expired(now):
            self._remove(key)
            self._misses += 1
            logger.debug("Cache entry expired", extra={"cache_key": key})
            return None

        entry.inserted_at = now
        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> bool:
        """Store ``value``; evict least-recently-read entries to make room.

        Returns:
            False if the value alone exceeds the cache budget and was not stored.
        """
        size = payload_size(value)
        if size > self.max_size_bytes:
            logger.debug(
                "Value larger than cache budget, not cached",
                extra={"cache_key": key, "size_bytes": size},
            )
            return False

        if key in self._entries:
            self._remove(key)

        while self._entries and self._total_size + size > self.max_size_bytes:
            evicted_key, evicted = self._entries.popitem(last=False)
            self._total_size -= evicted.size_bytes
            logger.debug(
                "Evicted cache entry",
                extra={"cache_key": evicted_key, "size_bytes": evicted.size_bytes},
            )

        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            size_bytes=size,
            inserted_at=self._clock(),
            ttl=self.ttl,
        )
        self._total_size += size
        return True

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key)
        self._total_size -= entry.size_bytes

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
        self._total_size = 0

    def stats(self) -> Dict[str, int]:
        """Resident entry count and byte size, plus hit/miss counters."""
        return {
            "entry_count": len(self._entries),
            "total_size_bytes": self._total_size,
            "max_size_bytes": self.max_size_bytes,
            "hits": self._hits,
            "misses": self._misses,
        }
