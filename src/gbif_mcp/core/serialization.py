"""JSON sizing helpers shared by the cache and the response truncator."""

import json
from typing import Any


def compact_json(value: Any) -> str:
    """Encode ``value`` as compact JSON (no whitespace, UTF-8 text kept)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def payload_size(value: Any) -> int:
    """Size of ``value`` in bytes as compact UTF-8 JSON."""
    return len(compact_json(value).encode("utf-8"))
