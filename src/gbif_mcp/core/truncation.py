"""Response truncation for oversized GBIF payloads.

Tool results travel back to an LLM, so payloads above ``max_size_bytes`` are
cut down before they leave the server. Paginated payloads
(``{"results": [...], "count", "offset", "limit", ...}``) keep as many whole
result items as fit, in order, plus a hint for re-querying with a smaller
page; anything else is replaced by a metadata-only notice.

The outcome is an explicit tagged union::

    shaped = truncator.truncate(payload, params)
    if isinstance(shaped, Truncated):
        ...  # shaped.envelope describes what was dropped
    body = shaped.body()
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from gbif_mcp.core.serialization import payload_size

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE_BYTES = 250 * 1024
RESERVED_OVERHEAD_BYTES = 2000
MIN_SUGGESTED_LIMIT = 10
MAX_SUGGESTED_LIMIT = 50


def format_size(num_bytes: int) -> str:
    """Format a byte count as ``"248KB"``, ``"1.5KB"`` or ``"1.2MB"``."""
    kb = num_bytes / 1024
    if kb >= 1024:
        return f"{kb / 1024:.1f}MB"
    rounded = math.floor(kb * 10 + 0.5) / 10
    if rounded == int(rounded):
        return f"{int(rounded)}KB"
    return f"{rounded:.1f}KB"


def is_paginated(payload: Any) -> bool:
    """True for GBIF list responses carrying a ``results`` array."""
    return isinstance(payload, dict) and isinstance(payload.get("results"), list)


@dataclass
class PaginationHint:
    """How to re-query in pages that fit the budget."""

    suggestion: str
    example: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"suggestion": self.suggestion, "example": dict(self.example)}


@dataclass
class TruncationMetadata:
    returned_count: int
    total_count: Optional[int] = None
    offset: Optional[int] = None
    limit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.total_count is not None:
            result["totalCount"] = self.total_count
        result["returnedCount"] = self.returned_count
        if self.offset is not None:
            result["offset"] = self.offset
        if self.limit is not None:
            result["limit"] = self.limit
        return result


@dataclass
class TruncationEnvelope:
    """Replacement for a payload that exceeded the byte budget."""

    original_size: int
    returned_size: int
    limit_size: int
    message: str
    metadata: TruncationMetadata
    data: Any = None
    pagination: Optional[PaginationHint] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "truncated": True,
            "originalSize": format_size(self.original_size),
            "returnedSize": format_size(self.returned_size),
            "limitSize": format_size(self.limit_size),
            "message": self.message,
            "metadata": self.metadata.to_dict(),
            "data": self.data,
        }
        if self.pagination is not None:
            result["pagination"] = self.pagination.to_dict()
        return result


@dataclass(frozen=True)
class Plain:
    """Payload within budget, returned unmodified."""

    payload: Any

    def body(self) -> Any:
        return self.payload


@dataclass(frozen=True)
class Truncated:
    """Payload over budget, replaced by an envelope."""

    envelope: TruncationEnvelope
    details: Dict[str, Any] = field(default_factory=dict)

    def body(self) -> Dict[str, Any]:
        return self.envelope.to_dict()


ShapedResponse = Union[Plain, Truncated]


class ResponseTruncator:
    """Keeps tool results within a hard byte budget.

    Attributes:
        max_size_bytes: Largest payload returned unmodified
        reserved_overhead: Bytes held back for the envelope wrapper
    """

    def __init__(
        self,
        max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
        *,
        reserved_overhead: int = RESERVED_OVERHEAD_BYTES,
    ):
        self.max_size_bytes = max_size_bytes
        self.reserved_overhead = reserved_overhead

    def size_of(self, payload: Any) -> int:
        """Size of ``payload`` in bytes as compact JSON."""
        return payload_size(payload)

    def needs_truncation(self, payload: Any) -> bool:
        return self.size_of(payload) > self.max_size_bytes

    def truncate(
        self,
        payload: Any,
        original_params: Optional[Mapping[str, Any]] = None,
    ) -> ShapedResponse:
        """Shape ``payload`` to fit the budget.

        Args:
            payload: Parsed API response
            original_params: Query parameters of the request, echoed in the
                pagination example

        Returns:
            Plain(payload) when within budget (or an empty page), otherwise
            Truncated(envelope) whose serialized size is within budget.
        """
        if is_paginated(payload) and not payload["results"]:
            return Plain(payload)

        original_size = self.size_of(payload)
        if original_size <= self.max_size_bytes:
            return Plain(payload)

        if is_paginated(payload):
            envelope = self._truncate_paginated(payload, original_size, original_params or {})
        else:
            envelope = self._metadata_only(original_size)

        logger.warning(
            "Response exceeds size limit, truncated",
            extra={
                "original_size": format_size(original_size),
                "returned_size": format_size(envelope.returned_size),
                "limit_size": format_size(self.max_size_bytes),
                "returned_count": envelope.metadata.returned_count,
            },
        )
        return Truncated(
            envelope,
            details={
                "original_bytes": original_size,
                "returned_bytes": envelope.returned_size,
                "limit_bytes": self.max_size_bytes,
            },
        )

    def _truncate_paginated(
        self,
        payload: Dict[str, Any],
        original_size: int,
        original_params: Mapping[str, Any],
    ) -> TruncationEnvelope:
        results = payload["results"]
        base_size = self.size_of({**payload, "results": []})
        budget = self.max_size_bytes - base_size - self.reserved_overhead

        kept = []
        used = 0
        for item in results:
            # Separator comma between array items
            item_size = self.size_of(item) + (1 if kept else 0)
            if used + item_size > budget:
                break
            kept.append(item)
            used += item_size

        envelope = self._paginated_envelope(payload, kept, original_size, original_params)
        # The reserve normally covers the wrapper; large echoed params can exceed it.
        while kept and self.size_of(envelope.to_dict()) > self.max_size_bytes:
            kept.pop()
            envelope = self._paginated_envelope(payload, kept, original_size, original_params)

        if self.size_of(envelope.to_dict()) > self.max_size_bytes:
            return self._metadata_only(original_size)
        return envelope

    def _paginated_envelope(
        self,
        payload: Dict[str, Any],
        kept: list,
        original_size: int,
        original_params: Mapping[str, Any],
    ) -> TruncationEnvelope:
        data = {**payload, "results": list(kept)}
        count = payload.get("count")
        hint = self.pagination_hint(len(kept), original_params)

        return TruncationEnvelope(
            original_size=original_size,
            returned_size=self.size_of(data),
            limit_size=self.max_size_bytes,
            message=(
                f"Response truncated to {format_size(self.max_size_bytes)}. "
                f"Total results: {count or 0}, returned: {len(kept)}. {hint.suggestion}"
            ),
            metadata=TruncationMetadata(
                total_count=count,
                returned_count=len(kept),
                offset=payload.get("offset"),
                limit=payload.get("limit"),
            ),
            data=data,
            pagination=hint,
        )

    def pagination_hint(
        self,
        returned_count: int,
        original_params: Mapping[str, Any],
    ) -> PaginationHint:
        """Suggest a page size that fits, clamped to 10..50."""
        page_size = max(MIN_SUGGESTED_LIMIT, min(returned_count, MAX_SUGGESTED_LIMIT))
        suggestion = (
            f"To get more data, use limit={page_size} with offset pagination: "
            f"offset=0, then offset={page_size}, offset={page_size * 2}, etc."
        )
        example = {**original_params, "limit": page_size, "offset": 0}
        return PaginationHint(suggestion=suggestion, example=example)

    def _metadata_only(self, original_size: int) -> TruncationEnvelope:
        envelope = TruncationEnvelope(
            original_size=original_size,
            returned_size=0,
            limit_size=self.max_size_bytes,
            message=(
                f"Response size ({format_size(original_size)}) exceeds maximum limit "
                f"({format_size(self.max_size_bytes)}) by "
                f"{format_size(original_size - self.max_size_bytes)}. No data returned; "
                "narrow the query with more specific filters."
            ),
            metadata=TruncationMetadata(returned_count=0),
            data=None,
        )
        envelope.returned_size = self.size_of(envelope.to_dict())
        return envelope
