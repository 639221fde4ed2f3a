"""Occurrence endpoints."""

import logging
from typing import Any, AsyncIterator, Dict, Mapping, Optional

from gbif_mcp.core.client import GbifClient

logger = logging.getLogger(__name__)

# GBIF refuses offset + limit beyond this for occurrence search
MAX_SEARCH_OFFSET = 100_000


class OccurrenceService:
    """Read-only access to ``/occurrence`` endpoints."""

    base_path = "/occurrence"

    def __init__(self, client: GbifClient):
        self.client = client

    async def search(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Occurrence search; returns a paginated ``results`` payload (``facets`` when requested)."""
        logger.info("Searching occurrences", extra={"params": dict(params or {})})
        return await self.client.get(f"{self.base_path}/search", params)

    async def get(self, key: int) -> Dict[str, Any]:
        logger.info("Getting occurrence by key", extra={"occurrence_key": key})
        return await self.client.get(f"{self.base_path}/{key}")

    async def count(self, params: Optional[Mapping[str, Any]] = None) -> int:
        """Number of occurrences matching ``params``."""
        result = await self.client.get(f"{self.base_path}/count", params)
        return int(result or 0)

    async def download_status(self, download_key: str) -> Dict[str, Any]:
        return await self.client.get(f"{self.base_path}/download/{download_key}")

    async def iter_search(
        self,
        params: Optional[Mapping[str, Any]] = None,
        *,
        page_size: int = 300,
        max_records: Optional[int] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """Yield occurrence records one by one across pages.

        Args:
            params: Search filters (``offset``/``limit`` are managed here)
            page_size: Records requested per page
            max_records: Stop after this many records

        Yields:
            Individual occurrence records, in result order.
        """
        filters = {k: v for k, v in (params or {}).items() if k not in ("offset", "limit")}
        emitted = 0
        fetched = 0
        async for page in self.client.paginate(f"{self.base_path}/search", filters, page_size):
            for record in page:
                yield record
                emitted += 1
                if max_records is not None and emitted >= max_records:
                    return
            fetched += page_size
            if fetched >= MAX_SEARCH_OFFSET:
                logger.warning("Reached occurrence search paging ceiling", extra={"records": emitted})
                return
