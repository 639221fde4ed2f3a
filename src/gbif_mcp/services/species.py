"""Species (checklist bank) endpoints."""

import logging
from typing import Any, Dict, Mapping, Optional

from gbif_mcp.core.client import GbifClient

logger = logging.getLogger(__name__)


class SpeciesService:
    """Read-only access to ``/species`` endpoints."""

    base_path = "/species"

    def __init__(self, client: GbifClient):
        self.client = client

    async def search(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Full-text species search; returns a paginated ``results`` payload."""
        logger.info("Searching species", extra={"params": dict(params or {})})
        return await self.client.get(f"{self.base_path}/search", params)

    async def get(self, key: int) -> Dict[str, Any]:
        logger.info("Getting species by key", extra={"taxon_key": key})
        return await self.client.get(f"{self.base_path}/{key}")

    async def suggest(self, q: str, limit: int = 10) -> Any:
        """Fast name autocomplete; returns a plain list."""
        return await self.client.get(f"{self.base_path}/suggest", {"q": q, "limit": limit})

    async def match(self, name: str, *, strict: bool = False, **filters: Any) -> Dict[str, Any]:
        """Fuzzy-match a scientific name against the backbone taxonomy.

        The response carries ``matchType`` (EXACT, FUZZY, HIGHERRANK, NONE)
        and, for ambiguous names, ``alternatives``.
        """
        logger.info("Matching species name", extra={"scientific_name": name, "strict": strict})
        return await self.client.get(
            f"{self.base_path}/match",
            {"name": name, "strict": strict, **filters},
        )

    async def children(self, key: int, offset: int = 0, limit: int = 20) -> Dict[str, Any]:
        return await self.client.get(
            f"{self.base_path}/{key}/children",
            {"offset": offset, "limit": limit},
        )

    async def synonyms(self, key: int, offset: int = 0, limit: int = 20) -> Dict[str, Any]:
        return await self.client.get(
            f"{self.base_path}/{key}/synonyms",
            {"offset": offset, "limit": limit},
        )

    async def vernacular_names(self, key: int) -> list:
        """Common names in all languages, unwrapped from the page envelope."""
        response = await self.client.get(f"{self.base_path}/{key}/vernacularNames")
        if isinstance(response, dict):
            return response.get("results") or []
        return []
