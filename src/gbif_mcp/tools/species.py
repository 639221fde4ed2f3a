"""
Species tools for gbif-mcp.

Name search, lookup, autocomplete, backbone matching and taxonomy browsing
(children, synonyms, common names) over ``/species``.
"""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from gbif_mcp.config import ServerConfig
from gbif_mcp.core.naming import canonical_tool
from gbif_mcp.services import SpeciesService
from gbif_mcp.tools.common import build_truncator, shape_result
from gbif_mcp.tools.schemas import (
    SpeciesMatchParams,
    SpeciesSearchParams,
    TaxonPageParams,
    VernacularNameParams,
)


def register_species_tools(mcp: FastMCP, service: SpeciesService, config: ServerConfig) -> None:
    """Register species tools with the FastMCP server."""
    truncator = build_truncator(config)

    @canonical_tool(
        mcp,
        canonical_name="species-search",
    )
    async def species_search(
        q: Optional[str] = None,
        rank: Optional[str] = None,
        higher_taxon_key: Optional[int] = None,
        status: Optional[str] = None,
        dataset_key: Optional[str] = None,
        habitat: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> dict:
        """
        Search GBIF species names.

        Args:
            q: Full-text query (scientific or common name)
            rank: Taxonomic rank filter (e.g. SPECIES, GENUS, FAMILY)
            higher_taxon_key: Restrict to descendants of this taxon
            status: Taxonomic status (e.g. ACCEPTED, SYNONYM)
            dataset_key: Checklist dataset UUID
            habitat: Habitat filter (MARINE, FRESHWATER, TERRESTRIAL)
            limit: Results per page, 0-300 (default 20)
            offset: Results to skip (default 0)
        """
        params = SpeciesSearchParams(
            q=q,
            rank=rank,
            higher_taxon_key=higher_taxon_key,
            status=status,
            dataset_key=dataset_key,
            habitat=habitat,
            limit=limit,
            offset=offset,
        ).to_query()
        result = await service.search(params)
        return shape_result(result, config=config, tool_name="species-search", params=params, truncator=truncator)

    @canonical_tool(
        mcp,
        canonical_name="species-get",
    )
    async def species_get(key: int) -> dict:
        """
        Get a species record by its GBIF taxon key.

        Args:
            key: GBIF taxon key (e.g. 2435099 for Puma concolor)
        """
        result = await service.get(key)
        return shape_result(result, config=config, tool_name="species-get", truncator=truncator)

    @canonical_tool(
        mcp,
        canonical_name="species-suggest",
    )
    async def species_suggest(q: str, limit: int = 10) -> dict:
        """
        Autocomplete scientific names.

        Args:
            q: Name prefix
            limit: Maximum suggestions (default 10)
        """
        result = await service.suggest(q, limit=limit)
        return shape_result(result, config=config, tool_name="species-suggest", truncator=truncator)

    @canonical_tool(
        mcp,
        canonical_name="species-match",
    )
    async def species_match(
        name: str,
        strict: bool = False,
        rank: Optional[str] = None,
        kingdom: Optional[str] = None,
    ) -> dict:
        """
        Match a scientific name against the GBIF backbone taxonomy.

        Args:
            name: Scientific name, optionally with authorship
            strict: Only return exact matches
            rank: Expected rank, used to disambiguate homonyms
            kingdom: Expected kingdom, used to disambiguate homonyms
        """
        match = SpeciesMatchParams(name=name, strict=strict, rank=rank, kingdom=kingdom)
        filters = match.model_dump(exclude={"name", "strict"}, exclude_none=True)
        result = await service.match(match.name, strict=match.strict, **filters)
        return shape_result(result, config=config, tool_name="species-match", truncator=truncator)

    @canonical_tool(
        mcp,
        canonical_name="species-children",
    )
    async def species_children(key: int, limit: int = 20, offset: int = 0) -> dict:
        """
        List the direct taxonomic children of a taxon.

        For example the species of a genus, or the subspecies of a species.

        Args:
            key: Parent taxon key (e.g. 5219173 for the genus Panthera)
            limit: Children per page, 1-1000 (default 20)
            offset: Children to skip (default 0)
        """
        page = TaxonPageParams(key=key, limit=limit, offset=offset)
        result = await service.children(page.key, offset=page.offset, limit=page.limit)
        return shape_result(
            result,
            config=config,
            tool_name="species-children",
            params={"key": page.key, "limit": page.limit, "offset": page.offset},
            truncator=truncator,
        )

    @canonical_tool(
        mcp,
        canonical_name="species-synonyms",
    )
    async def species_synonyms(key: int, limit: int = 20, offset: int = 0) -> dict:
        """
        List synonyms and alternative scientific names of a taxon.

        Args:
            key: Accepted taxon key
            limit: Synonyms per page, 1-1000 (default 20)
            offset: Synonyms to skip (default 0)
        """
        page = TaxonPageParams(key=key, limit=limit, offset=offset)
        result = await service.synonyms(page.key, offset=page.offset, limit=page.limit)
        return shape_result(
            result,
            config=config,
            tool_name="species-synonyms",
            params={"key": page.key, "limit": page.limit, "offset": page.offset},
            truncator=truncator,
        )

    @canonical_tool(
        mcp,
        canonical_name="species-vernacular",
    )
    async def species_vernacular(key: int, language: Optional[str] = None) -> dict:
        """
        Get the common names of a taxon.

        Args:
            key: GBIF taxon key
            language: Only names in this ISO 639-2 language (e.g. eng, spa, fra)
        """
        query = VernacularNameParams(key=key, language=language)
        names = await service.vernacular_names(query.key)
        if query.language:
            wanted = query.language.lower()
            names = [n for n in names if str(n.get("language") or "").lower() == wanted]
        return shape_result(
            {"key": query.key, "language": query.language, "count": len(names), "results": names},
            config=config,
            tool_name="species-vernacular",
            truncator=truncator,
        )
