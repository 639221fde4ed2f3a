"""
Occurrence tools for gbif-mcp.

Occurrence search, lookup, counting and download tracking over
``/occurrence``. Search results are the usual source of oversized payloads
and pass through truncation.
"""

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from gbif_mcp.config import ServerConfig
from gbif_mcp.core.naming import canonical_tool
from gbif_mcp.services import OccurrenceService
from gbif_mcp.tools.common import build_truncator, shape_result
from gbif_mcp.tools.schemas import DownloadStatusParams, OccurrenceCountParams, OccurrenceSearchParams

# download status -> (message, next step)
DOWNLOAD_STATUS_GUIDANCE = {
    "PREPARING": ("Download is being prepared.", "Check again in a few moments."),
    "RUNNING": ("Download is running and processing records.", "Check again to follow progress."),
    "SUCCEEDED": ("Download completed; the file is ready.", "Fetch the file from downloadLink."),
    "CANCELLED": ("Download was cancelled.", "Submit a new download request if needed."),
    "FAILED": ("Download failed.", "Review the request filters and submit a new one."),
    "KILLED": ("Download was terminated.", "Submit a new download request if needed."),
    "SUSPENDED": ("Download is suspended.", "Contact GBIF support."),
}


def summarize_download(download: Dict[str, Any]) -> Dict[str, Any]:
    """Condense a GBIF download record into status, guidance and, once ready, the file details."""
    status = download.get("status")
    message, next_step = DOWNLOAD_STATUS_GUIDANCE.get(
        status, (f"Download status: {status}", "See the GBIF documentation for this status.")
    )
    summary: Dict[str, Any] = {
        "downloadKey": download.get("key"),
        "status": status,
        "statusMessage": message,
        "nextSteps": next_step,
        "created": download.get("created"),
        "modified": download.get("modified"),
    }
    if status == "SUCCEEDED":
        summary["downloadLink"] = download.get("downloadLink")
        summary["totalRecords"] = download.get("totalRecords")
        if download.get("size"):
            summary["size"] = f"{download['size'] / 1024 / 1024:.2f} MB"
    return summary


def register_occurrence_tools(mcp: FastMCP, service: OccurrenceService, config: ServerConfig) -> None:
    """Register occurrence tools with the FastMCP server."""
    truncator = build_truncator(config)

    @canonical_tool(
        mcp,
        canonical_name="occurrence-search",
    )
    async def occurrence_search(
        q: Optional[str] = None,
        taxon_key: Optional[int] = None,
        scientific_name: Optional[str] = None,
        country: Optional[str] = None,
        year: Optional[str] = None,
        basis_of_record: Optional[str] = None,
        dataset_key: Optional[str] = None,
        has_coordinate: Optional[bool] = None,
        facet: Optional[List[str]] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> dict:
        """
        Search occurrence records.

        Large pages are truncated to fit the response budget; the result then
        carries a pagination hint with a smaller limit.

        Args:
            q: Full-text query
            taxon_key: GBIF taxon key, includes descendants
            scientific_name: Scientific name filter
            country: ISO 3166-1 alpha-2 country code (e.g. US, BR)
            year: Year or range (e.g. 2020 or 2000,2020)
            basis_of_record: e.g. HUMAN_OBSERVATION, PRESERVED_SPECIMEN
            dataset_key: Dataset UUID
            has_coordinate: Only records with coordinates
            facet: Fields to facet on (e.g. ["country", "year"])
            limit: Results per page, 0-300 (default 20)
            offset: Results to skip (default 0)
        """
        params = OccurrenceSearchParams(
            q=q,
            taxon_key=taxon_key,
            scientific_name=scientific_name,
            country=country,
            year=year,
            basis_of_record=basis_of_record,
            dataset_key=dataset_key,
            has_coordinate=has_coordinate,
            facet=facet,
            limit=limit,
            offset=offset,
        ).to_query()
        result = await service.search(params)
        return shape_result(result, config=config, tool_name="occurrence-search", params=params, truncator=truncator)

    @canonical_tool(
        mcp,
        canonical_name="occurrence-get",
    )
    async def occurrence_get(key: int) -> dict:
        """
        Get a single occurrence record.

        Args:
            key: GBIF occurrence key
        """
        result = await service.get(key)
        return shape_result(result, config=config, tool_name="occurrence-get", truncator=truncator)

    @canonical_tool(
        mcp,
        canonical_name="occurrence-count",
    )
    async def occurrence_count(
        taxon_key: Optional[int] = None,
        country: Optional[str] = None,
        year: Optional[str] = None,
        basis_of_record: Optional[str] = None,
        dataset_key: Optional[str] = None,
        is_georeferenced: Optional[bool] = None,
    ) -> dict:
        """
        Count occurrence records matching the filters.

        Args:
            taxon_key: GBIF taxon key
            country: ISO 3166-1 alpha-2 country code
            year: Year or range
            basis_of_record: Basis of record
            dataset_key: Dataset UUID
            is_georeferenced: Only georeferenced records
        """
        params = OccurrenceCountParams(
            taxon_key=taxon_key,
            country=country,
            year=year,
            basis_of_record=basis_of_record,
            dataset_key=dataset_key,
            is_georeferenced=is_georeferenced,
        ).to_query()
        count = await service.count(params)
        return shape_result({"count": count, "filters": params}, config=config, tool_name="occurrence-count")

    @canonical_tool(
        mcp,
        canonical_name="occurrence-download-status",
    )
    async def occurrence_download_status(download_key: str) -> dict:
        """
        Check the status of an occurrence download request.

        Returns the status with guidance, plus the download link, record
        count and file size once the download has succeeded.

        Args:
            download_key: Key returned when the download was requested
        """
        query = DownloadStatusParams(download_key=download_key)
        download = await service.download_status(query.download_key)
        return shape_result(
            summarize_download(download or {}),
            config=config,
            tool_name="occurrence-download-status",
            truncator=truncator,
        )
