"""Pydantic models validating tool arguments before they reach GBIF.

Field names are snake_case; ``to_query()`` renders GBIF's camelCase query
parameters and drops unset values.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_PAGE_SIZE = 300


class PageParams(BaseModel):
    """Offset/limit paging shared by every search tool."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    limit: int = Field(default=20, ge=0, le=MAX_PAGE_SIZE, description="Results per page (0-300)")
    offset: int = Field(default=0, ge=0, description="Number of results to skip")

    def to_query(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SpeciesSearchParams(PageParams):
    q: Optional[str] = Field(default=None, description="Full-text query")
    rank: Optional[str] = Field(default=None, description="Taxonomic rank, e.g. SPECIES, GENUS")
    higher_taxon_key: Optional[int] = Field(default=None, alias="highertaxonKey", ge=0)
    status: Optional[str] = Field(default=None, description="Taxonomic status, e.g. ACCEPTED")
    dataset_key: Optional[str] = Field(default=None, alias="datasetKey")
    habitat: Optional[str] = None


class SpeciesMatchParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(min_length=1, description="Scientific name to match")
    strict: bool = False
    rank: Optional[str] = None
    kingdom: Optional[str] = None


class OccurrenceSearchParams(PageParams):
    q: Optional[str] = None
    taxon_key: Optional[int] = Field(default=None, alias="taxonKey", ge=0)
    scientific_name: Optional[str] = Field(default=None, alias="scientificName")
    country: Optional[str] = Field(
        default=None, min_length=2, max_length=2, description="ISO 3166-1 alpha-2 country code"
    )
    year: Optional[str] = Field(default=None, description="Year or range, e.g. 2020 or 2000,2020")
    basis_of_record: Optional[str] = Field(default=None, alias="basisOfRecord")
    dataset_key: Optional[str] = Field(default=None, alias="datasetKey")
    has_coordinate: Optional[bool] = Field(default=None, alias="hasCoordinate")
    facet: Optional[List[str]] = None


class OccurrenceCountParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    taxon_key: Optional[int] = Field(default=None, alias="taxonKey", ge=0)
    country: Optional[str] = Field(default=None, min_length=2, max_length=2)
    year: Optional[str] = None
    basis_of_record: Optional[str] = Field(default=None, alias="basisOfRecord")
    dataset_key: Optional[str] = Field(default=None, alias="datasetKey")
    is_georeferenced: Optional[bool] = Field(default=None, alias="isGeoreferenced")

    def to_query(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TaxonPageParams(BaseModel):
    """A taxon key plus paging for ``/species/{key}/children`` and ``/synonyms``."""

    model_config = ConfigDict(extra="forbid")

    key: int = Field(gt=0, description="GBIF taxon key")
    limit: int = Field(default=20, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class VernacularNameParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key: int = Field(gt=0, description="GBIF taxon key")
    language: Optional[str] = Field(
        default=None, min_length=3, max_length=3, description="ISO 639-2 language code, e.g. eng, spa"
    )


class DownloadStatusParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    download_key: str = Field(min_length=1, description="Key returned when the download was requested")
