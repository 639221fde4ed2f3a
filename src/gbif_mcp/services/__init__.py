"""Thin GBIF endpoint wrappers built on ``GbifClient``."""

from gbif_mcp.services.occurrence import OccurrenceService
from gbif_mcp.services.species import SpeciesService

__all__ = ["OccurrenceService", "SpeciesService"]
