"""Backend package for Fuel Finder."""

from .client import SupabaseBackend
from .service import StationSearchService

__all__ = ["StationSearchService", "SupabaseBackend"]
