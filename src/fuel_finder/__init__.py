"""Fuel station search, price comparison and crowd-sourced reporting."""

from .backend.client import SupabaseBackend
from .backend.service import StationSearchService
from .config import BackendSettings, SearchSettings, Settings, get_settings
from .debounce import Debouncer
from .errors import BackendError, ConfigError, FuelFinderError, ReportSubmissionError
from .logger import configure_logging
from .models import (
    DistanceSection,
    EnrichedStation,
    FilterCriteria,
    FuelType,
    Location,
    PriceRange,
    PriceSummary,
    Report,
    ReportSubmission,
    SearchResult,
    SortMode,
    Station,
    StationAggregate,
)
from .pipeline import (
    aggregate_reports,
    enrich_stations,
    filter_and_sort,
    filter_stations,
    section_by_distance,
    sort_stations,
    summarize_prices,
)
from .store import FilterStore
from .utils import haversine_distance, normalize_fuel_type, parse_price_bound

__all__ = [
    "BackendError",
    "BackendSettings",
    "ConfigError",
    "Debouncer",
    "DistanceSection",
    "EnrichedStation",
    "FilterCriteria",
    "FilterStore",
    "FuelFinderError",
    "FuelType",
    "Location",
    "PriceRange",
    "PriceSummary",
    "Report",
    "ReportSubmission",
    "ReportSubmissionError",
    "SearchResult",
    "SearchSettings",
    "Settings",
    "SortMode",
    "Station",
    "StationAggregate",
    "StationSearchService",
    "SupabaseBackend",
    "aggregate_reports",
    "configure_logging",
    "enrich_stations",
    "filter_and_sort",
    "filter_stations",
    "get_settings",
    "haversine_distance",
    "normalize_fuel_type",
    "parse_price_bound",
    "section_by_distance",
    "sort_stations",
    "summarize_prices",
]
