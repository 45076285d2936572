"""Station search pipeline: aggregation, filtering, sorting and sectioning."""

from .aggregation import aggregate_reports, enrich_stations
from .filtering import (
    filter_and_sort,
    filter_stations,
    price_bound_text,
    selected_product,
    selected_sort_mode,
    sort_stations,
    summarize_prices,
)
from .sectioning import section_by_distance

__all__ = [
    "aggregate_reports",
    "enrich_stations",
    "filter_and_sort",
    "filter_stations",
    "price_bound_text",
    "section_by_distance",
    "selected_product",
    "selected_sort_mode",
    "sort_stations",
    "summarize_prices",
]
