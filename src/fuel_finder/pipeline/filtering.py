"""Filter and sort engine for enriched stations.

Both stages are pure: the same stations and criteria always give the same list,
and the input list is never modified.

Sorting by "distance" is deliberately a no-op here. The list keeps its fetch order
and nearest-first ordering is applied when the results are split into distance
bands (see :mod:`fuel_finder.pipeline.sectioning`).

The filter store does not validate what is written to it, so the criteria read
here may hold plain strings or dicts instead of enum members and models. Values
that cannot be understood disable the matching criterion rather than raising.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any

from fuel_finder.models import (
    EnrichedStation,
    FilterCriteria,
    FuelType,
    PriceSummary,
    SortMode,
)
from fuel_finder.utils import normalize_fuel_type, parse_price_bound, parse_timestamp

# Pushes stations without a price to the end of a price-ascending sort.
_MISSING_PRICE = math.inf


def selected_product(criteria: FilterCriteria) -> str | None:
    """Return the product name the criteria filter on, or None for all fuels.

    Free-form tags such as "PMS" or "petrol" are normalized the same way report
    tags are. A name that matches no known fuel is still returned and is matched
    against station products as-is.
    """
    fuel = criteria.fuel_type
    if not fuel:
        return None
    if isinstance(fuel, FuelType):
        return fuel.value
    return normalize_fuel_type(str(fuel))


def price_bound_text(criteria: FilterCriteria, bound: str) -> str:
    """Return the raw "min" or "max" price text, whatever shape the range was stored in."""
    price_range: Any = criteria.price_range
    if isinstance(price_range, Mapping):
        value = price_range.get(bound)
    else:
        value = getattr(price_range, bound, None)
    return value if isinstance(value, str) else ""


def selected_sort_mode(criteria: FilterCriteria) -> SortMode:
    """Return the requested sort mode; unknown values fall back to distance."""
    try:
        return SortMode(criteria.sort_by)
    except ValueError:
        return SortMode.DISTANCE


def _minimum_rating(criteria: FilterCriteria) -> float:
    try:
        return float(criteria.rating or 0)
    except (TypeError, ValueError):
        return 0


def _price_for(station: EnrichedStation, product: str) -> float | None:
    try:
        fuel = FuelType(product)
    except ValueError:
        # No price column for this product.
        return None
    return station.price_for(fuel)


def _price_bounds(criteria: FilterCriteria) -> tuple[float | None, float | None]:
    return (
        parse_price_bound(price_bound_text(criteria, "min")),
        parse_price_bound(price_bound_text(criteria, "max")),
    )


def is_price_range_active(criteria: FilterCriteria) -> bool:
    """Return True when at least one price bound parses to a number."""
    low, high = _price_bounds(criteria)
    return low is not None or high is not None


def _matches(
    station: EnrichedStation,
    product: str | None,
    low: float | None,
    high: float | None,
    min_rating: float,
    required: Sequence[str],
) -> bool:
    if product is not None and product not in station.products:
        return False

    if product is not None and (low is not None or high is not None):
        price = _price_for(station, product)
        if price is None:
            return False
        if low is not None and price < low:
            return False
        if high is not None and price > high:
            return False

    if min_rating > 0 and (station.average_rating or 0) < min_rating:
        return False

    if required and not all(item in station.amenities for item in required):
        return False

    return True


def filter_stations(
    stations: Sequence[EnrichedStation], criteria: FilterCriteria
) -> list[EnrichedStation]:
    """Keep the stations that satisfy every active criterion.

    Conditions, all of which must hold:

    1. With a fuel type selected, the station's products include it.
    2. With a fuel type selected and a price range active, the station has a
       price for that fuel and it lies within the parsed bounds.
    3. With a minimum rating above 0, the average rating (null counts as 0)
       reaches it.
    4. Every required amenity is offered by the station.

    Args:
        stations: Enriched stations in fetch order.
        criteria: The active filter criteria.

    Returns:
        The matching stations, in input order.
    """
    product = selected_product(criteria)
    low, high = _price_bounds(criteria)
    required = list(criteria.amenities or [])
    min_rating = _minimum_rating(criteria)
    return [
        station
        for station in stations
        if _matches(station, product, low, high, min_rating, required)
    ]


def sort_stations(
    stations: Sequence[EnrichedStation], criteria: FilterCriteria
) -> list[EnrichedStation]:
    """Order stations according to the criteria.

    A selected fuel type with an active price range sorts by that fuel's price,
    cheapest first. Otherwise "last_update" sorts newest first, with a missing
    timestamp counted as the epoch. "distance" leaves the order untouched.

    Args:
        stations: Filtered stations.
        criteria: The active filter criteria.

    Returns:
        A new, ordered list.
    """
    product = selected_product(criteria)

    if product is not None and is_price_range_active(criteria):

        def price_key(station: EnrichedStation) -> float:
            price = _price_for(station, product)
            return _MISSING_PRICE if price is None else price

        return sorted(stations, key=price_key)

    if selected_sort_mode(criteria) is SortMode.LAST_UPDATE:
        return sorted(
            stations, key=lambda station: parse_timestamp(station.last_updated_at), reverse=True
        )

    return list(stations)


def filter_and_sort(
    stations: Sequence[EnrichedStation], criteria: FilterCriteria
) -> list[EnrichedStation]:
    """Filter then sort stations; see :func:`filter_stations` and :func:`sort_stations`."""
    return sort_stations(filter_stations(stations, criteria), criteria)


def summarize_prices(stations: Sequence[EnrichedStation]) -> PriceSummary | None:
    """Find the cheapest and the most expensive petrol station.

    Args:
        stations: The displayed stations.

    Returns:
        The summary, or None when fewer than two stations have a petrol price or
        the same station is both cheapest and most expensive.
    """
    priced = [station for station in stations if station.latest_pms_price is not None]
    if len(priced) < 2:
        return None

    lowest = min(priced, key=lambda station: station.latest_pms_price)
    highest = max(priced, key=lambda station: station.latest_pms_price)
    if lowest.id == highest.id:
        return None
    return PriceSummary(lowest=lowest, highest=highest)
