"""Reduce the raw report log into per-station aggregates and join them onto stations.

Aggregates only ever reflect the reports fetched for the current search; they are
rebuilt from scratch every time and never updated incrementally. Amenities and
payment methods use "add" semantics only, so a report cannot remove one.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from fuel_finder.models import EnrichedStation, Report, Station, StationAggregate
from fuel_finder.utils import normalize_fuel_type

logger = logging.getLogger(__name__)

_MIN_RATING = 1
_MAX_RATING = 5
_PETROL = "Petrol"
_STATION_FIELDS = set(Station.model_fields)


@dataclass
class _Accumulator:
    rating_sum: int = 0
    rating_count: int = 0
    # dicts keep first-seen order, unlike sets
    amenities: dict[str, None] = field(default_factory=dict)
    products: dict[str, None] = field(default_factory=dict)

    def to_aggregate(self) -> StationAggregate:
        average = self.rating_sum / self.rating_count if self.rating_count else None
        return StationAggregate(
            average_rating=average,
            amenities=list(self.amenities),
            products=list(self.products),
        )


def aggregate_reports(reports: Iterable[Report]) -> dict[int, StationAggregate]:
    """Reduce report rows into one aggregate per station in a single pass.

    For each row:

    - a rating between 1 and 5 is added to the station's running sum and count;
    - added amenities and payment methods are unioned into the amenity set;
    - a primary fuel tag that normalizes to "Petrol" and carries a price adds
      "Petrol" to the product set;
    - every key of the other-fuel-prices map is added to the product set as given.

    Args:
        reports: Report rows for the stations of the current search.

    Returns:
        A mapping from station id to its aggregate. Stations without any report
        are absent from the mapping.
    """
    accumulators: dict[int, _Accumulator] = {}

    for report in reports:
        acc = accumulators.setdefault(report.station_id, _Accumulator())

        if report.rating is not None and _MIN_RATING <= report.rating <= _MAX_RATING:
            acc.rating_sum += report.rating
            acc.rating_count += 1

        for item in (report.amenities_added or []) + (report.payment_methods_added or []):
            acc.amenities[item] = None

        if (
            report.fuel_type
            and report.price is not None
            and normalize_fuel_type(report.fuel_type) == _PETROL
        ):
            acc.products[_PETROL] = None

        for product in report.other_fuel_prices or {}:
            acc.products[product] = None

    logger.debug(f"Aggregated reports for {len(accumulators)} stations")
    return {station_id: acc.to_aggregate() for station_id, acc in accumulators.items()}


def enrich_stations(
    stations: Iterable[Station], aggregates: Mapping[int, StationAggregate]
) -> list[EnrichedStation]:
    """Join candidate stations with their aggregates.

    No station is dropped: one without reports gets a null rating and empty
    amenity and product lists.

    Args:
        stations: Candidate stations in fetch order.
        aggregates: Per-station aggregates keyed by station id.

    Returns:
        Enriched stations in the same order as the input.
    """
    empty = StationAggregate()
    enriched = []
    for station in stations:
        aggregate = aggregates.get(station.id, empty)
        enriched.append(
            EnrichedStation(
                **station.model_dump(include=_STATION_FIELDS),
                average_rating=aggregate.average_rating,
                amenities=list(aggregate.amenities),
                products=list(aggregate.products),
            )
        )
    return enriched
