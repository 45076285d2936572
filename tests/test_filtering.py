"""Tests for the filter and sort engine."""

from collections.abc import Callable

import pytest

from fuel_finder.models import EnrichedStation, FilterCriteria, FuelType, PriceRange, SortMode
from fuel_finder.pipeline.filtering import (
    filter_and_sort,
    filter_stations,
    is_price_range_active,
    sort_stations,
    summarize_prices,
)

Factory = Callable[..., EnrichedStation]


def _ids(stations: list[EnrichedStation]) -> list[int]:
    return [station.id for station in stations]


class TestFilterStations:
    """Tests for the filtering predicate."""

    def test_default_criteria_keep_everything(self, make_enriched: Factory) -> None:
        """Test that the default criteria filter nothing out."""
        stations = [make_enriched(1), make_enriched(2)]
        assert _ids(filter_stations(stations, FilterCriteria())) == [1, 2]

    def test_max_price_for_petrol(self, make_enriched: Factory) -> None:
        """Test excluding a station priced above the maximum."""
        stations = [
            make_enriched(1, distance=500, latest_pms_price=600, products=["Petrol"]),
            make_enriched(2, distance=4200, latest_pms_price=550, products=["Petrol"]),
        ]
        criteria = FilterCriteria(
            fuel_type=FuelType.PETROL, price_range=PriceRange(min="", max="580")
        )
        assert _ids(filter_stations(stations, criteria)) == [2]

    def test_fuel_type_requires_product(self, make_enriched: Factory) -> None:
        """Test that a selected fuel type must be among the station's products."""
        stations = [
            make_enriched(1, products=["Petrol"]),
            make_enriched(2, products=["Diesel"]),
            make_enriched(3),
        ]
        criteria = FilterCriteria(fuel_type=FuelType.DIESEL)
        assert _ids(filter_stations(stations, criteria)) == [2]

    def test_price_range_uses_mapped_field(self, make_enriched: Factory) -> None:
        """Test that each fuel type is checked against its own snapshot price."""
        stations = [
            make_enriched(1, products=["Kerosine"], latest_dpk_price=1000, latest_pms_price=5),
            make_enriched(2, products=["Kerosine"], latest_dpk_price=1500),
            make_enriched(3, products=["Kerosine"]),
        ]
        criteria = FilterCriteria(
            fuel_type=FuelType.KEROSINE, price_range=PriceRange(min="900", max="1200")
        )
        # Station 3 has no kerosine price and is excluded.
        assert _ids(filter_stations(stations, criteria)) == [1]

    def test_price_range_without_fuel_type_is_ignored(self, make_enriched: Factory) -> None:
        """Test that a price range only applies together with a fuel type."""
        stations = [make_enriched(1, latest_pms_price=900), make_enriched(2)]
        criteria = FilterCriteria(price_range=PriceRange(max="500"))
        assert _ids(filter_stations(stations, criteria)) == [1, 2]

    def test_malformed_bounds_are_ignored(self, make_enriched: Factory) -> None:
        """Test that unparseable price text means no bound rather than an error."""
        stations = [
            make_enriched(1, products=["Petrol"], latest_pms_price=600),
            make_enriched(2, products=["Petrol"]),
        ]
        criteria = FilterCriteria(
            fuel_type=FuelType.PETROL, price_range=PriceRange(min="cheap", max="n/a")
        )
        assert not is_price_range_active(criteria)
        # Without an active range, stations with no price are not excluded.
        assert _ids(filter_stations(stations, criteria)) == [1, 2]

    def test_minimum_rating(self, make_enriched: Factory) -> None:
        """Test that a null rating never satisfies a minimum above zero."""
        stations = [
            make_enriched(1, average_rating=2.5),
            make_enriched(2, average_rating=None),
            make_enriched(3, average_rating=4.0),
        ]
        assert _ids(filter_stations(stations, FilterCriteria(rating=3))) == [3]
        assert _ids(filter_stations(stations, FilterCriteria(rating=0))) == [1, 2, 3]

    @pytest.mark.parametrize("rating", [1, 2, 3, 4, 5])
    def test_unrated_stations_fail_any_minimum(self, make_enriched: Factory, rating: int) -> None:
        """Test that stations without ratings are excluded for every minimum."""
        assert filter_stations([make_enriched(1)], FilterCriteria(rating=rating)) == []

    def test_required_amenities(self, make_enriched: Factory) -> None:
        """Test that every required amenity must be present."""
        stations = [
            make_enriched(1, amenities=["ATM", "Car Wash", "Card"]),
            make_enriched(2, amenities=["ATM"]),
        ]
        criteria = FilterCriteria(amenities=["ATM", "Card"])
        assert _ids(filter_stations(stations, criteria)) == [1]

    def test_unvalidated_fuel_type_string(self, make_enriched: Factory) -> None:
        """Test that a plain string fuel type written without validation still works."""
        stations = [make_enriched(1, products=["Gas"]), make_enriched(2, products=["Petrol"])]
        criteria = FilterCriteria().model_copy(update={"fuel_type": "Gas"})
        assert _ids(filter_stations(stations, criteria)) == [1]

    @pytest.mark.parametrize("tag", ["PMS", "petrol", "Premium Motor Spirit (PMS)"])
    def test_free_form_fuel_tag_is_normalized(self, make_enriched: Factory, tag: str) -> None:
        """Test that report-style fuel tags select the matching product."""
        stations = [
            make_enriched(1, products=["Petrol"], latest_pms_price=600),
            make_enriched(2, products=["Petrol"], latest_pms_price=550),
            make_enriched(3, products=["Diesel"], latest_ago_price=900),
        ]
        criteria = FilterCriteria().model_copy(
            update={"fuel_type": tag, "price_range": PriceRange(max="620")}
        )
        assert _ids(filter_and_sort(stations, criteria)) == [2, 1]

    def test_unknown_fuel_name_matches_products_only(self, make_enriched: Factory) -> None:
        """Test that a fuel with no price column filters on products and never prices."""
        stations = [make_enriched(1, products=["Lubricant"]), make_enriched(2, products=["Gas"])]
        criteria = FilterCriteria().model_copy(update={"fuel_type": "Lubricant"})
        assert _ids(filter_and_sort(stations, criteria)) == [1]

        priced = criteria.model_copy(update={"price_range": PriceRange(max="900")})
        assert filter_and_sort(stations, priced) == []

    def test_unreadable_criteria_are_ignored(self, make_enriched: Factory) -> None:
        """Test that unreadable rating, sort and range values disable those criteria."""
        stations = [make_enriched(1, average_rating=2.0), make_enriched(2)]
        criteria = FilterCriteria().model_copy(
            update={"rating": "four", "sort_by": "newest", "price_range": None}
        )
        assert _ids(filter_and_sort(stations, criteria)) == [1, 2]
        assert not is_price_range_active(criteria)


class TestSortStations:
    """Tests for the ordering rules."""

    def test_price_sort_when_fuel_and_range_active(self, make_enriched: Factory) -> None:
        """Test cheapest-first ordering with missing prices last."""
        stations = [
            make_enriched(1, latest_ago_price=900),
            make_enriched(2),
            make_enriched(3, latest_ago_price=850),
        ]
        criteria = FilterCriteria(
            fuel_type=FuelType.DIESEL,
            price_range=PriceRange(min="1"),
            sort_by=SortMode.LAST_UPDATE,
        )
        assert _ids(sort_stations(stations, criteria)) == [3, 1, 2]

    def test_last_update_sort(self, make_enriched: Factory) -> None:
        """Test newest-first ordering with missing timestamps treated as the epoch."""
        stations = [
            make_enriched(1, last_updated_at="2024-01-01T08:00:00+00:00"),
            make_enriched(2),
            make_enriched(3, last_updated_at="2024-03-01T08:00:00+00:00"),
        ]
        criteria = FilterCriteria(sort_by=SortMode.LAST_UPDATE)
        assert _ids(sort_stations(stations, criteria)) == [3, 1, 2]

    def test_distance_sort_keeps_fetch_order(self, make_enriched: Factory) -> None:
        """Test that "distance" does not reorder at this stage.

        Nearest-first ordering is applied by the distance sectioner instead.
        """
        stations = [make_enriched(1, distance=9000), make_enriched(2, distance=100)]
        criteria = FilterCriteria(sort_by=SortMode.DISTANCE)
        assert _ids(sort_stations(stations, criteria)) == [1, 2]

    def test_filter_and_sort_is_idempotent(self, make_enriched: Factory) -> None:
        """Test that running the engine twice gives identical output."""
        stations = [
            make_enriched(1, products=["Petrol"], latest_pms_price=640, average_rating=4.0),
            make_enriched(2, products=["Petrol"], latest_pms_price=600, average_rating=3.0),
            make_enriched(3, products=["Diesel"], latest_ago_price=900),
        ]
        criteria = FilterCriteria(
            fuel_type=FuelType.PETROL, price_range=PriceRange(max="700"), rating=3
        )

        first = filter_and_sort(stations, criteria)
        second = filter_and_sort(stations, criteria)

        assert first == second
        assert _ids(first) == [2, 1]
        # Input is left untouched.
        assert _ids(stations) == [1, 2, 3]


class TestSummarizePrices:
    """Tests for the lowest/highest petrol price summary."""

    def test_summary(self, make_enriched: Factory) -> None:
        """Test that the cheapest and dearest petrol stations are picked."""
        stations = [
            make_enriched(1, latest_pms_price=620),
            make_enriched(2, latest_pms_price=580),
            make_enriched(3),
            make_enriched(4, latest_pms_price=700),
        ]
        summary = summarize_prices(stations)

        assert summary is not None
        assert summary.lowest.id == 2
        assert summary.highest.id == 4

    def test_needs_two_priced_stations(self, make_enriched: Factory) -> None:
        """Test that no summary is given without a price spread."""
        assert summarize_prices([]) is None
        assert summarize_prices([make_enriched(1, latest_pms_price=600), make_enriched(2)]) is None
