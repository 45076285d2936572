"""Tests for report aggregation and station enrichment."""

from collections.abc import Callable

from fuel_finder.models import Report, Station, StationAggregate
from fuel_finder.pipeline.aggregation import aggregate_reports, enrich_stations


class TestAggregateReports:
    """Tests for reducing the report log into per-station aggregates."""

    def test_petrol_reports_without_ratings(self) -> None:
        """Test that PMS reports give a Petrol product and no rating."""
        reports = [
            Report(station_id=1, fuel_type="PMS", price=620),
            Report(station_id=1, fuel_type="PMS", price=600),
        ]
        aggregates = aggregate_reports(reports)

        assert aggregates[1].products == ["Petrol"]
        assert aggregates[1].average_rating is None

    def test_average_rating_ignores_out_of_range(self) -> None:
        """Test that only ratings between 1 and 5 count towards the average."""
        reports = [
            Report(station_id=1, rating=4),
            Report(station_id=1, rating=2),
            Report(station_id=1, rating=0),
            Report(station_id=1, rating=9),
            Report(station_id=1),
        ]
        assert aggregate_reports(reports)[1].average_rating == 3.0

    def test_amenities_and_payment_methods_are_unioned(self) -> None:
        """Test that amenity and payment additions merge without duplicates."""
        reports = [
            Report(station_id=2, amenities_added=["ATM", "Car Wash"]),
            Report(station_id=2, amenities_added=["ATM"], payment_methods_added=["Card"]),
        ]
        assert aggregate_reports(reports)[2].amenities == ["ATM", "Car Wash", "Card"]

    def test_product_set_rules(self) -> None:
        """Test which fuel tags and other-fuel keys end up in the product list."""
        reports = [
            # Primary tag without a price does not count.
            Report(station_id=3, fuel_type="PMS"),
            # Only Petrol is recorded from the primary tag.
            Report(station_id=3, fuel_type="AGO", price=900),
            # Other-fuel keys are recorded as given, not normalized.
            Report(station_id=3, other_fuel_prices={"Diesel": 950, "dpk": 1100}),
        ]
        assert aggregate_reports(reports)[3].products == ["Diesel", "dpk"]

        reports.append(Report(station_id=3, fuel_type="petrol", price=610))
        assert set(aggregate_reports(reports)[3].products) == {"Diesel", "dpk", "Petrol"}

    def test_reports_are_kept_per_station(self) -> None:
        """Test that aggregates do not leak between stations."""
        reports = [
            Report(station_id=1, rating=5, amenities_added=["ATM"]),
            Report(station_id=2, rating=1, fuel_type="PMS", price=600),
        ]
        aggregates = aggregate_reports(reports)

        assert aggregates[1] == StationAggregate(average_rating=5.0, amenities=["ATM"])
        assert aggregates[2] == StationAggregate(average_rating=1.0, products=["Petrol"])

    def test_no_reports(self) -> None:
        """Test that an empty log gives no aggregates."""
        assert aggregate_reports([]) == {}


class TestEnrichStations:
    """Tests for joining stations with their aggregates."""

    def test_join_keeps_every_station_in_order(
        self, make_station: Callable[..., Station]
    ) -> None:
        """Test that stations without reports are kept with empty aggregates."""
        stations = [make_station(2), make_station(1, latest_pms_price=600.0)]
        aggregates = {
            1: StationAggregate(average_rating=4.5, amenities=["ATM"], products=["Petrol"])
        }

        enriched = enrich_stations(stations, aggregates)

        assert [station.id for station in enriched] == [2, 1]
        assert enriched[0].average_rating is None
        assert enriched[0].amenities == []
        assert enriched[0].products == []
        assert enriched[1].average_rating == 4.5
        assert enriched[1].amenities == ["ATM"]
        assert enriched[1].products == ["Petrol"]
        assert enriched[1].latest_pms_price == 600.0

    def test_products_match_report_union(self, make_station: Callable[..., Station]) -> None:
        """Test that the enriched product list is exactly the union from the reports."""
        reports = [
            Report(station_id=1, fuel_type="PMS", price=600),
            Report(station_id=1, other_fuel_prices={"Gas": 1200}),
            Report(station_id=1, fuel_type="Gas", price=1300),
            Report(station_id=2, other_fuel_prices={"Kerosine": 1500}),
        ]
        enriched = enrich_stations(
            [make_station(1), make_station(2), make_station(3)], aggregate_reports(reports)
        )

        assert set(enriched[0].products) == {"Petrol", "Gas"}
        assert enriched[1].products == ["Kerosine"]
        assert enriched[2].products == []
