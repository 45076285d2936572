"""Pydantic models for the fuel_finder package.

This module defines the data models used throughout the application: stations as
returned by the search procedure, raw crowd-sourced reports, the per-station
aggregates derived from them, and the filter criteria that drive ranking.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FuelType(str, Enum):
    """Fuel products a user can filter and price-rank by."""

    PETROL = "Petrol"
    DIESEL = "Diesel"
    GAS = "Gas"
    KEROSINE = "Kerosine"

    @property
    def price_field(self) -> str:
        """Name of the station snapshot field holding this product's latest price."""
        return _PRICE_FIELDS[self]


_PRICE_FIELDS = {
    FuelType.PETROL: "latest_pms_price",
    FuelType.DIESEL: "latest_ago_price",
    FuelType.GAS: "latest_gas_price",
    FuelType.KEROSINE: "latest_dpk_price",
}


class SortMode(str, Enum):
    """Ordering requested by the user when no price ranking applies."""

    DISTANCE = "distance"
    LAST_UPDATE = "last_update"


class Location(BaseModel):
    """A named search origin."""

    name: str = Field(..., description="Display name of the location.")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class Station(BaseModel):
    """A candidate station returned by the station search procedure.

    Attributes:
        id: Unique station identifier.
        name: Station name.
        address: Street address, when known.
        latitude: Latitude of the station.
        longitude: Longitude of the station.
        distance_meters: Server-computed distance from the search origin.
        latest_pms_price: Latest reported petrol (PMS) price.
        latest_ago_price: Latest reported diesel (AGO) price.
        latest_dpk_price: Latest reported kerosine (DPK) price.
        latest_gas_price: Latest reported gas price.
        last_updated_at: ISO-8601 timestamp of the latest price update.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    address: str | None = None
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    distance_meters: float = Field(..., ge=0.0)
    latest_pms_price: float | None = None
    latest_ago_price: float | None = None
    latest_dpk_price: float | None = None
    latest_gas_price: float | None = None
    last_updated_at: str | None = None

    def price_for(self, fuel_type: FuelType) -> float | None:
        """Return the snapshot price for a fuel type, or None if nobody reported one."""
        return getattr(self, fuel_type.price_field)

    def to_dict(self) -> dict[str, Any]:
        """Convert the model to a plain dictionary.

        Returns:
            dict[str, Any]: A dictionary representation of the station.
        """
        return self.model_dump()


class Report(BaseModel):
    """A single crowd-sourced observation about a station.

    Rows are taken as the backend returns them. Ratings outside 1-5 are kept
    here and ignored during aggregation.
    """

    model_config = ConfigDict(extra="ignore")

    station_id: int
    rating: int | None = None
    fuel_type: str | None = None
    price: float | None = None
    other_fuel_prices: dict[str, float | None] | None = None
    amenities_added: list[str] | None = None
    payment_methods_added: list[str] | None = None


class StationAggregate(BaseModel):
    """Summary of every report fetched for one station in the current search."""

    average_rating: float | None = None
    amenities: list[str] = Field(default_factory=list)
    products: list[str] = Field(default_factory=list)


class EnrichedStation(Station):
    """A station joined with its report aggregate."""

    average_rating: float | None = None
    amenities: list[str] = Field(default_factory=list)
    products: list[str] = Field(default_factory=list)


class PriceRange(BaseModel):
    """Free-text price bounds as typed by the user; empty means unbounded."""

    min: str = ""
    max: str = ""


class FilterCriteria(BaseModel):
    """Filter and sort options applied to the enriched station list.

    Attributes:
        price_range: Minimum and maximum price, as typed.
        fuel_type: Product the station must sell; also scopes the price range.
        rating: Minimum average rating, 0 disables the check.
        amenities: Amenities and payment methods a station must offer.
        sort_by: Ordering used when no price ranking applies.
    """

    price_range: PriceRange = Field(default_factory=PriceRange)
    fuel_type: FuelType | None = None
    rating: int = Field(0, ge=0, le=5)
    amenities: list[str] = Field(default_factory=list)
    sort_by: SortMode = SortMode.DISTANCE


class DistanceSection(BaseModel):
    """Stations that fall within one distance band."""

    title: str
    stations: list[EnrichedStation] = Field(default_factory=list)


class PriceSummary(BaseModel):
    """Cheapest and most expensive petrol stations in a result list."""

    lowest: EnrichedStation
    highest: EnrichedStation


class SearchResult(BaseModel):
    """Everything a search screen needs to render one search.

    Attributes:
        request_id: Sequence number of the search that produced this result.
        stations: Enriched stations after filtering and sorting.
        sections: The same stations grouped into distance bands.
        summary: Lowest and highest petrol price, when there is a spread.
        favourite_ids: Station ids the current user marked as favourite.
        error: User-facing error message when the search failed.
        stale: True when a newer search was already displayed.
    """

    request_id: int = 0
    stations: list[EnrichedStation] = Field(default_factory=list)
    sections: list[DistanceSection] = Field(default_factory=list)
    summary: PriceSummary | None = None
    favourite_ids: set[int] = Field(default_factory=set)
    error: str | None = None
    stale: bool = False


class ReportFuelTag(str, Enum):
    """Fuel tags a user can attach to a submitted report."""

    PMS = "PMS"
    AGO = "AGO"
    DPK = "DPK"


class ReportSubmission(BaseModel):
    """A new report as entered on the submission screen."""

    station_id: int
    user_id: str
    fuel_type: ReportFuelTag
    price: float = Field(..., gt=0)
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Return the row inserted into the report table."""
        row = self.model_dump(mode="json")
        row["notes"] = self.notes or None
        return row
