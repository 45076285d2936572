"""Filter state store shared between the filter screen and the search pipeline.

The store holds the current search location and filter criteria and notifies
subscribers after every change. It performs no validation: whatever is written is
read back as-is, so consumers must tolerate things like non-numeric price text.
"""

from collections.abc import Callable
from typing import Any

from fuel_finder.models import FilterCriteria, FuelType, Location, PriceRange
from fuel_finder.pipeline.filtering import price_bound_text

AMENITIES = [
    "Supermarket",
    "Restaurant",
    "Membership Required",
    "Car Wash",
    "ATM",
    "Cash Discount",
    "Air Pump",
    "Restrooms",
    "Oil",
    "Full Service",
    "Car Repairs",
    "Open 24/7",
    "Power",
]
PAYMENT_METHODS = ["Cash", "Card", "Transfer"]
ALL_PRODUCTS = [fuel.value for fuel in FuelType]

Listener = Callable[["FilterStore"], Any]


class FilterStore:
    """In-memory store for the search location and filter criteria.

    Attributes:
        location: The current search origin, or None before one is chosen.
        filters: The current filter criteria.
    """

    def __init__(
        self, location: Location | None = None, filters: FilterCriteria | None = None
    ) -> None:
        self.location = location
        self.filters = filters or FilterCriteria()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with the store after every change.

        Args:
            listener: Callable receiving this store.

        Returns:
            A function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_location(self, location: Location | None) -> None:
        """Replace the search location."""
        self.location = location
        self._notify()

    def set_filters(self, **changes: Any) -> None:
        """Shallow-merge changes into the criteria; unlisted keys are kept.

        Args:
            **changes: Criteria fields to overwrite, e.g. ``rating=3``.
        """
        self.filters = self.filters.model_copy(update=changes)
        self._notify()

    def reset_filters(self) -> None:
        """Restore the default criteria: no bounds, fuel, rating or amenities, sort by distance."""
        self.filters = FilterCriteria()
        self._notify()

    def set_price_bound(self, bound: str, value: str) -> None:
        """Overwrite the "min" or "max" price text, keeping the other bound."""
        self.set_filters(
            price_range=PriceRange(
                min=value if bound == "min" else price_bound_text(self.filters, "min"),
                max=value if bound == "max" else price_bound_text(self.filters, "max"),
            )
        )

    def toggle_amenity(self, amenity: str) -> None:
        """Add the amenity to the required set, or remove it if already there."""
        current = list(self.filters.amenities)
        if amenity in current:
            current.remove(amenity)
        else:
            current.append(amenity)
        self.set_filters(amenities=current)

    def select_rating(self, rating: int) -> None:
        """Set the minimum rating; picking the active value again clears it."""
        self.set_filters(rating=0 if self.filters.rating == rating else rating)

    def toggle_fuel_type(self, fuel_type: FuelType | str) -> None:
        """Select a fuel type; picking the active one again clears it."""
        self.set_filters(fuel_type=None if self.filters.fuel_type == fuel_type else fuel_type)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
