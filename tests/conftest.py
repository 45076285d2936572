"""Shared fixtures for the fuel_finder tests."""

from collections.abc import Callable
from typing import Any

import pytest

from fuel_finder.models import EnrichedStation, Station


@pytest.fixture
def make_station() -> Callable[..., Station]:
    """Factory for candidate stations with sensible defaults."""

    def factory(station_id: int, distance: float = 1000.0, **fields: Any) -> Station:
        data: dict[str, Any] = {
            "id": station_id,
            "name": f"Station {station_id}",
            "latitude": 7.38,
            "longitude": 3.95,
            "distance_meters": distance,
        }
        data.update(fields)
        return Station(**data)

    return factory


@pytest.fixture
def make_enriched() -> Callable[..., EnrichedStation]:
    """Factory for enriched stations with sensible defaults."""

    def factory(station_id: int, distance: float = 1000.0, **fields: Any) -> EnrichedStation:
        data: dict[str, Any] = {
            "id": station_id,
            "name": f"Station {station_id}",
            "latitude": 7.38,
            "longitude": 3.95,
            "distance_meters": distance,
        }
        data.update(fields)
        return EnrichedStation(**data)

    return factory
