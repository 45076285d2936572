"""Frontend package for Fuel Finder."""

from .app import main
from .components import build_station_map, display_station_map, stations_to_dataframe

__all__ = ["main", "build_station_map", "display_station_map", "stations_to_dataframe"]
