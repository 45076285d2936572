"""Group stations into fixed-width distance bands for sectioned display."""

import math
from collections.abc import Sequence

from fuel_finder.models import DistanceSection, EnrichedStation

DEFAULT_BAND_WIDTH_KM = 4


def band_key(distance_meters: float, band_width_km: int = DEFAULT_BAND_WIDTH_KM) -> int:
    """Return the upper edge, in kilometers, of the band a distance falls into.

    A distance of exactly zero is put in the first band rather than a "0km" band.

    Args:
        distance_meters: Distance from the search origin.
        band_width_km: Width of each band.

    Returns:
        The band's upper edge, a multiple of ``band_width_km``.
    """
    key = math.ceil(distance_meters / 1000 / band_width_km) * band_width_km
    return key if key != 0 else band_width_km


def section_by_distance(
    stations: Sequence[EnrichedStation], band_width_km: int = DEFAULT_BAND_WIDTH_KM
) -> list[DistanceSection]:
    """Split stations into "Within Nkm" sections, nearest first.

    The input is re-sorted by distance regardless of any previous ordering; this
    is what gives the result list its nearest-first order. The sort is stable, so
    stations at equal distance keep their relative order.

    Args:
        stations: Filtered and sorted stations.
        band_width_km: Width of each band. Defaults to 4 km.

    Returns:
        Sections in ascending band order, each listing its stations by ascending
        distance. Empty input gives an empty list.
    """
    sections: dict[int, DistanceSection] = {}
    for station in sorted(stations, key=lambda s: s.distance_meters):
        key = band_key(station.distance_meters, band_width_km)
        if key not in sections:
            sections[key] = DistanceSection(title=f"Within {key}km")
        sections[key].stations.append(station)
    return list(sections.values())
