"""Utility functions for the fuel_finder package."""

import math
import re
from datetime import datetime, timezone

_EARTH_RADIUS_METERS = 6371e3
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

# Leading number the way a browser's parseFloat reads it: "580abc" -> 580.
_LEADING_NUMBER_PATTERN = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Substring -> product name; checked in order.
_FUEL_ALIASES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("pms", "petrol"), "Petrol"),
    (("gas",), "Gas"),
    (("diesel", "ago"), "Diesel"),
    (("kerosine", "dpk"), "Kerosine"),
)


def normalize_fuel_type(tag: str) -> str:
    """Map a free-form fuel tag onto a product name.

    Matching is a case-insensitive substring test: "pms" or "petrol" gives
    "Petrol", "gas" gives "Gas", "diesel" or "ago" gives "Diesel", and
    "kerosine" or "dpk" gives "Kerosine". Anything else is returned with its
    first letter upper-cased.

    Args:
        tag: The fuel tag as stored on a report (e.g. "PMS", "diesel").

    Returns:
        The normalized product name.
    """
    lowered = tag.lower()
    for needles, product in _FUEL_ALIASES:
        if any(needle in lowered for needle in needles):
            return product
    return tag[:1].upper() + tag[1:]


def parse_price_bound(text: str | None) -> float | None:
    """Parse a user-typed price bound.

    Unparseable input is not an error, it simply means "no bound".

    Args:
        text: The raw text from a price field.

    Returns:
        The parsed number, or None when the text does not start with one.
    """
    if not isinstance(text, str):
        return None
    match = _LEADING_NUMBER_PATTERN.match(text)
    if not match:
        return None
    value = float(match.group(1))
    return value if math.isfinite(value) else None


def parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO-8601 timestamp, falling back to the Unix epoch.

    Naive timestamps are taken to be UTC so that they compare with aware ones.

    Args:
        value: The timestamp string, or None.

    Returns:
        An aware datetime; the epoch when the value is missing or malformed.
    """
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in meters.

    Args:
        lat1: Latitude of the first point in degrees.
        lon1: Longitude of the first point in degrees.
        lat2: Latitude of the second point in degrees.
        lon2: Longitude of the second point in degrees.

    Returns:
        The distance in meters.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a)) * _EARTH_RADIUS_METERS
