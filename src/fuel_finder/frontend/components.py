"""Frontend components for the Fuel Finder application.

This module contains reusable UI components for the Streamlit interface,
including the station map, price summary and station cards.
"""

import urllib.parse
from collections.abc import Sequence
from typing import Any, cast

import folium
import pandas as pd
import streamlit as st
from streamlit_folium import st_folium

from fuel_finder.models import EnrichedStation, PriceSummary

CURRENCY = "₦"

_TABLE_COLUMNS = [
    "id",
    "name",
    "address",
    "distance_km",
    "latest_pms_price",
    "latest_ago_price",
    "latest_dpk_price",
    "latest_gas_price",
    "average_rating",
    "products",
    "amenities",
    "last_updated_at",
]


def format_price(price: float | None) -> str:
    """Format a per-litre price for display, e.g. "₦ 1,250/L"."""
    if price is None:
        return "N/A"
    return f"{CURRENCY} {price:,.0f}/L"


def format_distance(distance_meters: float) -> str:
    """Format a distance in kilometers with one decimal, e.g. "4.2km away"."""
    return f"{distance_meters / 1000:.1f}km away"


def stations_to_dataframe(stations: Sequence[EnrichedStation]) -> pd.DataFrame:
    """Flatten stations into a table for the raw data tab.

    Args:
        stations: Stations in display order.

    Returns:
        A DataFrame with one row per station; list fields are joined into
        comma-separated strings. Empty input gives an empty frame with the
        expected columns.
    """
    if not stations:
        return pd.DataFrame(columns=_TABLE_COLUMNS)

    df = pd.DataFrame([station.model_dump() for station in stations])
    df["distance_km"] = (df["distance_meters"] / 1000).round(2)
    for column in ("products", "amenities"):
        df[column] = df[column].apply(", ".join)
    return df[_TABLE_COLUMNS].reset_index(drop=True)


def build_station_map(
    center_lat: float,
    center_lng: float,
    stations: Sequence[EnrichedStation],
    zoom_start: int = 12,
) -> folium.Map:
    """Build a Folium map with a marker per station and one for the origin.

    Args:
        center_lat: Latitude of the search origin.
        center_lng: Longitude of the search origin.
        stations: Stations to plot.
        zoom_start: Initial zoom level. Defaults to 12.

    Returns:
        The populated map.
    """
    folium_map = folium.Map(location=[center_lat, center_lng], zoom_start=zoom_start)

    folium.Marker(
        location=[center_lat, center_lng],
        tooltip="Search location",
        icon=folium.Icon(color="blue", icon="user"),
    ).add_to(folium_map)

    for station in stations:
        popup = (
            f"<b>{station.name}</b><br>"
            f"Petrol: {format_price(station.latest_pms_price)}<br>"
            f"{format_distance(station.distance_meters)}"
        )
        folium.Marker(
            location=[station.latitude, station.longitude],
            tooltip=station.name,
            popup=folium.Popup(popup, max_width=250),
            icon=folium.Icon(color="orange", icon="tint"),
        ).add_to(folium_map)

    return folium_map


def display_station_map(
    center_lat: float, center_lng: float, stations: Sequence[EnrichedStation]
) -> dict[str, Any]:
    """Render the station map and return the map interaction data."""
    folium_map = build_station_map(center_lat, center_lng, stations)
    return cast(dict[str, Any], st_folium(folium_map, returned_objects=[], height=450))


def render_price_summary(summary: PriceSummary | None) -> None:
    """Show the lowest and highest petrol price side by side."""
    if summary is None:
        return

    col1, col2 = st.columns(2)
    with col1:
        st.caption("LOWEST")
        st.metric(summary.lowest.name, format_price(summary.lowest.latest_pms_price))
        st.caption(format_distance(summary.lowest.distance_meters))
    with col2:
        st.caption("HIGHEST")
        st.metric(summary.highest.name, format_price(summary.highest.latest_pms_price))
        st.caption(format_distance(summary.highest.distance_meters))


def render_station_card(station: EnrichedStation, is_favourite: bool, key_prefix: str) -> bool:
    """Display one station.

    Args:
        station: The station to show.
        is_favourite: Whether the user has marked the station as favourite.
        key_prefix: Prefix making widget keys unique on the page.

    Returns:
        True if the favourite button was clicked during this run.
    """
    safe_name = urllib.parse.quote_plus(f"{station.name} {station.address or ''}".strip())
    link = f"https://www.google.com/maps/search/{safe_name}"

    col1, col2, col3 = st.columns([3, 2, 1])
    with col1:
        st.markdown(f"**[{station.name}]({link})**")
        if station.address:
            st.caption(station.address)
        if station.amenities:
            st.caption(" · ".join(station.amenities))

    with col2:
        st.markdown(f"**Petrol**: {format_price(station.latest_pms_price)}")
        rating = f"{station.average_rating:.1f}" if station.average_rating is not None else "N/A"
        st.markdown(f"**Rating**: {rating}")
        st.caption(format_distance(station.distance_meters))

    with col3:
        label = "★" if is_favourite else "☆"
        return st.button(label, key=f"{key_prefix}-fav-{station.id}", help="Toggle favourite")
