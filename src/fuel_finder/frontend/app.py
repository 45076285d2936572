"""Main application module for Fuel Finder."""

import logging
import sys

import streamlit as st
from pydantic import ValidationError

from fuel_finder.backend.client import SupabaseBackend
from fuel_finder.backend.service import StationSearchService
from fuel_finder.config import Settings, get_settings
from fuel_finder.errors import ConfigError
from fuel_finder.frontend.components import (
    display_station_map,
    render_price_summary,
    render_station_card,
    stations_to_dataframe,
)
from fuel_finder.logger import configure_logging
from fuel_finder.models import FuelType, Location, PriceRange, SearchResult, SortMode
from fuel_finder.pipeline import price_bound_text, selected_product, selected_sort_mode
from fuel_finder.store import ALL_PRODUCTS, AMENITIES, PAYMENT_METHODS, FilterStore

logger = logging.getLogger(__name__)

_ALL_FUELS = "All"

# --- Configuration Loading ---


def load_config() -> Settings:
    """Loads the application configuration.

    Returns:
        Settings: The application settings object.

    Raises:
        ConfigError: If the configuration cannot be loaded.
    """
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigError(
            "Backend credentials are missing. Set BACKEND__URL and BACKEND__KEY.",
            details=str(e),
        ) from e


@st.cache_resource
def get_backend(_settings: Settings) -> SupabaseBackend:
    """Creates and caches the backend client shared by all sessions.

    Args:
        _settings: The application settings object. The underscore keeps
            Streamlit from hashing it.

    Returns:
        SupabaseBackend: The initialized client.
    """
    return SupabaseBackend(_settings.backend)


def _notify(title: str, message: str) -> None:
    st.toast(f"**{title}**: {message}")


def _init_session_state(settings: Settings, backend: SupabaseBackend) -> None:
    """Create the per-session filter store and search service on first run."""
    if "store" not in st.session_state:
        default = settings.search.default_location
        st.session_state.store = FilterStore(
            location=Location(
                name=default.name, latitude=default.latitude, longitude=default.longitude
            )
        )
    if "service" not in st.session_state:
        st.session_state.service = StationSearchService(
            backend, st.session_state.store, settings.search, notify=_notify
        )
    if "last_query" not in st.session_state:
        st.session_state.last_query = None
    if "user_id" not in st.session_state:
        st.session_state.user_id = None


# --- Sidebar ---


def render_location_inputs(store: FilterStore) -> None:
    """Renders the search origin inputs and writes changes to the store."""
    location = store.location
    st.subheader("Location")
    name = st.text_input("Name", location.name if location else "")
    lat = st.number_input(
        "Latitude", -90.0, 90.0, location.latitude if location else 0.0, format="%.4f"
    )
    lng = st.number_input(
        "Longitude", -180.0, 180.0, location.longitude if location else 0.0, format="%.4f"
    )
    new_location = Location(name=name or "Custom location", latitude=lat, longitude=lng)
    if new_location != location:
        store.set_location(new_location)


def render_filter_controls(store: FilterStore) -> None:
    """Renders the filter widgets and writes changes to the store."""
    filters = store.filters

    header_col, reset_col = st.columns([2, 1])
    header_col.subheader("Filters")
    if reset_col.button("Reset All"):
        store.reset_filters()
        st.rerun()

    sort_options = [mode.value for mode in SortMode]
    sort_by = st.radio(
        "Sort By",
        sort_options,
        index=sort_options.index(selected_sort_mode(filters).value),
        format_func=lambda value: value.replace("_", " ").title(),
        horizontal=True,
    )

    fuel_options = [_ALL_FUELS, *ALL_PRODUCTS]
    current_fuel = selected_product(filters) or _ALL_FUELS
    if current_fuel not in fuel_options:
        current_fuel = _ALL_FUELS
    fuel = st.selectbox("Fuel Type", fuel_options, index=fuel_options.index(current_fuel))

    col1, col2 = st.columns(2)
    price_min = col1.text_input("Min Price", price_bound_text(filters, "min"))
    price_max = col2.text_input("Max Price", price_bound_text(filters, "max"))
    st.caption("Choosing a fuel type and a price range sorts by cheapest price.")

    payment = st.multiselect(
        "Payment Method", PAYMENT_METHODS, [a for a in filters.amenities if a in PAYMENT_METHODS]
    )
    rating_options = [0, 1, 2, 3, 4, 5]
    current_rating = filters.rating if filters.rating in rating_options else 0
    rating = st.select_slider("Minimum Rating", options=rating_options, value=current_rating)
    amenities = st.multiselect(
        "Amenities", AMENITIES, [a for a in filters.amenities if a in AMENITIES]
    )

    changes = {
        "sort_by": SortMode(sort_by),
        "fuel_type": None if fuel == _ALL_FUELS else FuelType(fuel),
        "price_range": PriceRange(min=price_min, max=price_max),
        "rating": rating,
        "amenities": payment + amenities,
    }
    current = {key: getattr(filters, key) for key in changes}
    if changes != current:
        store.set_filters(**changes)


# --- Results ---


def display_results(service: StationSearchService, result: SearchResult) -> None:
    """Displays the price summary, the distance sections, a map and the raw table."""
    if result.error:
        st.error(result.error)
        return
    if not result.stations:
        st.warning("No stations match your criteria.")
        return

    render_price_summary(result.summary)

    tabs = st.tabs(["Nearest Stations", "Map View", "Raw Data"])

    with tabs[0]:
        for section in result.sections:
            st.markdown(f"#### Nearest station · {section.title}")
            for station in section.stations:
                clicked = render_station_card(
                    station, station.id in result.favourite_ids, key_prefix=section.title
                )
                if clicked:
                    service.toggle_favourite(
                        st.session_state.user_id, station.id, result.favourite_ids
                    )
                    st.rerun()
            st.divider()

    with tabs[1]:
        location = service.store.location
        if location is not None:
            display_station_map(location.latitude, location.longitude, result.stations)

    with tabs[2]:
        st.dataframe(stations_to_dataframe(result.stations), use_container_width=True)


def main() -> None:
    """Entry point for the application.

    Checks if running within Streamlit and relaunches if necessary.
    """
    if st.runtime.exists():
        _main_app_logic()
    else:
        from streamlit.web import cli as stcli

        sys.argv = ["streamlit", "run", __file__] + sys.argv[1:]
        sys.exit(stcli.main())


def _main_app_logic() -> None:
    """Core logic for the Streamlit application."""
    st.set_page_config(layout="wide", page_title="Fuel Finder")

    # --- Initialization ---
    try:
        settings = load_config()
    except ConfigError as e:
        configure_logging(level="INFO", format_string="%(levelname)s - %(message)s")
        logger.error(str(e))
        st.error(e.user_message)
        st.stop()

    configure_logging()
    st.title("Fuel Finder")

    backend = get_backend(settings)
    _init_session_state(settings, backend)
    store: FilterStore = st.session_state.store
    service: StationSearchService = st.session_state.service

    with st.sidebar:
        render_location_inputs(store)
        render_filter_controls(store)

    # Text inputs only commit on enter or blur, which debounces typing.
    term = st.text_input("Search stations...", "")

    # A new term or location needs a fetch; a filter change only needs a re-rank.
    query = (term, store.location)
    if query != st.session_state.last_query:
        with st.spinner("Searching..."):
            result = service.search(term, user_id=st.session_state.user_id)
        st.session_state.last_query = query
    else:
        result = service.refilter()

    display_results(service, result)


if __name__ == "__main__":
    main()
