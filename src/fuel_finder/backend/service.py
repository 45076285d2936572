"""Module for the station search service business logic.

This module provides the core service class `StationSearchService` which orchestrates
the backend calls and the search pipeline (aggregation, enrichment, filtering,
sorting and distance sectioning) for one search session.
"""

import concurrent.futures
import itertools
import logging
import threading
from collections.abc import Callable
from typing import Any

from fuel_finder.backend.client import SupabaseBackend
from fuel_finder.config import SearchSettings
from fuel_finder.debounce import Debouncer
from fuel_finder.errors import BackendError, ReportSubmissionError
from fuel_finder.models import EnrichedStation, ReportSubmission, SearchResult, Station
from fuel_finder.pipeline import (
    aggregate_reports,
    enrich_stations,
    filter_and_sort,
    section_by_distance,
    summarize_prices,
)
from fuel_finder.store import FilterStore
from fuel_finder.utils import haversine_distance

# Create a module-level logger
logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], Any]


def _log_notification(title: str, message: str) -> None:
    logger.warning(f"{title}: {message}")


class StationSearchService:
    """Core business logic for one station search session.

    Searches read the location and criteria from the filter store, fetch
    candidates and favourites side by side, then fetch and aggregate the report
    log and run the pipeline. Every search gets a sequence number; a result that
    arrives after a newer one was displayed is marked stale and discarded.

    Attributes:
        backend (SupabaseBackend): Client for the hosted backend.
        store (FilterStore): Source of the location and filter criteria.
        settings (SearchSettings): Search tuning (radius, band width, etc.).
        notify (Notifier): Called with (title, message) for non-blocking alerts.
        current (SearchResult): The most recently displayed result.
    """

    def __init__(
        self,
        backend: SupabaseBackend,
        store: FilterStore,
        settings: SearchSettings | None = None,
        notify: Notifier | None = None,
    ) -> None:
        """Initialize the StationSearchService.

        Args:
            backend: Backend client used for all remote calls.
            store: Filter store holding the location and criteria.
            settings: Search settings; defaults are used when omitted.
            notify: Callback for user-facing alerts. Defaults to logging them.
        """
        self.backend = backend
        self.store = store
        self.settings = settings or SearchSettings()
        self.notify = notify or _log_notification
        self.current = SearchResult()

        self._enriched: list[EnrichedStation] = []
        self._favourite_ids: set[int] = set()
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()
        self._displayed_id = 0
        self._debouncer = Debouncer(self.settings.debounce_seconds, self.search)

    def search(self, term: str = "", user_id: str | None = None) -> SearchResult:
        """Run a full search for the term around the store's location.

        Args:
            term: Free-text search term; empty matches every station.
            user_id: Signed-in user whose favourites should be flagged.

        Returns:
            The search result. On a backend failure the result is empty and
            carries the error message; the user has already been notified.
        """
        with self._lock:
            request_id = next(self._sequence)

        location = self.store.location
        if location is None:
            logger.info("No search location set, skipping search")
            return SearchResult(request_id=request_id)

        logger.info(
            f"Search #{request_id}: term='{term}' near '{location.name}' "
            f"({location.latitude}, {location.longitude})"
        )

        try:
            stations, favourite_ids = self._fetch_candidates_and_favourites(
                term, location.latitude, location.longitude, user_id
            )
            reports = self.backend.fetch_reports([station.id for station in stations])
        except BackendError as error:
            empty = SearchResult(request_id=request_id, error=error.user_message)
            published = self._publish(empty, [], set())
            # Stale failures stay silent.
            if not published.stale:
                self.notify("Search Error", error.user_message)
            return published

        enriched = enrich_stations(stations, aggregate_reports(reports))
        result = self._build_result(request_id, enriched, favourite_ids)
        return self._publish(result, enriched, favourite_ids)

    def schedule_search(self, term: str = "", user_id: str | None = None) -> None:
        """Search once typing has paused for the configured debounce period.

        Each call restarts the wait, so a burst of keystrokes runs a single
        search for the last term. The result lands in :attr:`current`.

        Args:
            term: Free-text search term as typed so far.
            user_id: Signed-in user whose favourites should be flagged.
        """
        self._debouncer.trigger(term, user_id=user_id)

    def cancel_scheduled_search(self) -> None:
        """Drop a search still waiting for typing to pause."""
        self._debouncer.cancel()

    def refilter(self) -> SearchResult:
        """Re-apply the store's current criteria to the last fetched stations.

        No backend call is made; this is what runs when only the filters change.

        Returns:
            The updated current result.
        """
        with self._lock:
            result = self._build_result(self._displayed_id, self._enriched, self._favourite_ids)
            result.error = self.current.error
            self.current = result
            return result

    def toggle_favourite(
        self, user_id: str | None, station_id: int, favourite_ids: set[int]
    ) -> set[int]:
        """Add or remove a favourite station.

        Args:
            user_id: The signed-in user, or None when signed out.
            station_id: The station to toggle.
            favourite_ids: The favourites currently shown.

        Returns:
            The new favourite set, or the unchanged set when the user is signed
            out or the backend call failed.
        """
        if user_id is None:
            self.notify("Authentication Required", "Please sign in to add favourites.")
            return set(favourite_ids)

        updated = set(favourite_ids)
        try:
            if station_id in favourite_ids:
                updated.discard(station_id)
                self.backend.remove_favourite(user_id, station_id)
            else:
                updated.add(station_id)
                self.backend.add_favourite(user_id, station_id)
        except BackendError:
            action = "remove from" if station_id in favourite_ids else "add to"
            self.notify("Error", f"Could not {action} favourites.")
            return set(favourite_ids)

        with self._lock:
            self._favourite_ids = updated
            self.current.favourite_ids = set(updated)
        return updated

    def submit_report(
        self,
        submission: ReportSubmission,
        user_latitude: float,
        user_longitude: float,
        station_latitude: float,
        station_longitude: float,
    ) -> None:
        """Submit a report after checking the user is standing at the station.

        Args:
            submission: The report to submit.
            user_latitude: Latitude of the user's current position.
            user_longitude: Longitude of the user's current position.
            station_latitude: Latitude of the station.
            station_longitude: Longitude of the station.

        Raises:
            ReportSubmissionError: If the user is too far from the station.
            BackendError: If the insert fails.
        """
        distance = haversine_distance(
            user_latitude, user_longitude, station_latitude, station_longitude
        )
        max_distance = self.settings.report_max_distance_meters
        if distance > max_distance:
            raise ReportSubmissionError(
                f"You must be within {max_distance:.0f} meters to submit a report. "
                f"You are currently ~{round(distance)}m away.",
                details=f"station={submission.station_id} distance={distance:.1f}m",
            )
        self.backend.insert_report(submission)

    def _fetch_candidates_and_favourites(
        self, term: str, latitude: float, longitude: float, user_id: str | None
    ) -> tuple[list[Station], set[int]]:
        """Fetch candidate stations and the user's favourites concurrently.

        A failed favourites fetch is not fatal: the search goes on with no
        favourites flagged.

        Raises:
            BackendError: If the candidate fetch fails.
        """
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            stations_future = pool.submit(
                self.backend.search_stations,
                term,
                latitude,
                longitude,
                self.settings.radius_meters,
            )
            favourites_future = (
                pool.submit(self.backend.fetch_favourite_ids, user_id) if user_id else None
            )

            favourite_ids: set[int] = set()
            if favourites_future is not None:
                try:
                    favourite_ids = favourites_future.result()
                except BackendError as error:
                    logger.warning(f"Could not load favourites for user {user_id}: {error}")

            return stations_future.result(), favourite_ids

    def _build_result(
        self, request_id: int, enriched: list[EnrichedStation], favourite_ids: set[int]
    ) -> SearchResult:
        stations = filter_and_sort(enriched, self.store.filters)
        return SearchResult(
            request_id=request_id,
            stations=stations,
            sections=section_by_distance(stations, self.settings.band_width_km),
            summary=summarize_prices(stations),
            favourite_ids=set(favourite_ids),
        )

    def _publish(
        self, result: SearchResult, enriched: list[EnrichedStation], favourite_ids: set[int]
    ) -> SearchResult:
        """Make the result current unless a newer search was already displayed."""
        with self._lock:
            if result.request_id < self._displayed_id:
                logger.info(
                    f"Discarding stale search #{result.request_id} "
                    f"(#{self._displayed_id} already displayed)"
                )
                result.stale = True
                return result
            self._displayed_id = result.request_id
            self._enriched = enriched
            self._favourite_ids = set(favourite_ids)
            self.current = result
        logger.info(
            f"Search #{result.request_id}: {len(result.stations)} stations "
            f"in {len(result.sections)} sections"
        )
        return result
