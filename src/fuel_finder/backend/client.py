"""Supabase backend for the Fuel Finder application.

This module provides the SupabaseBackend class which handles all interactions
with the hosted backend: the station search procedure, the crowd-sourced report
log, and users' favourite stations.
"""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError
from supabase import Client, create_client

from fuel_finder.config import BackendSettings
from fuel_finder.errors import BackendError
from fuel_finder.models import Report, ReportSubmission, Station

logger = logging.getLogger(__name__)

REPORT_COLUMNS = (
    "station_id, rating, fuel_type, price, other_fuel_prices, "
    "amenities_added, payment_methods_added"
)


class SupabaseBackend:
    """Handles interactions with the Supabase project.

    Every method either returns parsed models or raises :class:`BackendError`
    chained to the underlying client exception.
    """

    def __init__(self, settings: BackendSettings, client: Client | None = None) -> None:
        """Initialize the backend client.

        Args:
            settings: BackendSettings with the project URL, key and object names.
            client: An existing Supabase client, mainly for tests. A new one is
                created from the settings when omitted.
        """
        self.settings = settings
        if client is not None:
            self.client = client
            return
        try:
            self.client = create_client(settings.url, settings.key)
        except Exception as exception:
            logger.error(f"Failed to initialize Supabase client: {exception}")
            raise BackendError(
                "Could not connect to the server.", details=str(exception)
            ) from exception

    def search_stations(
        self, term: str, latitude: float, longitude: float, radius_meters: float
    ) -> list[Station]:
        """Fetch candidate stations around an origin.

        Args:
            term: Free-text search term; an empty string matches every station.
            latitude: Latitude of the search origin.
            longitude: Longitude of the search origin.
            radius_meters: Search radius in meters.

        Returns:
            Stations with their server-computed distance, in no guaranteed order.

        Raises:
            BackendError: If the procedure call fails or returns malformed rows.
        """
        params = {
            "search_term": term,
            "target_latitude": latitude,
            "target_longitude": longitude,
            "search_radius_meters": radius_meters,
        }
        rows = self._execute(
            f"rpc {self.settings.stations_rpc}",
            lambda: self.client.rpc(self.settings.stations_rpc, params).execute(),
        )
        stations = self._parse(rows, Station, "station")
        logger.info(
            f"Fetched {len(stations)} stations for term='{term}' at ({latitude}, {longitude})"
        )
        return stations

    def fetch_reports(self, station_ids: Iterable[int]) -> list[Report]:
        """Fetch every report for the given stations in a single call.

        Args:
            station_ids: Stations to fetch reports for.

        Returns:
            The raw report rows. An empty id set returns an empty list without
            contacting the backend.

        Raises:
            BackendError: If the query fails or returns malformed rows.
        """
        ids = sorted(set(station_ids))
        if not ids:
            return []
        rows = self._execute(
            f"select {self.settings.reports_table}",
            lambda: self.client.table(self.settings.reports_table)
            .select(REPORT_COLUMNS)
            .in_("station_id", ids)
            .execute(),
        )
        reports = self._parse(rows, Report, "report")
        logger.info(f"Fetched {len(reports)} reports for {len(ids)} stations")
        return reports

    def insert_report(self, submission: ReportSubmission) -> None:
        """Append a report to the report log.

        Raises:
            BackendError: If the insert fails.
        """
        self._execute(
            f"insert {self.settings.reports_table}",
            lambda: self.client.table(self.settings.reports_table)
            .insert(submission.to_row())
            .execute(),
        )
        logger.info(f"Report submitted for station {submission.station_id}")

    def fetch_favourite_ids(self, user_id: str) -> set[int]:
        """Return the ids of the stations a user marked as favourite.

        Raises:
            BackendError: If the query fails.
        """
        rows = self._execute(
            f"select {self.settings.favourites_table}",
            lambda: self.client.table(self.settings.favourites_table)
            .select("station_id")
            .eq("user_id", user_id)
            .execute(),
        )
        return {int(row["station_id"]) for row in rows}

    def add_favourite(self, user_id: str, station_id: int) -> None:
        """Mark a station as a favourite of the user.

        Raises:
            BackendError: If the insert fails.
        """
        self._execute(
            f"insert {self.settings.favourites_table}",
            lambda: self.client.table(self.settings.favourites_table)
            .insert({"user_id": user_id, "station_id": station_id})
            .execute(),
        )

    def remove_favourite(self, user_id: str, station_id: int) -> None:
        """Remove a station from the user's favourites.

        Raises:
            BackendError: If the delete fails.
        """
        self._execute(
            f"delete {self.settings.favourites_table}",
            lambda: self.client.table(self.settings.favourites_table)
            .delete()
            .match({"user_id": user_id, "station_id": station_id})
            .execute(),
        )

    def _execute(self, operation: str, call: Any) -> list[dict[str, Any]]:
        """Run a query builder call and return its rows.

        Args:
            operation: Short description used in log and error messages.
            call: Zero-argument callable performing the request.

        Returns:
            The response rows; an empty list when the response carries none.

        Raises:
            BackendError: Wrapping any exception raised by the client.
        """
        try:
            response = call()
        except Exception as exception:
            logger.error(f"Backend call '{operation}' failed: {exception}")
            raise BackendError(
                "Could not reach the server. Please try again.", details=str(exception)
            ) from exception
        return list(response.data or [])

    @staticmethod
    def _parse(rows: list[dict[str, Any]], model: Any, label: str) -> list[Any]:
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as exception:
            logger.error(f"Malformed {label} row from backend: {exception}")
            raise BackendError(
                "The server returned unexpected data.", details=str(exception)
            ) from exception
