"""Configuration settings for the Fuel Finder application.

This module defines the configuration settings for the Fuel Finder application, including
backend connection details and search tuning. It uses Pydantic's BaseSettings for
environment variable management.
"""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseModel):
    """Supabase connection details.

    Attributes:
        url: The Supabase project URL.
        key: The anonymous (public) API key for the project.
        stations_rpc: Name of the remote procedure returning nearby stations.
        reports_table: Table holding the crowd-sourced report log.
        favourites_table: Table linking users to their favourite stations.
    """

    url: str = Field(..., description="Supabase project URL")
    key: str = Field(..., description="Supabase anonymous API key")
    stations_rpc: str = Field("get_stations_for_app", description="Station search procedure")
    reports_table: str = Field("price_reports", description="Report log table")
    favourites_table: str = Field("favourite_stations", description="Favourite stations table")


class DefaultLocationSettings(BaseModel):
    """Fallback search origin used when the user has not picked one."""

    name: str = Field("Ibadan", description="Display name of the fallback location")
    latitude: float = Field(7.3776, ge=-90.0, le=90.0)
    longitude: float = Field(3.9470, ge=-180.0, le=180.0)


class SearchSettings(BaseModel):
    """Settings for the station search pipeline.

    Attributes:
        radius_meters: Radius passed to the station search procedure.
        debounce_seconds: Quiet period before a typed query triggers a search.
        band_width_km: Width of each distance band in the sectioned results.
        report_max_distance_meters: How close a user must be to report on a station.
        max_workers: Thread pool size for fetches issued side by side.
        default_location: Origin used before a location is chosen.
    """

    radius_meters: float = Field(50_000, gt=0, description="Search radius in meters")
    debounce_seconds: float = Field(0.4, ge=0, description="Query debounce period in seconds")
    band_width_km: int = Field(4, gt=0, description="Distance band width in kilometers")
    report_max_distance_meters: float = Field(
        200, gt=0, description="Maximum distance from a station to submit a report"
    )
    max_workers: int = Field(2, ge=1, description="Concurrent fetch workers")
    default_location: DefaultLocationSettings = Field(default_factory=DefaultLocationSettings)


class LoggingSettings(BaseModel):
    """Logging configuration settings.

    Attributes:
        level: The logging level (e.g., INFO, DEBUG).
        format: The log message format string.
    """

    level: str = Field("INFO", description="Logging level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )


class Settings(BaseSettings):
    """Global application settings.

    This class loads settings from environment variables (``BACKEND__URL``,
    ``SEARCH__RADIUS_METERS`` and so on) and provides structured access to them.

    Attributes:
        backend: Backend connection settings.
        search: Search pipeline settings.
        logging: Logging configuration settings.
    """

    backend: BackendSettings
    search: SearchSettings = Field(default_factory=SearchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the settings.

    Returns:
        The global Settings instance.
    """
    return Settings()
