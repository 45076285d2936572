"""Exception types raised by the Fuel Finder package.

Each error carries a short message that is safe to show to end users and an
optional technical ``details`` string for logs.
"""

from dataclasses import dataclass


@dataclass(eq=False)
class FuelFinderError(Exception):
    """Base class for errors that should be presented to end users."""

    user_message: str
    details: str = ""

    def __str__(self) -> str:
        if self.details:
            return f"{self.user_message} - {self.details}"
        return self.user_message


class ConfigError(FuelFinderError):
    """Missing or invalid configuration (backend URL, API key, etc.)."""


class BackendError(FuelFinderError):
    """A call to the hosted backend failed (transport or server error)."""


class ReportSubmissionError(FuelFinderError):
    """A crowd-sourced report was rejected before reaching the backend."""
