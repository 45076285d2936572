"""Logging configuration for the application.

This module sets up the logging configuration for the application.
"""

import logging
import sys

from pydantic import ValidationError

from .config import LoggingSettings, get_settings

# HTTP stack used by the Supabase client; chatty at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3")


def configure_logging(level: str | None = None, format_string: str | None = None) -> None:
    """Configure logging for the application.

    Arguments passed to the function take priority, then the values from
    configuration. When configuration cannot be loaded (for example the backend
    credentials are missing) the logging defaults are used instead.

    Args:
        level: Optional logging level (e.g., "DEBUG", "INFO").
        format_string: Optional logging format string.
    """
    if level is None or format_string is None:
        try:
            logging_settings = get_settings().logging
        except ValidationError:
            logging_settings = LoggingSettings()
        level = level or logging_settings.level
        format_string = format_string or logging_settings.format

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=format_string,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info("Logging configured with level: %s", level)

