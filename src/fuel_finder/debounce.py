"""Debounce helper for search-as-you-type input."""

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Delay a callback until input has been quiet for a given period.

    Every call to :meth:`trigger` restarts the timer, so a burst of keystrokes
    results in a single callback with the arguments of the last one.

    Attributes:
        delay: Quiet period in seconds.
        callback: The function to call once the input settles.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]) -> None:
        self.delay = delay
        self.callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: tuple[tuple[Any, ...], dict[str, Any]] | None = None

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """Schedule the callback, replacing any call still waiting."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop the waiting call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    def flush(self) -> None:
        """Run the waiting call now instead of after the quiet period."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
        self._fire()

    @property
    def pending(self) -> bool:
        """True while a call is waiting for the quiet period to end."""
        return self._pending is not None

    def _fire(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, None
            self._timer = None
        if pending is None:
            return
        args, kwargs = pending
        logger.debug("Debounce period elapsed, running callback")
        self.callback(*args, **kwargs)
