"""Shutdown coordinator — turns termination signals into a watcher stop."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGHUP, signal.SIGINT, signal.SIGTERM, signal.SIGQUIT)


class Stoppable(Protocol):
    def stop(self) -> None: ...


class ShutdownCoordinator:
    """Stops the watcher on the first termination signal; later ones are no-ops."""

    def __init__(self, watcher: Stoppable) -> None:
        self.watcher = watcher
        self.reason: str | None = None
        self._lock = threading.RLock()
        self._requested = False
        self._previous: dict[int, Any] = {}

    @property
    def requested(self) -> bool:
        return self._requested

    def install(self, signals: Iterable[signal.Signals] = SHUTDOWN_SIGNALS) -> None:
        """Register handlers. Must be called from the main thread."""
        for sig in signals:
            self._previous[sig] = signal.signal(sig, self._handle)
        logger.debug("Shutdown handlers installed for %s", [s.name for s in self._previous])

    def uninstall(self) -> None:
        """Restore whatever handlers were in place before ``install()``."""
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

    def request_stop(self, reason: str = "requested") -> bool:
        """Stop the watcher once. Returns False if a stop was already requested."""
        with self._lock:
            if self._requested:
                logger.debug("Shutdown already requested, ignoring %s", reason)
                return False
            self._requested = True
            self.reason = reason
        self.watcher.stop()
        return True

    def _handle(self, signum: int, _frame: Any) -> None:
        name = signal.Signals(signum).name
        logger.info("Got signal: %s", name)
        self.request_stop(name)
