"""Watcher — runs every unit's checks now, then again on a fixed interval.

One cycle runs at a time, on whichever thread calls ``watch()``. ``stop()``
sets a one-shot event that the loop observes while waiting, so a cycle
that is already running always finishes first.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from .engine import Status, execute_check

if TYPE_CHECKING:
    from systemd_check.units.registry import Unit

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0  # seconds


class Notifier(Protocol):
    def notify(self, statuses: Sequence[Status]) -> int: ...


class Watcher:
    """Evaluates all (unit, check) pairs once per cycle and reports them."""

    def __init__(
        self,
        units: Sequence[Unit],
        notifier: Notifier | None = None,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.units = list(units)
        self.notifier = notifier
        self.interval = interval
        self.cycles = 0
        self._done = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._done.is_set()

    def run_once(self) -> list[Status]:
        """Run one full cycle and hand the results to the notifier."""
        statuses = [
            execute_check(check, unit.name)
            for unit in self.units
            for check in unit.checks
        ]
        self.cycles += 1

        for st in statuses:
            logger.info("Check %s", st)

        if statuses and self.notifier is not None:
            self.notifier.notify(statuses)

        return statuses

    def watch(self) -> None:
        """Block until stopped, running a cycle every ``interval`` seconds."""
        logger.info(
            "Watching %d units (interval=%ss)", len(self.units), self.interval,
        )
        self.run_once()
        while not self._done.wait(self.interval):
            self.run_once()
        logger.info("Shutdown complete")

    def stop(self) -> None:
        """Request the loop to exit. Safe to call more than once."""
        self._done.set()
