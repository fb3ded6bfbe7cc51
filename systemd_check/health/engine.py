"""Health check engine — status model, check types, and their dispatcher.

Check types are registered under the ``(key, value)`` pair that enables them
in a unit file's ``[X-Check]`` section, e.g. ``Systemd=status``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import partial
from typing import TYPE_CHECKING

from systemd_check.systemd.client import SystemdClient, SystemdError

if TYPE_CHECKING:
    from systemd_check.config import Settings

logger = logging.getLogger(__name__)


# ── Models ───────────────────────────────────────────────────────────────────


class StatusCode(IntEnum):
    OK = 0
    WARN = 1
    CRITICAL = 2


@dataclass
class Status:
    """Result of a single check evaluation."""

    unit: str
    host: str
    check_id: str
    code: StatusCode = StatusCode.OK
    description: str = ""

    def __str__(self) -> str:
        return (
            f'id="{self.check_id}" unit="{self.unit}" code={int(self.code)} '
            f'message="{self.description}" host="{self.host}"'
        )


# ── Checks ───────────────────────────────────────────────────────────────────


class Check(ABC):
    """A capability that evaluates one unit and always returns a Status."""

    check_id: str = ""

    def __init__(self, hostname: str) -> None:
        self.hostname = hostname

    def new_status(self, unit_name: str) -> Status:
        return Status(unit=unit_name, host=self.hostname, check_id=self.check_id)

    @abstractmethod
    def get(self, unit_name: str) -> Status:
        """Evaluate ``unit_name``. Must not raise."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.check_id})"


class SystemdStatusCheck(Check):
    """Reports whether systemd has the unit loaded and active."""

    check_id = "systemd.unit.check_status"

    def __init__(
        self,
        hostname: str,
        connect: Callable[[], SystemdClient] = SystemdClient.connect,
    ) -> None:
        super().__init__(hostname)
        self._connect = connect

    def get(self, unit_name: str) -> Status:
        status = self.new_status(unit_name)

        try:
            conn = self._connect()
        except SystemdError as e:
            status.code = StatusCode.CRITICAL
            status.description = f"systemd connect - {e}"
            return status

        with conn:
            try:
                units = conn.list_units()
            except SystemdError as e:
                status.code = StatusCode.CRITICAL
                status.description = f"systemd list-units - {e}"
                return status

        for unit in units:
            if unit.name != unit_name:
                continue
            if unit.active_state == "failed":
                status.code = StatusCode.CRITICAL
                status.description = f"Unit {unit_name} in failed state"
            elif unit.active_state != "active":
                status.code = StatusCode.WARN
                status.description = f"Unit {unit_name} in {unit.active_state} state"
            elif unit.load_state != "loaded":
                status.code = StatusCode.WARN
                status.description = f"Unit {unit_name} in {unit.load_state} state"
            else:
                status.code = StatusCode.OK
                status.description = f"Unit {unit_name} in active state"
            return status

        status.code = StatusCode.CRITICAL
        status.description = f"Unit {unit_name} not found"
        return status


# ── Dispatcher ───────────────────────────────────────────────────────────────

CheckFactory = Callable[["Settings"], Check]

# (X-Check key, value) -> factory
CHECK_TYPES: dict[tuple[str, str], CheckFactory] = {}


def register_check(key: str, value: str) -> Callable[[CheckFactory], CheckFactory]:
    """Register a check factory under its ``[X-Check] key=value`` declaration."""

    def decorator(factory: CheckFactory) -> CheckFactory:
        CHECK_TYPES[(key, value)] = factory
        return factory

    return decorator


def build_check(key: str, value: str, settings: Settings) -> Check | None:
    """Instantiate the check declared by ``key=value``, or None if unknown."""
    factory = CHECK_TYPES.get((key, value))
    if factory is None:
        return None
    return factory(settings)


@register_check("Systemd", "status")
def _systemd_status(settings: Settings) -> Check:
    return SystemdStatusCheck(
        settings.hostname,
        connect=partial(SystemdClient.from_settings, settings),
    )


def execute_check(check: Check, unit_name: str) -> Status:
    """Run a check, turning an unexpected exception into a CRITICAL status."""
    try:
        return check.get(unit_name)
    except Exception as e:
        logger.exception("Check %r raised for %s", check, unit_name)
        status = check.new_status(unit_name)
        status.code = StatusCode.CRITICAL
        status.description = f"Check error: {type(e).__name__}: {e}"
        return status
