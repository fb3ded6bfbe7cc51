"""systemctl-based client for querying the service manager.

Every check opens its own client, lists units, and closes it again.
Errors surface as SystemdConnectionError / SystemdQueryError.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from systemd_check.config import Settings

logger = logging.getLogger(__name__)

_LIST_UNITS_ARGS = ("list-units", "--all", "--plain", "--no-legend", "--no-pager", "--full")


class SystemdError(Exception):
    """Base class for service-manager failures."""


class SystemdConnectionError(SystemdError):
    """Raised when systemctl can't be reached."""


class SystemdQueryError(SystemdError):
    """Raised when a systemctl query fails or returns garbage."""


@dataclass(frozen=True)
class UnitState:
    """One row of ``systemctl list-units``."""

    name: str
    load_state: str
    active_state: str
    sub_state: str = ""
    description: str = ""


def parse_list_units(output: str) -> list[UnitState]:
    """Parse ``list-units --plain --no-legend`` output into UnitState rows."""
    units = []
    for line in output.splitlines():
        # Non-plain output marks broken units with a leading bullet
        line = line.strip().lstrip("●*").strip()
        if not line:
            continue
        parts = line.split(None, 4)
        if len(parts) < 4:
            raise SystemdQueryError(f"Unexpected list-units row: {line!r}")
        units.append(
            UnitState(
                name=parts[0],
                load_state=parts[1],
                active_state=parts[2],
                sub_state=parts[3],
                description=parts[4] if len(parts) > 4 else "",
            )
        )
    return units


class SystemdClient:
    """Synchronous systemctl wrapper with connect / list_units / close."""

    def __init__(
        self,
        systemctl: str = "systemctl",
        scope: str = "system",
        timeout: float = 10.0,
    ) -> None:
        self._systemctl = systemctl
        self._scope = scope
        self._timeout = timeout
        self._closed = False

    @classmethod
    def connect(
        cls,
        systemctl: str = "systemctl",
        scope: str = "system",
        timeout: float = 10.0,
    ) -> SystemdClient:
        """Return a client after verifying systemctl answers."""
        client = cls(systemctl=systemctl, scope=scope, timeout=timeout)
        try:
            client._run("--version")
        except SystemdQueryError as exc:
            raise SystemdConnectionError(str(exc)) from exc
        return client

    @classmethod
    def from_settings(cls, settings: Settings) -> SystemdClient:
        return cls.connect(
            systemctl=settings.systemctl_path,
            scope=settings.systemctl_scope,
            timeout=settings.systemctl_timeout_seconds,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def list_units(self) -> list[UnitState]:
        """List every unit systemd knows about, including inactive ones."""
        if self._closed:
            raise SystemdQueryError("Client is closed")
        output = self._run(f"--{self._scope}", *_LIST_UNITS_ARGS)
        units = parse_list_units(output)
        logger.debug("systemctl listed %d units", len(units))
        return units

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> SystemdClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _run(self, *args: str) -> str:
        cmd = [self._systemctl, *args]
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise SystemdConnectionError(f"{self._systemctl} not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise SystemdQueryError(f"{' '.join(cmd)} timed out after {self._timeout}s") from exc
        except OSError as exc:
            raise SystemdQueryError(f"{' '.join(cmd)} failed: {exc}") from exc

        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout).strip()[:200]
            raise SystemdQueryError(f"{' '.join(cmd)} exited {proc.returncode}: {detail}")
        return proc.stdout
