"""Service-manager access via systemctl."""

from systemd_check.systemd.client import (
    SystemdClient,
    SystemdConnectionError,
    SystemdError,
    SystemdQueryError,
    UnitState,
    parse_list_units,
)

__all__ = [
    "SystemdClient",
    "SystemdConnectionError",
    "SystemdError",
    "SystemdQueryError",
    "UnitState",
    "parse_list_units",
]
