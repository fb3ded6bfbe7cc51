"""Daemon configuration — loaded once from environment / .env file."""

from __future__ import annotations

import socket
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_HOSTNAME = "localhost"


def resolve_hostname() -> str:
    """Return this host's name, or ``localhost`` when it can't be resolved."""
    try:
        name = socket.gethostname()
    except OSError:
        return DEFAULT_HOSTNAME
    return name or DEFAULT_HOSTNAME


class Settings(BaseSettings):
    """Central configuration, resolved at startup and passed around explicitly."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
        "populate_by_name": True,
    }

    # Unit discovery
    unit_dir: str = "/etc/systemd/system"
    unit_glob: str = "*.service"

    # Scheduling
    check_interval_seconds: float = 30.0

    # Reported as host_name on every status
    hostname: str = Field(
        default_factory=resolve_hostname,
        validation_alias="HOSTNAME_OVERRIDE",
    )

    # Datadog (reporting is disabled when no key is set)
    datadog_api_key: str = ""
    datadog_api_url: str = "https://app.datadoghq.com/api/v1/check_run"
    datadog_timeout_seconds: float = 10.0

    # systemctl
    systemctl_path: str = "systemctl"
    systemctl_scope: Literal["system", "user"] = "system"
    systemctl_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"

    @field_validator("check_interval_seconds")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("check_interval_seconds must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def datadog_enabled(self) -> bool:
        return bool(self.datadog_api_key)


def load_settings(**overrides: Any) -> Settings:
    """Build the process-wide settings; ``None`` overrides fall back to env."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
