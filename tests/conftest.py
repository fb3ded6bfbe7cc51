"""Shared test fixtures."""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from systemd_check.config import Settings
from systemd_check.systemd.client import SystemdQueryError, UnitState


class FakeSystemdClient:
    """Stands in for SystemdClient; records whether it was closed."""

    def __init__(self, units: list[UnitState] | None = None, error: str | None = None) -> None:
        self.units = units or []
        self.error = error
        self.closed = False
        self.list_calls = 0

    def list_units(self) -> list[UnitState]:
        self.list_calls += 1
        if self.error:
            raise SystemdQueryError(self.error)
        return list(self.units)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeSystemdClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the real environment: no Datadog key, fixed host."""
    return Settings(
        _env_file=None,
        hostname="test-host",
        datadog_api_key="",
        unit_glob="*.service",
        check_interval_seconds=30.0,
    )


@pytest.fixture
def dd_settings() -> Settings:
    """Settings with a Datadog key configured."""
    return Settings(
        _env_file=None,
        hostname="test-host",
        datadog_api_key="secret-key",
        datadog_api_url="https://dd.example.com/api/v1/check_run",
    )


@pytest.fixture
def write_unit(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dedented unit file into tmp_path and return its path."""

    def _write(name: str, body: str) -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
        return path

    return _write
