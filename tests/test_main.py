"""Tests for the CLI entry point — systemd and Datadog are mocked out."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from systemd_check import main as cli
from systemd_check.systemd.client import SystemdConnectionError, UnitState

from .conftest import FakeSystemdClient

UNIT = """
    [Unit]
    Description=Web frontend

    [X-Check]
    Systemd=status
"""


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATADOG_API_KEY", raising=False)
    monkeypatch.setenv("HOSTNAME_OVERRIDE", "test-host")
    monkeypatch.setenv("COLUMNS", "300")


def _fake_connect(units: list[UnitState]) -> Callable[..., FakeSystemdClient]:
    return lambda *a, **kw: FakeSystemdClient(units)


class TestUnitsCommand:
    def test_lists_units(
        self, tmp_path: Path, write_unit: Callable[[str, str], Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_unit("web.service", UNIT)
        assert cli.main(["--unit-dir", str(tmp_path), "units"]) == 0
        out = capsys.readouterr().out
        assert "web.service" in out
        assert "Web frontend" in out
        assert str(tmp_path / "web.service") in out

    def test_bracketed_descriptions_print_verbatim(
        self, tmp_path: Path, write_unit: Callable[[str, str], Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_unit("backup.service", UNIT.replace("Web frontend", "Backup of [/var/lib] data"))
        write_unit("web.service", UNIT.replace("Web frontend", "Web [b]frontend"))
        assert cli.main(["--unit-dir", str(tmp_path), "units"]) == 0
        out = capsys.readouterr().out
        assert "Backup of [/var/lib] data" in out
        assert "Web [b]frontend" in out

    def test_missing_dir_is_fatal(self, tmp_path: Path) -> None:
        assert cli.main(["--unit-dir", str(tmp_path / "missing"), "units"]) == cli.EXIT_FATAL

    def test_bad_interval_is_fatal(self, tmp_path: Path) -> None:
        assert cli.main(["--unit-dir", str(tmp_path), "--interval", "0", "units"]) == cli.EXIT_FATAL


class TestCheckCommand:
    def test_exit_code_is_worst_status(
        self, tmp_path: Path, write_unit: Callable[[str, str], Path],
    ) -> None:
        write_unit("web.service", UNIT)
        write_unit("db.service", UNIT)
        units = [
            UnitState("web.service", "loaded", "active", "running"),
            UnitState("db.service", "loaded", "inactive", "dead"),
        ]
        with patch.object(cli.SystemdClient, "from_settings", side_effect=_fake_connect(units)):
            assert cli.main(["--unit-dir", str(tmp_path), "check"]) == 1

    def test_all_ok(self, tmp_path: Path, write_unit: Callable[[str, str], Path]) -> None:
        write_unit("web.service", UNIT)
        units = [UnitState("web.service", "loaded", "active", "running")]
        with patch.object(cli.SystemdClient, "from_settings", side_effect=_fake_connect(units)):
            assert cli.main(["--unit-dir", str(tmp_path), "check"]) == 0

    def test_bracketed_error_message_prints_verbatim(
        self, tmp_path: Path, write_unit: Callable[[str, str], Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_unit("web.service", UNIT)
        with patch.object(
            cli.SystemdClient, "from_settings",
            side_effect=lambda *a, **kw: FakeSystemdClient(error="bad row [/run/x]"),
        ):
            assert cli.main(["--unit-dir", str(tmp_path), "check"]) == 2
        assert "systemd list-units - bad row [/run/x]" in capsys.readouterr().out

    def test_startup_probe_failure_is_fatal(
        self, tmp_path: Path, write_unit: Callable[[str, str], Path],
    ) -> None:
        write_unit("web.service", UNIT)
        with patch.object(
            cli.SystemdClient, "from_settings", side_effect=SystemdConnectionError("no bus"),
        ):
            assert cli.main(["--unit-dir", str(tmp_path), "check"]) == cli.EXIT_FATAL


class TestWatchCommand:
    def test_runs_until_stopped(
        self, tmp_path: Path, write_unit: Callable[[str, str], Path],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write_unit("web.service", UNIT)
        units = [UnitState("web.service", "loaded", "active", "running")]

        coordinator = MagicMock()
        caplog.set_level(logging.INFO, logger="systemd_check")

        def stop_after_first_cycle(watcher: cli.Watcher) -> MagicMock:
            original = watcher.run_once

            def run_once() -> list:
                result = original()
                watcher.stop()
                return result

            watcher.run_once = run_once  # type: ignore[method-assign]
            return coordinator

        with patch.object(cli.SystemdClient, "from_settings", side_effect=_fake_connect(units)), \
                patch.object(cli, "ShutdownCoordinator", side_effect=stop_after_first_cycle):
            assert cli.main(["--unit-dir", str(tmp_path), "watch"]) == 0

        coordinator.install.assert_called_once()
        coordinator.uninstall.assert_called_once()
        assert "DATADOG_API_KEY not set, reporting disabled" in caplog.messages
