"""Entry point for the systemd-check daemon."""

from __future__ import annotations

import argparse
import logging
import threading
from collections.abc import Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from systemd_check import __version__
from systemd_check.config import Settings, load_settings
from systemd_check.health.engine import StatusCode
from systemd_check.health.scheduler import Watcher
from systemd_check.notifications import DatadogNotifier
from systemd_check.shutdown import ShutdownCoordinator
from systemd_check.systemd.client import SystemdClient, SystemdError
from systemd_check.units.registry import Unit, UnitDiscoveryError, discover_units

EXIT_FATAL = 3

console = Console(stderr=True)
logger = logging.getLogger("systemd_check")

_CODE_STYLE = {
    StatusCode.OK: "green",
    StatusCode.WARN: "yellow",
    StatusCode.CRITICAL: "bold red",
}


class StartupError(Exception):
    """Configuration or environment problem that must stop the process."""


def probe_systemd(settings: Settings) -> None:
    """Make sure systemctl answers before anything is scheduled."""
    try:
        SystemdClient.from_settings(settings).close()
    except SystemdError as e:
        raise StartupError(f"systemd is not reachable: {e}") from e


def load_units(settings: Settings) -> list[Unit]:
    try:
        units = discover_units(settings.unit_dir, settings)
    except UnitDiscoveryError as e:
        raise StartupError(str(e)) from e
    for unit in units:
        logger.info('Add unit "%s"', unit.name)
    return units


def run_watch(settings: Settings) -> int:
    """Probe, discover, then check every unit until a shutdown signal arrives."""
    probe_systemd(settings)
    units = load_units(settings)

    notifier = DatadogNotifier.from_settings(settings)
    if not settings.datadog_enabled:
        logger.info("DATADOG_API_KEY not set, reporting disabled")

    console.print(Panel(
        f"systemd-check {__version__}\n"
        f"host: {escape(settings.hostname)}  units: {len(units)}  "
        f"interval: {settings.check_interval_seconds}s",
        style="bold green",
    ))

    watcher = Watcher(units, notifier, interval=settings.check_interval_seconds)
    coordinator = ShutdownCoordinator(watcher)
    coordinator.install()

    thread = threading.Thread(target=watcher.watch, name="watcher")
    thread.start()
    try:
        # join() with a timeout keeps the main thread responsive to signals
        while thread.is_alive():
            thread.join(timeout=1.0)
    finally:
        coordinator.uninstall()
    return 0


def run_check(settings: Settings) -> int:
    """Run a single cycle and print the results. Exit code is the worst status."""
    probe_systemd(settings)
    units = load_units(settings)

    watcher = Watcher(
        units,
        DatadogNotifier.from_settings(settings),
        interval=settings.check_interval_seconds,
    )
    statuses = watcher.run_once()

    table = Table(title=f"Checks on {escape(settings.hostname)}")
    table.add_column("Unit")
    table.add_column("Check")
    table.add_column("Code")
    table.add_column("Message")
    for st in statuses:
        style = _CODE_STYLE[st.code]
        table.add_row(
            escape(st.unit), st.check_id,
            f"[{style}]{st.code.name}[/{style}]", escape(st.description),
        )
    Console().print(table)

    return int(max((st.code for st in statuses), default=StatusCode.OK))


def run_units(settings: Settings) -> int:
    """List discovered units and the checks attached to them."""
    units = load_units(settings)

    table = Table(title=f"Units in {escape(settings.unit_dir)}")
    table.add_column("Unit")
    table.add_column("Description")
    table.add_column("Checks")
    table.add_column("Path", overflow="fold")
    for unit in units:
        table.add_row(
            escape(unit.name),
            escape(unit.description),
            ", ".join(c.check_id for c in unit.checks),
            escape(str(unit.path or "")),
        )
    Console().print(table)
    return 0


_COMMANDS = {
    "watch": run_watch,
    "check": run_check,
    "units": run_units,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="systemd-check",
        description="Check systemd units declared with [X-Check] and report to Datadog",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--unit-dir", help="Directory holding *.service files")
    parser.add_argument("--interval", type=float, help="Seconds between check cycles")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("watch", help="Run checks continuously (default)")
    sub.add_parser("check", help="Run every check once and print the results")
    sub.add_parser("units", help="List units that declare checks")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            unit_dir=args.unit_dir,
            check_interval_seconds=args.interval,
            log_level=args.log_level,
        )
    except ValidationError as e:
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(e))}")
        return EXIT_FATAL

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    # httpx logs full request URLs, which carry the Datadog API key
    logging.getLogger("httpx").setLevel(logging.WARNING)

    command = _COMMANDS[args.command or "watch"]
    try:
        return command(settings)
    except StartupError as e:
        logger.error("%s", e)
        console.print(f"[bold red]Startup failed:[/bold red] {escape(str(e))}")
        return EXIT_FATAL


if __name__ == "__main__":
    raise SystemExit(main())
