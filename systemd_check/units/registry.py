"""Unit registry — discovers ``*.service`` files and the checks they declare.

A unit file opts into monitoring with an ``[X-Check]`` section:

    [Unit]
    Description=Web frontend

    [X-Check]
    Systemd=status

Units that declare no recognized check are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from systemd_check.health.engine import Check, build_check

if TYPE_CHECKING:
    from systemd_check.config import Settings

logger = logging.getLogger(__name__)

CHECK_SECTION = "X-Check"


class UnitDiscoveryError(OSError):
    """Raised when unit files can't be listed, read, or parsed."""


class UnitParseError(UnitDiscoveryError):
    """Raised for malformed unit file contents."""


# ── Data models ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UnitOption:
    """A single ``Key=Value`` line and the section it appeared in."""

    section: str
    name: str
    value: str


@dataclass(frozen=True)
class Unit:
    """A discovered unit with at least one check attached."""

    name: str
    description: str = ""
    checks: tuple[Check, ...] = field(default_factory=tuple)
    path: Path | None = None


# ── Parser ───────────────────────────────────────────────────────────────────


def parse_unit_file(text: str, source: str = "<string>") -> list[UnitOption]:
    """Parse systemd unit file syntax into an ordered list of options.

    Handles ``#``/``;`` comments, ``\\`` line continuations and repeated
    keys. Raises UnitParseError on anything it can't make sense of.
    """
    options: list[UnitOption] = []
    section: str | None = None
    pending = ""
    pending_lineno = 0

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()

        if pending:
            if line.startswith(("#", ";")):
                continue
            line = f"{pending} {line}" if line else pending
        elif not line or line.startswith(("#", ";")):
            continue
        else:
            pending_lineno = lineno

        if line.endswith("\\"):
            pending = line[:-1].rstrip()
            continue
        pending = ""

        if line.startswith("["):
            if not line.endswith("]") or len(line) < 3:
                raise UnitParseError(f"{source}:{pending_lineno}: bad section header {line!r}")
            section = line[1:-1].strip()
            continue

        if section is None:
            raise UnitParseError(f"{source}:{pending_lineno}: option outside of a section")

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            raise UnitParseError(f"{source}:{pending_lineno}: expected Key=Value, got {line!r}")
        options.append(UnitOption(section=section, name=key, value=value.strip()))

    if pending:
        # Trailing backslash on the last line
        raise UnitParseError(f"{source}:{pending_lineno}: unterminated line continuation")

    return options


def unit_from_options(
    name: str,
    options: list[UnitOption],
    settings: Settings,
    path: Path | None = None,
) -> Unit:
    """Build a Unit, attaching a check for every recognized X-Check option."""
    description = ""
    checks: list[Check] = []

    for opt in options:
        if opt.section == "Unit" and opt.name == "Description":
            description = opt.value
        elif opt.section == CHECK_SECTION:
            check = build_check(opt.name, opt.value, settings)
            if check is None:
                logger.debug("%s: ignoring unknown check %s=%s", name, opt.name, opt.value)
                continue
            checks.append(check)

    return Unit(name=name, description=description, checks=tuple(checks), path=path)


# ── Discovery ────────────────────────────────────────────────────────────────


def discover_units(directory: str | Path, settings: Settings) -> list[Unit]:
    """Return every checkable unit under ``directory``, sorted by file name."""
    root = Path(directory)
    mask = root / settings.unit_glob
    logger.info("Search services by %s", mask)

    if not root.is_dir():
        raise UnitDiscoveryError(f"Unit directory not found: {root}")
    try:
        files = sorted(p for p in root.glob(settings.unit_glob) if p.is_file())
    except OSError as e:
        raise UnitDiscoveryError(f"Could not list {mask}: {e}") from e

    units: list[Unit] = []
    for path in files:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise UnitDiscoveryError(f"Could not read {path}: {e}") from e

        options = parse_unit_file(text, str(path))
        unit = unit_from_options(path.name, options, settings, path=path)
        if unit.checks:
            units.append(unit)

    return units
