from systemd_check.units.registry import (
    Unit,
    UnitDiscoveryError,
    UnitOption,
    UnitParseError,
    discover_units,
    parse_unit_file,
    unit_from_options,
)

__all__ = [
    "Unit",
    "UnitDiscoveryError",
    "UnitOption",
    "UnitParseError",
    "discover_units",
    "parse_unit_file",
    "unit_from_options",
]
