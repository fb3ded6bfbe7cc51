"""Health subsystem — status model, check engine, watcher."""

from .engine import (
    CHECK_TYPES,
    Check,
    Status,
    StatusCode,
    SystemdStatusCheck,
    build_check,
    execute_check,
    register_check,
)
from .scheduler import Watcher
