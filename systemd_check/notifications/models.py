"""Pydantic models for the Datadog check_run API."""

from __future__ import annotations

from pydantic import BaseModel

from systemd_check.health.engine import Status


class DatadogCheckRun(BaseModel):
    check: str
    host_name: str
    status: int
    message: str
    tags: list[str]

    @classmethod
    def from_status(cls, status: Status) -> DatadogCheckRun:
        return cls(
            check=status.check_id,
            host_name=status.host,
            status=int(status.code),
            message=status.description,
            tags=[f"check:{status.unit}"],
        )
