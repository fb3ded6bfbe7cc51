"""Datadog notifier — posts one check_run per status.

Reporting is best-effort: a failed record is logged and the rest of the
batch is still sent. Without DATADOG_API_KEY the notifier does nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import httpx

from systemd_check.health.engine import Status

from .models import DatadogCheckRun

if TYPE_CHECKING:
    from systemd_check.config import Settings

logger = logging.getLogger(__name__)


class DatadogNotifier:
    """Sends Status records to the Datadog check_run endpoint."""

    def __init__(
        self,
        api_key: str = "",
        api_url: str = "https://app.datadoghq.com/api/v1/check_run",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._enabled = bool(api_key)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> DatadogNotifier:
        return cls(
            api_key=settings.datadog_api_key,
            api_url=settings.datadog_api_url,
            timeout=settings.datadog_timeout_seconds,
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    def notify(self, statuses: Sequence[Status]) -> int:
        """Post every status; returns how many Datadog accepted."""
        if not self._enabled:
            return 0

        logger.info("Sending to datadog")
        sent = 0
        for status in statuses:
            if self._send(status):
                sent += 1
        logger.info("Datadog requests complete (%d/%d accepted)", sent, len(statuses))
        return sent

    def _send(self, status: Status) -> bool:
        try:
            payload = DatadogCheckRun.from_status(status).model_dump_json()
        except Exception as exc:
            logger.warning("Datadog payload for %s failed: %s", status.unit, exc)
            return False

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.post(
                    self.api_url,
                    params={"api_key": self._api_key},
                    content=payload,
                    headers={"Content-Type": "application/json"},
                )
        except Exception as exc:
            logger.warning("Datadog request failed for %s: %s", status.unit, exc)
            return False

        if resp.status_code >= 400:
            logger.warning(
                "Datadog returned %d for %s: %s",
                resp.status_code, status.unit, resp.text[:200],
            )
            return False
        return True
