"""Status reporting backends."""

from systemd_check.notifications.datadog import DatadogNotifier
from systemd_check.notifications.models import DatadogCheckRun

__all__ = ["DatadogCheckRun", "DatadogNotifier"]
