"""Health-check daemon: watches systemd units and reports them to Datadog."""

__version__ = "0.3.0"
