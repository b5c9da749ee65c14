"""Exception hierarchy for metrics ingestion, refresh and lookup failures."""

from __future__ import annotations

from typing import Any, Mapping


class MetricsError(Exception):
    """Base class for all domain-level errors in the metrics package."""

    default_message = "Metrics error occurred"

    def __init__(
        self, message: str | None = None, *, context: Mapping[str, Any] | None = None
    ):
        self.message = message or self.default_message
        self.context: Mapping[str, Any] = dict(context or {})
        formatted = self._format_message()
        super().__init__(formatted)

    def _format_message(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class IngestionError(MetricsError):
    """The upstream metrics API rejected or failed a request."""

    default_message = "Metrics ingestion failed"


class IngestionUnavailableError(IngestionError):
    """Upstream is down, overloaded or rate limiting; safe to retry."""

    default_message = "Metrics API is unavailable"


class IngestionAuthError(IngestionError):
    """Token is missing, expired or lacks the required scope."""

    default_message = "Metrics API authentication failed"


class RefreshError(MetricsError):
    """A refresh cycle could not produce a new snapshot."""

    default_message = "Metrics refresh failed"


class ReportNotFoundError(MetricsError):
    """Requested report id is not in the catalog."""

    default_message = "Report not found"


class ConfigurationError(MetricsError):
    """Service cannot be wired from the supplied configuration."""

    default_message = "Invalid metrics configuration"
