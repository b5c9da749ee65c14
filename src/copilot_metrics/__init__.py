"""Copilot usage metrics package following Clean Architecture layering."""

from .core.container import DIContainer
from .core.service import MetricsService

__all__ = [
    "MetricsService",
    "DIContainer",
    "domain",
    "aggregation",
    "reporting",
    "query",
    "core",
    "ingestion",
    "utils",
]
