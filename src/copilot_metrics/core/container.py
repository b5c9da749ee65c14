"""Dependency injection container for building fully-wired services."""

from __future__ import annotations

from typing import Optional, Sequence

import httpx

from copilot_metrics.core.config import MetricsConfig
from copilot_metrics.core.middleware import (
    IMiddleware,
    LoggingMiddleware,
    MiddlewareChain,
    ValidationMiddleware,
)
from copilot_metrics.core.refresh import RefreshCoordinator, RefreshFailurePolicy
from copilot_metrics.core.service import MetricsService
from copilot_metrics.core.store import RecordStore
from copilot_metrics.domain.exceptions import ConfigurationError
from copilot_metrics.domain.interfaces import IQueryAgent, IRecordSource
from copilot_metrics.ingestion.github_client import GitHubMetricsClient
from copilot_metrics.ingestion.source import GitHubRecordSource
from copilot_metrics.query.dispatcher import QueryDispatcher
from copilot_metrics.reporting.compiler import ReportCompiler


class DIContainer:
    """Factory helpers that assemble a MetricsService with default wiring."""

    @staticmethod
    def create_service(
        config: Optional[MetricsConfig] = None,
        *,
        source: Optional[IRecordSource] = None,
        http_client: Optional[httpx.Client] = None,
        agent: Optional[IQueryAgent] = None,
        load: bool = False,
    ) -> MetricsService:
        cfg = config or MetricsConfig.from_env()
        record_source = source or DIContainer._build_github_source(cfg, http_client)

        store = RecordStore()
        coordinator = RefreshCoordinator(
            record_source,
            ReportCompiler(),
            store,
            policy=RefreshFailurePolicy(cfg.failure_policy),
        )
        service = DIContainer.create_custom_service(
            store=store,
            coordinator=coordinator,
            middlewares=DIContainer._build_middlewares(cfg),
            agent=agent,
        )
        if load:
            service.refresh()
        return service

    @staticmethod
    def create_custom_service(
        *,
        store: RecordStore,
        coordinator: RefreshCoordinator,
        dispatcher: Optional[QueryDispatcher] = None,
        middleware: Optional[MiddlewareChain] = None,
        middlewares: Optional[Sequence[IMiddleware]] = None,
        agent: Optional[IQueryAgent] = None,
    ) -> MetricsService:
        return MetricsService(
            store,
            coordinator,
            dispatcher or QueryDispatcher(store),
            middleware=middleware,
            middlewares=middlewares,
            agent=agent,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_github_source(
        config: MetricsConfig, http_client: Optional[httpx.Client]
    ) -> GitHubRecordSource:
        if not config.token:
            raise ConfigurationError(
                "No GitHub token found. Set GH_TOKEN or GITHUB_TOKEN, "
                "or supply a record source",
                context={"enterprise": config.enterprise},
            )
        client = GitHubMetricsClient(
            http_client or httpx.Client(timeout=config.timeout_seconds), config
        )
        return GitHubRecordSource(
            client,
            window_days=config.window_days,
            batch_size=config.fetch_batch_size,
        )

    @staticmethod
    def _build_middlewares(config: MetricsConfig) -> list[IMiddleware]:
        return [
            ValidationMiddleware(config.max_prompt_length),
            LoggingMiddleware(),
        ]
