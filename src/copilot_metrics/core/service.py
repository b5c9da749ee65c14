"""Service facade coordinating refresh, reports, and questions."""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from copilot_metrics.aggregation import views
from copilot_metrics.domain.exceptions import ReportNotFoundError
from copilot_metrics.domain.interfaces import IQueryAgent, IQueryDispatcher
from copilot_metrics.domain.models import (
    DailyRecord,
    QueryResponse,
    Report,
    ReportInfo,
    SummaryStats,
)
from copilot_metrics.reporting.compiler import REPORT_CATALOG
from copilot_metrics.utils.validators import validate_report_id

from .middleware import IMiddleware, MiddlewareChain
from .refresh import RefreshCoordinator
from .store import RecordStore, Snapshot


class MetricsService:
    """High-level API the dashboard and chat surfaces call into."""

    def __init__(
        self,
        store: RecordStore,
        coordinator: RefreshCoordinator,
        dispatcher: IQueryDispatcher,
        *,
        middleware: Optional[MiddlewareChain] = None,
        middlewares: Optional[Sequence[IMiddleware]] = None,
        agent: Optional[IQueryAgent] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if middleware and middlewares:
            raise ValueError("Provide either 'middleware' or 'middlewares', not both")
        self._store = store
        self._coordinator = coordinator
        self._dispatcher = dispatcher
        self._middleware = middleware or MiddlewareChain(middlewares or [])
        self._agent = agent
        self._logger = logger or logging.getLogger(__name__)

    def refresh(self) -> Snapshot:
        return self._coordinator.refresh()

    def records(self) -> Sequence[DailyRecord]:
        return self._store.records()

    def report_catalog(self) -> List[ReportInfo]:
        return list(REPORT_CATALOG)

    def reports(self) -> Mapping[str, Report]:
        return self._store.current_reports()

    def report(self, report_id: str) -> Report:
        validate_report_id(report_id)
        reports = self._store.current_reports()
        try:
            return reports[report_id]
        except KeyError as exc:
            raise ReportNotFoundError(
                context={"report_id": report_id, "available": sorted(reports)}
            ) from exc

    def query(self, prompt: str) -> QueryResponse:
        return self._middleware.execute(prompt, self._answer)

    def summary(self) -> SummaryStats:
        return views.summary_stats(self._store.records())

    @property
    def agent(self) -> Optional[IQueryAgent]:
        return self._agent

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _answer(self, prompt: str) -> QueryResponse:
        if self._agent is not None:
            try:
                return self._agent.answer(prompt)
            except Exception as exc:
                self._logger.warning(
                    "agent_fallback",
                    extra={"error": str(exc), "prompt_preview": prompt[:100]},
                )
        return self._dispatcher.dispatch(prompt)
