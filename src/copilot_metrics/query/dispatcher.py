"""Rule-based dispatcher answering free-text questions from the snapshot."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional, Sequence, Union

from copilot_metrics.domain.interfaces import IQueryDispatcher, IRecordReader
from copilot_metrics.domain.models import DailyRecord, QueryResponse

from .handlers import HANDLERS, Handler
from .intents import Intent, classify

RecordsProvider = Union[IRecordReader, Callable[[], Sequence[DailyRecord]]]


class QueryDispatcher(IQueryDispatcher):
    """Classifies a prompt and builds the matching response.

    Holds no state between calls: every dispatch reads the records currently
    exposed by ``records_provider``, so a refresh is visible to the next
    question without rebuilding the dispatcher.
    """

    def __init__(
        self,
        records_provider: RecordsProvider,
        *,
        handlers: Optional[Mapping[Intent, Handler]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._records_provider = records_provider
        self._handlers = {**HANDLERS, **(handlers or {})}
        self._logger = logger or logging.getLogger(__name__)

    def dispatch(self, prompt: str) -> QueryResponse:
        intent = classify(prompt)
        records = self._current_records()
        response = self._handlers[intent](records, prompt)
        self._logger.info(
            "query_dispatched",
            extra={
                "intent": intent.value,
                "record_count": len(records),
                "available": response.available,
                "chart_count": len(response.chart_specs),
            },
        )
        return response

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _current_records(self) -> Sequence[DailyRecord]:
        provider = self._records_provider
        if hasattr(provider, "records"):
            return provider.records()
        return provider()
