"""Record sources feeding the refresh cycle."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from copilot_metrics.domain.interfaces import IRecordSource
from copilot_metrics.domain.models import DailyRecord

from .github_client import GitHubMetricsClient

logger = logging.getLogger(__name__)


def dedupe_records(raw: Iterable[Any]) -> List[DailyRecord]:
    """Validate raw payloads and keep the last record per (scope, day).

    Output order follows the first appearance of each scope/day pair.
    """

    seen: Dict[Tuple[str, date], DailyRecord] = {}
    for index, item in enumerate(raw):
        try:
            record = DailyRecord.model_validate(item)
        except ValidationError as exc:
            logger.warning(
                "record_rejected",
                extra={"index": index, "errors": exc.error_count()},
            )
            continue
        seen[record.scope_key] = record
    return list(seen.values())


class StaticRecordSource(IRecordSource):
    """Serves a fixed record collection; handy for tests and offline demos."""

    def __init__(self, records: Iterable[Any]) -> None:
        self._records = tuple(records)

    def load(self) -> Sequence[DailyRecord]:
        return dedupe_records(self._records)


class GitHubRecordSource(IRecordSource):
    """Loads the trailing window of days from the GitHub metrics API."""

    def __init__(
        self,
        client: GitHubMetricsClient,
        *,
        window_days: int = 28,
        batch_size: int = 7,
        today: Optional[date] = None,
    ) -> None:
        if window_days <= 0:
            raise ValueError("window_days must be greater than zero")
        if batch_size <= 0:
            raise ValueError("batch_size must be greater than zero")
        self._client = client
        self._window_days = window_days
        self._batch_size = batch_size
        self._today = today

    def window(self) -> List[date]:
        """Days to request, newest first, excluding today."""

        today = self._today or date.today()
        return [today - timedelta(days=i) for i in range(1, self._window_days + 1)]

    def load(self) -> Sequence[DailyRecord]:
        days = self.window()
        raw: List[Mapping[str, Any]] = []
        with ThreadPoolExecutor(max_workers=self._batch_size) as pool:
            for start in range(0, len(days), self._batch_size):
                batch = days[start : start + self._batch_size]
                logger.info(
                    "metrics_batch_started",
                    extra={
                        "first_day": batch[0].isoformat(),
                        "last_day": batch[-1].isoformat(),
                    },
                )
                for day_records in pool.map(self._client.fetch_day, batch):
                    raw.extend(day_records)
        records = dedupe_records(raw)
        logger.info(
            "metrics_loaded",
            extra={"raw_count": len(raw), "record_count": len(records)},
        )
        return records
