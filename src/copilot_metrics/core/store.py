"""In-memory holder of the current records and their compiled reports."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from copilot_metrics.domain.interfaces import IRecordReader
from copilot_metrics.domain.models import DailyRecord, Report


@dataclass(frozen=True)
class Snapshot:
    """One consistent generation of records and the reports built from them."""

    records: Tuple[DailyRecord, ...] = ()
    reports: Mapping[str, Report] = field(
        default_factory=lambda: MappingProxyType({})
    )
    refreshed_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.records


class RecordStore(IRecordReader):
    """Atomically swappable snapshot shared by the compiler and dispatcher.

    Readers never lock: they grab the current ``Snapshot`` reference, which is
    immutable, so a concurrent ``replace`` can never expose new records next to
    old reports.
    """

    def __init__(self, snapshot: Optional[Snapshot] = None) -> None:
        self._snapshot = snapshot or Snapshot()
        self._lock = threading.Lock()

    def snapshot(self) -> Snapshot:
        return self._snapshot

    def records(self) -> Tuple[DailyRecord, ...]:
        return self._snapshot.records

    def current_reports(self) -> Mapping[str, Report]:
        return self._snapshot.reports

    def replace(
        self, records: Iterable[DailyRecord], reports: Mapping[str, Report]
    ) -> Snapshot:
        snapshot = Snapshot(
            records=tuple(records),
            reports=MappingProxyType(dict(reports)),
            refreshed_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._snapshot = snapshot
        return snapshot
