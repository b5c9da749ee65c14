"""Scalar aggregation over a window of daily records."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Sequence, Tuple

from copilot_metrics.domain.models import CategoryEntry, DailyRecord
from copilot_metrics.utils.formatting import round_int

EntryFilter = Callable[[CategoryEntry], bool]


def sum_field(records: Sequence[DailyRecord], field: str) -> int:
    """Sum a top-level numeric field; unknown or missing values count as zero."""

    return sum(record.metric(field) for record in records)


def sum_nested(
    records: Sequence[DailyRecord],
    records_field: str,
    metric: str,
    entry_filter: Optional[EntryFilter] = None,
) -> int:
    """Sum one metric across every entry of a nested breakdown."""

    total = 0
    for record in records:
        for entry in record.entries(records_field):
            if entry_filter is not None and not entry_filter(entry):
                continue
            total += entry.metric(metric)
    return total


def peak_field(records: Sequence[DailyRecord], field: str) -> int:
    return max((record.metric(field) for record in records), default=0)


def average_field(records: Sequence[DailyRecord], field: str) -> int:
    if not records:
        return 0
    return round_int(sum_field(records, field) / len(records))


def date_range(
    records: Sequence[DailyRecord],
) -> Tuple[Optional[date], Optional[date]]:
    if not records:
        return None, None
    days = [record.day for record in records]
    return min(days), max(days)
