"""Per-day series built from the record window."""

from __future__ import annotations

from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from copilot_metrics.domain.categories import OTHER_LABEL
from copilot_metrics.domain.models import (
    AggregationBucket,
    CategoryKey,
    DailyRecord,
    DailySeries,
    ShareMatrix,
    StackedSeries,
)
from copilot_metrics.utils.formatting import round_int

from .categorical import KeyFn, by_category, metric_sum
from .fields import EntryFilter, sum_field
from .topn import top_n_with_other

ROLLING_WINDOW = 7
TOP_K = 5

DayValueFn = Callable[[Sequence[DailyRecord]], float]


def sorted_days(records: Sequence[DailyRecord]) -> List[date]:
    return sorted({record.day for record in records})


def records_by_day(records: Sequence[DailyRecord]) -> Dict[date, List[DailyRecord]]:
    grouped: Dict[date, List[DailyRecord]] = {}
    for record in records:
        grouped.setdefault(record.day, []).append(record)
    return grouped


def daily_series(records: Sequence[DailyRecord], value_fn: DayValueFn) -> DailySeries:
    """One value per day present; absent days are absent, never zero-filled."""

    grouped = records_by_day(records)
    days = sorted(grouped)
    return DailySeries(
        days=tuple(days), values=tuple(value_fn(grouped[day]) for day in days)
    )


def field_series(records: Sequence[DailyRecord], field: str) -> DailySeries:
    return daily_series(records, lambda day_records: sum_field(day_records, field))


def rolling_average(series: DailySeries, window: int = ROLLING_WINDOW) -> DailySeries:
    """Trailing mean over up to ``window`` samples, rounded to an integer.

    The window shrinks at the start of the series instead of being padded.
    """

    if window <= 0:
        raise ValueError("window must be positive")
    averaged = []
    for index in range(len(series.values)):
        samples = series.values[max(0, index - window + 1) : index + 1]
        averaged.append(round_int(sum(samples) / len(samples)))
    return DailySeries(days=series.days, values=tuple(averaged))


def percent_shares(values: Sequence[int]) -> List[float]:
    """Split 100% across ``values`` in hundredths.

    Each share is floored to two decimals and the leftover hundredths go to
    the largest remainders (earlier positions win ties), so a nonzero total
    always sums to exactly 100.00. A zero total yields all zeros.
    """

    total = sum(values)
    if total <= 0:
        return [0.0 for _ in values]
    scaled = [value * 10000 for value in values]
    units = [part // total for part in scaled]
    remainders = [part % total for part in scaled]
    leftover = 10000 - sum(units)
    order = sorted(range(len(values)), key=lambda i: remainders[i], reverse=True)
    for index in order[:leftover]:
        units[index] += 1
    return [unit / 100 for unit in units]


def per_day_category_totals(
    records: Sequence[DailyRecord],
    records_field: str,
    key_fn: KeyFn,
    metric: str,
    categories: Sequence[CategoryKey],
    labels: Optional[Mapping[CategoryKey, str]] = None,
    entry_filter: Optional[EntryFilter] = None,
) -> StackedSeries:
    """Raw per-day totals for a fixed list of categories."""

    grouped = records_by_day(records)
    days = sorted(grouped)
    names = _series_names([_label(category, labels) for category in categories])
    series: Dict[str, List[float]] = {name: [] for name in names}
    for day in days:
        totals = _bucket_totals(
            by_category(grouped[day], records_field, key_fn, [metric], entry_filter),
            metric_sum(metric),
        )
        for category, name in zip(categories, names):
            series[name].append(totals.get(category, 0))
    return StackedSeries(days=tuple(days), series=series)


def normalized_share_series(
    records: Sequence[DailyRecord],
    records_field: str,
    key_fn: KeyFn,
    metric_fields: Sequence[str],
    k: int = TOP_K,
    entry_filter: Optional[EntryFilter] = None,
) -> StackedSeries:
    """Per-day percentage split across the window's top ``k`` plus "Other".

    The top ``k`` categories are chosen once from whole-window totals and held
    fixed for every day, so a category that leads on a single day is still
    folded into "Other" unless it leads overall.
    """

    value_of = metric_sum(*metric_fields)
    window_buckets = by_category(
        records, records_field, key_fn, metric_fields, entry_filter
    )
    leaders = [
        bucket.category_key
        for bucket in top_n_with_other(window_buckets, value_of, k).top
    ]
    names = _series_names([_label(key) for key in leaders], with_other=True)

    grouped = records_by_day(records)
    days = sorted(grouped)
    series: Dict[str, List[float]] = {name: [] for name in names}
    for day in days:
        totals = _bucket_totals(
            by_category(
                grouped[day], records_field, key_fn, metric_fields, entry_filter
            ),
            value_of,
        )
        counts = [totals.get(key, 0) for key in leaders]
        counts.append(sum(totals.values()) - sum(counts))
        for name, share in zip(names, percent_shares(counts)):
            series[name].append(share)
    return StackedSeries(days=tuple(days), series=series)


def share_matrix(
    table: Mapping[CategoryKey, Mapping[CategoryKey, int]],
    rows: Sequence[CategoryKey],
    columns: Sequence[CategoryKey],
    row_labels: Optional[Mapping[CategoryKey, str]] = None,
) -> ShareMatrix:
    """Percentage of each column within each row, with an "Other" column."""

    names = _series_names([_label(column) for column in columns], with_other=True)
    series: Dict[str, List[float]] = {name: [] for name in names}
    for row in rows:
        cells = table.get(row, {})
        counts = [cells.get(column, 0) for column in columns]
        counts.append(sum(cells.values()) - sum(counts))
        for name, share in zip(names, percent_shares(counts)):
            series[name].append(share)
    return ShareMatrix(
        rows=tuple(_label(row, row_labels) for row in rows), series=series
    )


def _bucket_totals(
    buckets: Sequence[AggregationBucket],
    value_of: Callable[[AggregationBucket], int],
) -> Dict[CategoryKey, int]:
    return {bucket.category_key: value_of(bucket) for bucket in buckets}


def _label(
    key: CategoryKey, labels: Optional[Mapping[CategoryKey, str]] = None
) -> str:
    if labels and key in labels:
        return labels[key]
    if isinstance(key, tuple):
        return " / ".join(key)
    return key


def _series_names(labels: Sequence[str], with_other: bool = False) -> List[str]:
    """Unique series names, in order, with ``OTHER_LABEL`` reserved last.

    Colliding labels get a numeric suffix, e.g. a language literally called
    "Other" is shown as "Other (2)" beside the remainder.
    """

    taken = {OTHER_LABEL} if with_other else set()
    names = []
    for label in labels:
        name, suffix = label, 2
        while name in taken:
            name = f"{label} ({suffix})"
            suffix += 1
        taken.add(name)
        names.append(name)
    if with_other:
        names.append(OTHER_LABEL)
    return names
