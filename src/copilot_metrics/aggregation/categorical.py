"""Group nested per-record entries into per-category running totals."""

from __future__ import annotations

from typing import (
    Callable,
    Collection,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Union,
)

from copilot_metrics.domain.models import (
    AggregationBucket,
    CategoryEntry,
    CategoryKey,
    DailyRecord,
)

from .fields import EntryFilter

KeyFn = Callable[[CategoryEntry], Optional[CategoryKey]]
SortKey = Union[str, Callable[[AggregationBucket], int]]


def feature_key(entry: CategoryEntry) -> Optional[str]:
    return entry.feature


def language_key(entry: CategoryEntry) -> Optional[str]:
    return entry.language


def model_key(entry: CategoryEntry) -> Optional[str]:
    return entry.model


def ide_key(entry: CategoryEntry) -> Optional[str]:
    return entry.ide


def language_model_key(entry: CategoryEntry) -> Optional[CategoryKey]:
    if entry.language is None or entry.model is None:
        return None
    return (entry.language, entry.model)


def in_features(names: Collection[str]) -> EntryFilter:
    allowed = frozenset(names)
    return lambda entry: entry.feature in allowed


def not_in_features(names: Collection[str]) -> EntryFilter:
    excluded = frozenset(names)
    return lambda entry: entry.feature not in excluded


def iter_entries(
    records: Iterable[DailyRecord],
    records_field: str,
    entry_filter: Optional[EntryFilter] = None,
) -> Iterable[CategoryEntry]:
    for record in records:
        for entry in record.entries(records_field):
            if entry_filter is None or entry_filter(entry):
                yield entry


def by_category(
    records: Sequence[DailyRecord],
    records_field: str,
    key_fn: KeyFn,
    metric_fields: Sequence[str],
    entry_filter: Optional[EntryFilter] = None,
) -> List[AggregationBucket]:
    """Accumulate metric totals per category key.

    Buckets come back in first-encountered key order; ranking is left to the
    caller. Entries whose key resolves to ``None`` are ignored.
    """

    totals: Dict[CategoryKey, Dict[str, int]] = {}
    for entry in iter_entries(records, records_field, entry_filter):
        key = key_fn(entry)
        if key is None:
            continue
        running = totals.get(key)
        if running is None:
            running = totals[key] = {field: 0 for field in metric_fields}
        for field in metric_fields:
            running[field] += entry.metric(field)
    return [
        AggregationBucket(category_key=key, metrics=metrics)
        for key, metrics in totals.items()
    ]


def sort_value(bucket: AggregationBucket, sort_key: SortKey) -> int:
    if callable(sort_key):
        return sort_key(bucket)
    return bucket.value(sort_key)


def rank(
    buckets: Sequence[AggregationBucket], sort_key: SortKey
) -> List[AggregationBucket]:
    """Sort descending by ``sort_key``; equal keys keep their input order."""

    return sorted(
        buckets, key=lambda bucket: sort_value(bucket, sort_key), reverse=True
    )


def metric_sum(*fields: str) -> Callable[[AggregationBucket], int]:
    """Sort key adding several metrics of a bucket together."""

    return lambda bucket: sum(bucket.value(field) for field in fields)


def cross_tabulate(
    records: Sequence[DailyRecord],
    records_field: str,
    row_key_fn: KeyFn,
    col_key_fn: KeyFn,
    metric: str,
    entry_filter: Optional[EntryFilter] = None,
) -> Dict[CategoryKey, Dict[CategoryKey, int]]:
    """Totals of ``metric`` per (row, column) category pair."""

    table: Dict[CategoryKey, Dict[CategoryKey, int]] = {}
    for entry in iter_entries(records, records_field, entry_filter):
        row = row_key_fn(entry)
        col = col_key_fn(entry)
        if row is None or col is None:
            continue
        cells = table.setdefault(row, {})
        cells[col] = cells.get(col, 0) + entry.metric(metric)
    return table

