"""Chart spec builders for the shapes views come in."""

from __future__ import annotations

from typing import Callable, Sequence, Tuple

from copilot_metrics.domain.categories import OTHER_LABEL
from copilot_metrics.domain.models import (
    AggregationBucket,
    ChartSpec,
    ChartType,
    DailySeries,
    Dataset,
    ShareMatrix,
    StackedSeries,
    TopNResult,
)

Column = Tuple[str, Callable[[AggregationBucket], float]]
LabelFn = Callable[[AggregationBucket], str]


def _bucket_label(bucket: AggregationBucket) -> str:
    return bucket.label


def series_chart(
    title: str,
    series: DailySeries,
    label: str,
    chart_type: ChartType = ChartType.LINE,
) -> ChartSpec:
    return ChartSpec(
        title=title,
        type=chart_type,
        labels=series.labels,
        datasets=[Dataset(label=label, data=list(series.values))],
    )


def stacked_chart(
    title: str,
    series: StackedSeries,
    *,
    chart_type: ChartType = ChartType.BAR,
    stacked: bool = True,
) -> ChartSpec:
    return ChartSpec(
        title=title,
        type=chart_type,
        stacked=stacked,
        labels=series.labels,
        datasets=[
            Dataset(label=name, data=list(values))
            for name, values in series.series.items()
        ],
    )


def matrix_chart(title: str, matrix: ShareMatrix) -> ChartSpec:
    return ChartSpec(
        title=title,
        type=ChartType.BAR,
        labels=list(matrix.rows),
        datasets=[
            Dataset(label=name, data=list(values))
            for name, values in matrix.series.items()
        ],
    )


def bucket_chart(
    title: str,
    buckets: Sequence[AggregationBucket],
    columns: Sequence[Column],
    *,
    chart_type: ChartType = ChartType.BAR,
    label_fn: LabelFn = _bucket_label,
) -> ChartSpec:
    return ChartSpec(
        title=title,
        type=chart_type,
        labels=[label_fn(bucket) for bucket in buckets],
        datasets=[
            Dataset(label=name, data=[value(bucket) for bucket in buckets])
            for name, value in columns
        ],
    )


def leaderboard_chart(
    title: str,
    result: TopNResult,
    label: str,
    value: Callable[[AggregationBucket], float],
    *,
    chart_type: ChartType = ChartType.PIE,
    label_fn: LabelFn = _bucket_label,
    other_label: str = OTHER_LABEL,
) -> ChartSpec:
    """Single-dataset chart of a leaderboard; the remainder slice only if nonzero."""

    labels = [label_fn(bucket) for bucket in result.top]
    data = [value(bucket) for bucket in result.top]
    if result.other_value > 0:
        labels.append(other_label)
        data.append(result.other_value)
    return ChartSpec(
        title=title,
        type=chart_type,
        labels=labels,
        datasets=[Dataset(label=label, data=data)],
    )


def totals_chart(
    title: str,
    labels: Sequence[str],
    values: Sequence[float],
    dataset_label: str,
    chart_type: ChartType = ChartType.BAR,
) -> ChartSpec:
    return ChartSpec(
        title=title,
        type=chart_type,
        labels=list(labels),
        datasets=[Dataset(label=dataset_label, data=list(values))],
    )


def metric(name: str) -> Callable[[AggregationBucket], float]:
    return lambda bucket: bucket.value(name)

