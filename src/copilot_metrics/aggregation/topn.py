"""Leaderboard bucketing: the top ``n`` categories plus a summed remainder."""

from __future__ import annotations

from typing import Sequence

from copilot_metrics.domain.models import AggregationBucket, TopNResult

from .categorical import SortKey, rank, sort_value


def top_n_with_other(
    buckets: Sequence[AggregationBucket], sort_key: SortKey, n: int
) -> TopNResult:
    """Keep the ``n`` largest buckets and fold the rest into ``other_value``.

    Ties keep their input order. When there are ``n`` buckets or fewer the
    remainder is zero; there is never a padded "Other" bucket in ``top``.
    """

    if n < 0:
        raise ValueError("n must be non-negative")
    ordered = rank(buckets, sort_key)
    top = tuple(ordered[:n])
    other_value = sum(sort_value(bucket, sort_key) for bucket in ordered[n:])
    return TopNResult(top=top, other_value=other_value)
