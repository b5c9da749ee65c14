"""Named views shared by the report compiler and the query dispatcher.

Every view is a pure function of a record window and is composed only from
the field, categorical, top-N and time-series primitives, so a cached report
and a live query asking the same question always agree.
"""

from __future__ import annotations

from typing import List, Sequence

from copilot_metrics.domain.categories import (
    AGENT_FEATURES,
    CHAT_MODES,
    CODE_COMPLETION,
    FEATURE_DISPLAY,
    USER_INITIATED_FEATURES,
)
from copilot_metrics.domain.models import (
    ActivityShare,
    AggregationBucket,
    CategoryKey,
    CodeChangeTotals,
    DailyRecord,
    DailySeries,
    DayTrend,
    ShareMatrix,
    StackedSeries,
    SummaryStats,
    TopNResult,
)
from copilot_metrics.utils.formatting import percentage, round_half_up

from .categorical import (
    by_category,
    cross_tabulate,
    feature_key,
    in_features,
    language_key,
    metric_sum,
    model_key,
    ide_key,
    not_in_features,
    rank,
)
from .fields import average_field, date_range, peak_field, sum_field, sum_nested
from .timeseries import (
    TOP_K,
    daily_series,
    field_series,
    normalized_share_series,
    per_day_category_totals,
    records_by_day,
    rolling_average,
    share_matrix,
)
from .topn import top_n_with_other

INTERACTIONS = "user_initiated_interaction_count"
CODE_GENERATED = "code_generation_activity_count"
CODE_ACCEPTED = "code_acceptance_activity_count"
LOC_ADDED = "loc_added_sum"
LOC_DELETED = "loc_deleted_sum"
LOC_SUGGESTED = "loc_suggested_to_add_sum"
DAILY_ACTIVE_USERS = "daily_active_users"

BY_FEATURE = "totals_by_feature"
BY_LANGUAGE = "totals_by_language_feature"
BY_MODEL = "totals_by_model_feature"
BY_IDE = "totals_by_ide"
BY_LANGUAGE_MODEL = "totals_by_language_model"

LEADERBOARD_SIZE = 15


# ----------------------------------------------------------------------
# Window totals
# ----------------------------------------------------------------------
def summary_stats(records: Sequence[DailyRecord]) -> SummaryStats:
    start, end = date_range(records)
    return SummaryStats(
        period_start=start,
        period_end=end,
        peak_daily_active_users=peak_field(records, DAILY_ACTIVE_USERS),
        average_daily_active_users=average_field(records, DAILY_ACTIVE_USERS),
        total_interactions=sum_field(records, INTERACTIONS),
        total_code_generated=sum_field(records, CODE_GENERATED),
        total_code_accepted=sum_field(records, CODE_ACCEPTED),
        total_loc_added=sum_field(records, LOC_ADDED),
        total_loc_deleted=sum_field(records, LOC_DELETED),
        total_days=len(records),
    )


def activity_share(records: Sequence[DailyRecord]) -> ActivityShare:
    """Agent vs user-initiated feature activity (interactions + generations)."""

    activity = metric_sum(INTERACTIONS, CODE_GENERATED)
    buckets = by_category(
        records, BY_FEATURE, feature_key, [INTERACTIONS, CODE_GENERATED]
    )
    return ActivityShare(
        agent_activity=sum(
            activity(b) for b in buckets if b.category_key in AGENT_FEATURES
        ),
        user_activity=sum(
            activity(b) for b in buckets if b.category_key in USER_INITIATED_FEATURES
        ),
        chat_interactions=sum(
            b.interactions for b in buckets if b.category_key in CHAT_MODES
        ),
        total_activity=sum(activity(b) for b in buckets),
    )


def day_trends(records: Sequence[DailyRecord]) -> List[DayTrend]:
    grouped = records_by_day(records)
    return [
        DayTrend(
            day=day,
            active_users=sum_field(grouped[day], DAILY_ACTIVE_USERS),
            interactions=sum_field(grouped[day], INTERACTIONS),
            code_generated=sum_field(grouped[day], CODE_GENERATED),
            loc_added=sum_field(grouped[day], LOC_ADDED),
            loc_deleted=sum_field(grouped[day], LOC_DELETED),
        )
        for day in sorted(grouped)
    ]


# ----------------------------------------------------------------------
# Categorical breakdowns
# ----------------------------------------------------------------------
def feature_usage(records: Sequence[DailyRecord]) -> List[AggregationBucket]:
    buckets = by_category(
        records,
        BY_FEATURE,
        feature_key,
        [INTERACTIONS, CODE_GENERATED, CODE_ACCEPTED, LOC_ADDED, LOC_DELETED],
    )
    return rank(buckets, INTERACTIONS)


def language_usage(
    records: Sequence[DailyRecord], limit: int = LEADERBOARD_SIZE
) -> TopNResult:
    buckets = by_category(
        records,
        BY_LANGUAGE,
        language_key,
        [CODE_GENERATED, CODE_ACCEPTED, LOC_ADDED],
    )
    return top_n_with_other(buckets, CODE_GENERATED, limit)


def model_usage(
    records: Sequence[DailyRecord], limit: int = LEADERBOARD_SIZE
) -> TopNResult:
    buckets = by_category(
        records, BY_MODEL, model_key, [INTERACTIONS, CODE_GENERATED]
    )
    return top_n_with_other(buckets, INTERACTIONS, limit)


def ide_usage(records: Sequence[DailyRecord]) -> List[AggregationBucket]:
    buckets = by_category(records, BY_IDE, ide_key, [INTERACTIONS, CODE_GENERATED])
    return rank(buckets, INTERACTIONS)


def chat_model_distribution(records: Sequence[DailyRecord]) -> List[AggregationBucket]:
    buckets = by_category(
        records,
        BY_MODEL,
        model_key,
        [INTERACTIONS],
        not_in_features([CODE_COMPLETION]),
    )
    return rank(buckets, INTERACTIONS)


def language_distribution(records: Sequence[DailyRecord]) -> List[AggregationBucket]:
    buckets = by_category(records, BY_LANGUAGE, language_key, [CODE_GENERATED])
    return rank(buckets, CODE_GENERATED)


def user_initiated_code_changes(records: Sequence[DailyRecord]) -> CodeChangeTotals:
    return _code_changes(records, in_features(USER_INITIATED_FEATURES))


def agent_initiated_code_changes(records: Sequence[DailyRecord]) -> CodeChangeTotals:
    return _code_changes(records, in_features(AGENT_FEATURES))


def user_code_changes_by_model(
    records: Sequence[DailyRecord],
) -> List[AggregationBucket]:
    return _changes_by(records, BY_MODEL, model_key, user=True)


def agent_code_changes_by_model(
    records: Sequence[DailyRecord],
) -> List[AggregationBucket]:
    return _changes_by(records, BY_MODEL, model_key, user=False)


def user_code_changes_by_language(
    records: Sequence[DailyRecord],
) -> List[AggregationBucket]:
    return _changes_by(records, BY_LANGUAGE, language_key, user=True)


def agent_code_changes_by_language(
    records: Sequence[DailyRecord],
) -> List[AggregationBucket]:
    return _changes_by(records, BY_LANGUAGE, language_key, user=False)


# ----------------------------------------------------------------------
# Daily series
# ----------------------------------------------------------------------
def daily_active_users(records: Sequence[DailyRecord]) -> DailySeries:
    return field_series(records, DAILY_ACTIVE_USERS)


def weekly_active_users(records: Sequence[DailyRecord]) -> DailySeries:
    return rolling_average(daily_active_users(records))


def avg_chat_requests_per_user(records: Sequence[DailyRecord]) -> DailySeries:
    not_completion = not_in_features([CODE_COMPLETION])

    def average(day_records: Sequence[DailyRecord]) -> float:
        chat = sum_nested(day_records, BY_FEATURE, INTERACTIONS, not_completion)
        users = sum_field(day_records, DAILY_ACTIVE_USERS) or 1
        return round_half_up(chat / users, 2)

    return daily_series(records, average)


def requests_per_chat_mode(records: Sequence[DailyRecord]) -> StackedSeries:
    return per_day_category_totals(
        records,
        BY_FEATURE,
        feature_key,
        INTERACTIONS,
        CHAT_MODES,
        labels=FEATURE_DISPLAY,
    )


def code_completions(records: Sequence[DailyRecord]) -> StackedSeries:
    """Completions shown and accepted per day."""

    only_completion = in_features([CODE_COMPLETION])
    shown = daily_series(
        records,
        lambda rs: sum_nested(rs, BY_FEATURE, CODE_GENERATED, only_completion),
    )
    accepted = daily_series(
        records,
        lambda rs: sum_nested(rs, BY_FEATURE, CODE_ACCEPTED, only_completion),
    )
    return StackedSeries(
        days=shown.days,
        series={"Shown": list(shown.values), "Accepted": list(accepted.values)},
    )


def completion_acceptance_rate(records: Sequence[DailyRecord]) -> DailySeries:
    completions = code_completions(records)
    shown = completions.series["Shown"]
    accepted = completions.series["Accepted"]
    return DailySeries(
        days=completions.days,
        values=tuple(percentage(a, s) for a, s in zip(accepted, shown)),
    )


def daily_loc_added_deleted(records: Sequence[DailyRecord]) -> StackedSeries:
    added = field_series(records, LOC_ADDED)
    deleted = field_series(records, LOC_DELETED)
    return StackedSeries(
        days=added.days,
        series={"Added": list(added.values), "Deleted": list(deleted.values)},
    )


def model_usage_per_day(records: Sequence[DailyRecord]) -> StackedSeries:
    return normalized_share_series(
        records, BY_MODEL, model_key, [INTERACTIONS, CODE_GENERATED], TOP_K
    )


def language_usage_per_day(records: Sequence[DailyRecord]) -> StackedSeries:
    return normalized_share_series(
        records, BY_LANGUAGE, language_key, [CODE_GENERATED], TOP_K
    )


# ----------------------------------------------------------------------
# Share matrices
# ----------------------------------------------------------------------
def model_usage_per_chat_mode(records: Sequence[DailyRecord]) -> ShareMatrix:
    chat_only = in_features(CHAT_MODES)
    models = _leaders(
        by_category(records, BY_MODEL, model_key, [INTERACTIONS], chat_only),
        INTERACTIONS,
    )
    table = cross_tabulate(
        records, BY_MODEL, feature_key, model_key, INTERACTIONS, chat_only
    )
    return share_matrix(
        table,
        CHAT_MODES,
        models,
        row_labels=FEATURE_DISPLAY,
    )


def model_usage_per_language(records: Sequence[DailyRecord]) -> ShareMatrix:
    languages = _leaders(
        by_category(records, BY_LANGUAGE_MODEL, language_key, [CODE_GENERATED]),
        CODE_GENERATED,
    )
    in_top_languages = set(languages)
    models = _leaders(
        by_category(
            records,
            BY_LANGUAGE_MODEL,
            model_key,
            [CODE_GENERATED],
            lambda entry: entry.language in in_top_languages,
        ),
        CODE_GENERATED,
    )
    table = cross_tabulate(
        records, BY_LANGUAGE_MODEL, language_key, model_key, CODE_GENERATED
    )
    return share_matrix(table, languages, models)


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------
def _code_changes(records: Sequence[DailyRecord], entry_filter) -> CodeChangeTotals:
    return CodeChangeTotals(
        suggested=sum_nested(records, BY_FEATURE, LOC_SUGGESTED, entry_filter),
        added=sum_nested(records, BY_FEATURE, LOC_ADDED, entry_filter),
        deleted=sum_nested(records, BY_FEATURE, LOC_DELETED, entry_filter),
    )


def _changes_by(
    records: Sequence[DailyRecord], records_field: str, key_fn, *, user: bool
) -> List[AggregationBucket]:
    if user:
        fields = [LOC_SUGGESTED, LOC_ADDED]
        entry_filter = not_in_features(AGENT_FEATURES)
    else:
        fields = [LOC_ADDED, LOC_DELETED]
        entry_filter = in_features(AGENT_FEATURES)
    buckets = by_category(records, records_field, key_fn, fields, entry_filter)
    return rank(buckets, metric_sum(*fields))


def _leaders(
    buckets: Sequence[AggregationBucket], metric: str
) -> List[CategoryKey]:
    leaders = top_n_with_other(buckets, metric, TOP_K).top
    return [bucket.category_key for bucket in leaders]
