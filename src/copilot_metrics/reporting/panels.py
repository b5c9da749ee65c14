"""Reusable chart panels built from the shared views.

Reports and ad-hoc query answers draw the same panels with different titles
and sizes; both go through these helpers so their numbers always match.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from copilot_metrics.aggregation import views
from copilot_metrics.aggregation.topn import top_n_with_other
from copilot_metrics.domain.categories import display_name
from copilot_metrics.domain.models import (
    AggregationBucket,
    ChartSpec,
    ChartType,
    Dataset,
    DailyRecord,
    TopNResult,
)
from copilot_metrics.utils.formatting import fmt, markdown_table

from .charts import (
    bucket_chart,
    leaderboard_chart,
    matrix_chart,
    metric,
    series_chart,
    stacked_chart,
    totals_chart,
)


def feature_label(bucket: AggregationBucket) -> str:
    return display_name(bucket.label)


def language_table(result: TopNResult) -> str:
    rows = [
        [bucket.label, fmt(bucket.code_generated), fmt(bucket.loc_added)]
        for bucket in result.top
    ]
    if result.other_value:
        rows.append(["All other languages", fmt(result.other_value), "-"])
    return markdown_table(["Language", "Code Generated", "LOC Added"], rows)


def model_table(result: TopNResult) -> str:
    rows = [
        [bucket.label, fmt(bucket.interactions), fmt(bucket.code_generated)]
        for bucket in result.top
    ]
    if result.other_value:
        rows.append(["All other models", fmt(result.other_value), "-"])
    return markdown_table(["Model", "Interactions", "Code Generated"], rows)


def daily_active_users_chart(
    records: Sequence[DailyRecord], title: str = "Daily Active Users"
) -> ChartSpec:
    return series_chart(title, views.daily_active_users(records), "Active Users")


def weekly_active_users_chart(
    records: Sequence[DailyRecord], title: str = "Weekly Active Users"
) -> ChartSpec:
    return series_chart(
        title, views.weekly_active_users(records), "Weekly Active Users"
    )


def avg_chat_requests_chart(
    records: Sequence[DailyRecord],
    title: str = "Average Chat Requests per Active User",
) -> ChartSpec:
    return series_chart(
        title, views.avg_chat_requests_per_user(records), "Avg Requests"
    )


def chat_mode_chart(
    records: Sequence[DailyRecord], title: str = "Requests per Chat Mode"
) -> ChartSpec:
    return stacked_chart(title, views.requests_per_chat_mode(records))


def code_completions_chart(
    records: Sequence[DailyRecord], title: str = "Code Completions"
) -> ChartSpec:
    return stacked_chart(
        title,
        views.code_completions(records),
        chart_type=ChartType.LINE,
        stacked=False,
    )


def acceptance_rate_chart(
    records: Sequence[DailyRecord],
    title: str = "Code Completions Acceptance Rate",
) -> ChartSpec:
    return series_chart(
        title, views.completion_acceptance_rate(records), "Acceptance Rate (%)"
    )


def model_per_day_chart(
    records: Sequence[DailyRecord], title: str = "Model Usage per Day"
) -> ChartSpec:
    return stacked_chart(title, views.model_usage_per_day(records))


def language_per_day_chart(
    records: Sequence[DailyRecord], title: str = "Language Usage per Day"
) -> ChartSpec:
    return stacked_chart(title, views.language_usage_per_day(records))


def chat_model_pie(
    records: Sequence[DailyRecord],
    title: str = "Chat Model Usage",
    limit: Optional[int] = None,
) -> ChartSpec:
    ranked = views.chat_model_distribution(records)
    size = len(ranked) if limit is None else limit
    return leaderboard_chart(
        title,
        top_n_with_other(ranked, views.INTERACTIONS, size),
        "Interactions",
        metric(views.INTERACTIONS),
    )


def language_pie(
    records: Sequence[DailyRecord],
    title: str = "Language Usage",
    limit: Optional[int] = None,
) -> ChartSpec:
    ranked = views.language_distribution(records)
    size = len(ranked) if limit is None else limit
    return leaderboard_chart(
        title,
        top_n_with_other(ranked, views.CODE_GENERATED, size),
        "Code Generations",
        metric(views.CODE_GENERATED),
    )


def model_per_chat_mode_chart(
    records: Sequence[DailyRecord], title: str = "Model Usage per Chat Mode"
) -> ChartSpec:
    return matrix_chart(title, views.model_usage_per_chat_mode(records))


def model_per_language_chart(
    records: Sequence[DailyRecord], title: str = "Model Usage per Language"
) -> ChartSpec:
    return matrix_chart(title, views.model_usage_per_language(records))


def daily_loc_chart(
    records: Sequence[DailyRecord],
    title: str = "Daily Total of Lines Added and Deleted",
) -> ChartSpec:
    return stacked_chart(
        title, views.daily_loc_added_deleted(records), stacked=False
    )


def user_vs_agent_chart(
    records: Sequence[DailyRecord], title: str = "User vs Agent Code Changes"
) -> ChartSpec:
    user = views.user_initiated_code_changes(records)
    agent = views.agent_initiated_code_changes(records)
    return totals_chart(
        title,
        ["User Suggested", "User Added", "Agent Added", "Agent Deleted"],
        [user.suggested, user.added, agent.added, agent.deleted],
        "Lines of Code",
    )


def code_changes_chart(
    title: str,
    buckets: Sequence[AggregationBucket],
    *,
    user: bool,
    limit: Optional[int] = None,
) -> ChartSpec:
    shown = list(buckets if limit is None else buckets[:limit])
    if user:
        columns = [
            ("Suggested", metric(views.LOC_SUGGESTED)),
            ("Added", metric(views.LOC_ADDED)),
        ]
    else:
        columns = [
            ("Added", metric(views.LOC_ADDED)),
            ("Deleted", metric(views.LOC_DELETED)),
        ]
    return bucket_chart(title, shown, columns)


def feature_chart(
    records: Sequence[DailyRecord],
    title: str = "Interactions by Feature",
    *,
    with_code_generated: bool = False,
) -> ChartSpec:
    columns = [("Interactions", metric(views.INTERACTIONS))]
    if with_code_generated:
        columns.append(("Code Generated", metric(views.CODE_GENERATED)))
    return bucket_chart(
        title, views.feature_usage(records), columns, label_fn=feature_label
    )


def trend_chart(
    records: Sequence[DailyRecord], title: str = "Usage Trends"
) -> ChartSpec:
    trends = views.day_trends(records)
    return ChartSpec(
        title=title,
        type=ChartType.LINE,
        labels=[trend.day.isoformat() for trend in trends],
        datasets=[
            Dataset(label="Active Users", data=[t.active_users for t in trends]),
            Dataset(label="Interactions", data=[t.interactions for t in trends]),
        ],
    )


def activity_split_chart(
    records: Sequence[DailyRecord], title: str = "Activity Split"
) -> ChartSpec:
    stats = views.summary_stats(records)
    return totals_chart(
        title,
        ["Interactions", "Code Generations"],
        [stats.total_interactions, stats.total_code_generated],
        "Activity",
        chart_type=ChartType.DOUGHNUT,
    )


def usage_dashboard(records: Sequence[DailyRecord]) -> List[ChartSpec]:
    """Every panel of the IDE usage dashboard, in display order."""

    return [
        daily_active_users_chart(records, "IDE Daily Active Users"),
        weekly_active_users_chart(records, "IDE Weekly Active Users"),
        avg_chat_requests_chart(records),
        chat_mode_chart(records),
        code_completions_chart(records),
        acceptance_rate_chart(records),
        model_per_day_chart(records),
        chat_model_pie(records),
        model_per_chat_mode_chart(records),
        language_per_day_chart(records),
        language_pie(records),
        model_per_language_chart(records),
    ]
