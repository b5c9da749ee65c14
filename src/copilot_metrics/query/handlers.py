"""Response builders for each dispatcher intent."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from copilot_metrics.aggregation import views
from copilot_metrics.aggregation.topn import top_n_with_other
from copilot_metrics.domain.models import (
    AggregationBucket,
    ChartType,
    DailyRecord,
    QueryResponse,
    SummaryStats,
    TopNResult,
)
from copilot_metrics.reporting import panels
from copilot_metrics.reporting.charts import bucket_chart, metric
from copilot_metrics.reporting.compiler import PER_USER_UNAVAILABLE
from copilot_metrics.reporting.panels import feature_label
from copilot_metrics.utils.formatting import fmt, fmt_day, fmt_pct, markdown_table

from .intents import Intent, mentioned_handle

Handler = Callable[[Sequence[DailyRecord], str], QueryResponse]

COMPOSITE_TOP = 10
CODE_TOP_MODELS = 8
GENERIC_TOP = 8
SUPPORTED_TOPICS = "trends, languages, models, features, IDEs, or an overall summary"


# ----------------------------------------------------------------------
# Composite reports
# ----------------------------------------------------------------------
def language_report(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    distribution = views.language_distribution(records)
    leaders = top_n_with_other(distribution, views.CODE_GENERATED, COMPOSITE_TOP)
    markdown = "\n".join(
        [
            "# Language Adoption Report",
            "",
            _share_table(
                ["Language", "Code Generations", "% of Total"],
                leaders,
                views.CODE_GENERATED,
                "All other languages",
            ),
        ]
    )
    charts = (
        panels.language_pie(records, "Language Distribution", limit=COMPOSITE_TOP),
        panels.language_per_day_chart(records, "Language Usage Trend (%)"),
        panels.code_changes_chart(
            "User-Initiated LOC by Language",
            views.user_code_changes_by_language(records),
            user=True,
            limit=COMPOSITE_TOP,
        ),
        panels.code_changes_chart(
            "Agent-Initiated LOC by Language",
            views.agent_code_changes_by_language(records),
            user=False,
            limit=COMPOSITE_TOP,
        ),
    )
    return QueryResponse(
        intent=Intent.LANGUAGE_REPORT.value, markdown=markdown, chart_specs=charts
    )


def model_report(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    distribution = views.chat_model_distribution(records)
    leaders = top_n_with_other(distribution, views.INTERACTIONS, COMPOSITE_TOP)
    markdown = "\n".join(
        [
            "# Model Usage Report",
            "",
            _share_table(
                ["Model", "Interactions", "% of Total"],
                leaders,
                views.INTERACTIONS,
                "All other models",
            ),
        ]
    )
    charts = (
        panels.chat_model_pie(records, "Chat Model Distribution", limit=COMPOSITE_TOP),
        panels.model_per_day_chart(records, "Model Usage Trend (%)"),
        panels.model_per_chat_mode_chart(records, "Model Usage per Chat Mode (%)"),
        panels.code_changes_chart(
            "Agent LOC by Model",
            views.agent_code_changes_by_model(records),
            user=False,
            limit=COMPOSITE_TOP,
        ),
    )
    return QueryResponse(
        intent=Intent.MODEL_REPORT.value, markdown=markdown, chart_specs=charts
    )


def feature_report(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    features = views.feature_usage(records)
    stats = views.summary_stats(records)
    agent = views.agent_initiated_code_changes(records)
    loc_changed = stats.total_loc_added + stats.total_loc_deleted
    markdown = "\n".join(
        [
            "# Feature & Agent Adoption Report",
            "",
            _feature_table(features),
            "",
            f"> **Agent Contribution:** {fmt_pct(agent.changed, loc_changed)}% "
            "of all lines changed",
        ]
    )
    charts = (
        panels.feature_chart(records),
        panels.chat_mode_chart(records, "Requests per Chat Mode (Daily)"),
        panels.user_vs_agent_chart(records),
        bucket_chart(
            "Feature LOC Contribution",
            features,
            [("LOC Added", metric(views.LOC_ADDED))],
            chart_type=ChartType.PIE,
            label_fn=feature_label,
        ),
    )
    return QueryResponse(
        intent=Intent.FEATURE_REPORT.value, markdown=markdown, chart_specs=charts
    )


def usage_report(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    stats = views.summary_stats(records)
    weekly = views.weekly_active_users(records)
    avg_chat = views.avg_chat_requests_per_user(records)
    mean_chat = sum(avg_chat.values) / len(avg_chat.values) if avg_chat.values else 0.0
    markdown = "\n".join(
        [
            "# Usage Trends Report",
            "",
            _period_line(stats),
            "",
            f"- Peak daily active users: **{fmt(stats.peak_daily_active_users)}**",
            f"- Peak weekly active users: **{fmt(max(weekly.values, default=0))}**",
            f"- Average chat requests per user: **{mean_chat:.1f}**",
        ]
    )
    charts = (
        panels.daily_active_users_chart(records),
        panels.weekly_active_users_chart(
            records, "Weekly Active Users (7-day rolling)"
        ),
        panels.avg_chat_requests_chart(records, "Avg Chat Requests per Active User"),
        panels.code_completions_chart(records, "Code Completions (Shown vs Accepted)"),
    )
    return QueryResponse(
        intent=Intent.USAGE_REPORT.value, markdown=markdown, chart_specs=charts
    )


def code_report(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    stats = views.summary_stats(records)
    user = views.user_initiated_code_changes(records)
    agent = views.agent_initiated_code_changes(records)
    table = markdown_table(
        ["Metric", "Value"],
        [
            ["Total Lines Added", fmt(stats.total_loc_added)],
            ["Total Lines Deleted", fmt(stats.total_loc_deleted)],
            ["User-Initiated Suggested", fmt(user.suggested)],
            ["User-Initiated Added", fmt(user.added)],
            ["Agent Added", fmt(agent.added)],
            ["Agent Deleted", fmt(agent.deleted)],
        ],
    )
    charts = (
        panels.daily_loc_chart(records, "Daily Lines Added & Deleted"),
        panels.user_vs_agent_chart(records),
        panels.code_changes_chart(
            "Agent Code Changes by Model",
            views.agent_code_changes_by_model(records),
            user=False,
            limit=CODE_TOP_MODELS,
        ),
    )
    return QueryResponse(
        intent=Intent.CODE_REPORT.value,
        markdown=f"# Code Generation Report\n\n{table}",
        chart_specs=charts,
    )


def generic_report(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    stats = views.summary_stats(records)
    table = markdown_table(
        ["Metric", "Value"],
        [
            ["Peak Daily Active Users", fmt(stats.peak_daily_active_users)],
            ["Total Interactions", fmt(stats.total_interactions)],
            ["Code Generations", fmt(stats.total_code_generated)],
            ["Lines Added", fmt(stats.total_loc_added)],
        ],
    )
    charts = (
        panels.daily_active_users_chart(records),
        panels.feature_chart(records, "Feature Usage"),
        panels.chat_model_pie(records, "Model Distribution", limit=GENERIC_TOP),
        panels.language_pie(records, "Language Distribution", limit=GENERIC_TOP),
    )
    return QueryResponse(
        intent=Intent.GENERIC_REPORT.value,
        markdown="\n".join(["# Custom Report", "", _period_line(stats), "", table]),
        chart_specs=charts,
    )


# ----------------------------------------------------------------------
# Per-individual questions (never answerable from organization data)
# ----------------------------------------------------------------------
def user_lookup(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    handle = mentioned_handle(prompt) or "unknown"
    return QueryResponse(
        intent=Intent.USER_LOOKUP.value,
        markdown=f"No data available for user **@{handle}**. {PER_USER_UNAVAILABLE}",
        available=False,
    )


def top_users(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    return QueryResponse(
        intent=Intent.TOP_USERS.value,
        markdown=f"# Top Users\n\nTop-user rankings are not available. "
        f"{PER_USER_UNAVAILABLE}",
        available=False,
    )


# ----------------------------------------------------------------------
# Single-topic answers
# ----------------------------------------------------------------------
def trends(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    table = markdown_table(
        ["Day", "Active Users", "Interactions", "Code Generated"],
        [
            [
                t.day.isoformat(),
                fmt(t.active_users),
                fmt(t.interactions),
                fmt(t.code_generated),
            ]
            for t in views.day_trends(records)
        ],
    )
    return QueryResponse(
        intent=Intent.TRENDS.value,
        markdown=f"# Usage Trends\n\n{table}",
        chart_specs=(panels.trend_chart(records),),
    )


def languages(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    result = views.language_usage(records)
    table = panels.language_table(result)
    chart = bucket_chart(
        "Language Breakdown",
        result.top,
        [("Code Generated", metric(views.CODE_GENERATED))],
    )
    return QueryResponse(
        intent=Intent.LANGUAGES.value,
        markdown=f"# Language Breakdown\n\n{table}",
        chart_specs=(chart,),
    )


def models(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    result = views.model_usage(records)
    table = panels.model_table(result)
    chart = bucket_chart(
        "Model Usage",
        result.top,
        [("Interactions", metric(views.INTERACTIONS))],
    )
    return QueryResponse(
        intent=Intent.MODELS.value,
        markdown=f"# Model Usage\n\n{table}",
        chart_specs=(chart,),
    )


def features(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    table = _feature_table(views.feature_usage(records))
    return QueryResponse(
        intent=Intent.FEATURES.value,
        markdown=f"# Feature Comparison\n\n{table}",
        chart_specs=(
            panels.feature_chart(
                records, "Feature Comparison", with_code_generated=True
            ),
        ),
    )


def ides(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    buckets = views.ide_usage(records)
    table = markdown_table(
        ["IDE", "Interactions", "Code Generated"],
        [[b.label, fmt(b.interactions), fmt(b.code_generated)] for b in buckets],
    )
    chart = bucket_chart(
        "IDE Distribution",
        buckets,
        [("Interactions", metric(views.INTERACTIONS))],
        chart_type=ChartType.PIE,
    )
    return QueryResponse(
        intent=Intent.IDES.value,
        markdown=f"# IDE Distribution\n\n{table}",
        chart_specs=(chart,),
    )


def summary(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    stats = views.summary_stats(records)
    share = views.activity_share(records)
    table = markdown_table(
        ["Metric", "Value"],
        [
            ["Peak Daily Active Users", fmt(stats.peak_daily_active_users)],
            ["Average Daily Active Users", fmt(stats.average_daily_active_users)],
            ["Total Interactions", fmt(stats.total_interactions)],
            ["Code Generations", fmt(stats.total_code_generated)],
            ["LOC Added", fmt(stats.total_loc_added)],
            ["LOC Deleted", fmt(stats.total_loc_deleted)],
            ["Agent Activity", fmt(share.agent_activity)],
            ["Chat Activity", fmt(share.chat_interactions)],
        ],
    )
    return QueryResponse(
        intent=Intent.SUMMARY.value,
        markdown="\n".join(["# Summary Statistics", _period_line(stats), "", table]),
        chart_specs=(panels.activity_split_chart(records),),
    )


def fallback(records: Sequence[DailyRecord], prompt: str) -> QueryResponse:
    stats = views.summary_stats(records)
    markdown = "\n".join(
        [
            "# Query Results",
            "",
            "I wasn't sure exactly what you were looking for. "
            "Here's a general summary:",
            "",
            f"- **{fmt(stats.peak_daily_active_users)}** peak daily active users, "
            f"period {fmt_day(stats.period_start)} to {fmt_day(stats.period_end)}",
            f"- **{fmt(stats.total_interactions)}** total interactions",
            f"- **{fmt(stats.total_code_generated)}** code generations",
            f"- **{fmt(stats.total_loc_added)}** lines of code added",
            "",
            f"Try asking about: {SUPPORTED_TOPICS}.",
        ]
    )
    return QueryResponse(intent=Intent.FALLBACK.value, markdown=markdown)


HANDLERS: Dict[Intent, Handler] = {
    Intent.LANGUAGE_REPORT: language_report,
    Intent.MODEL_REPORT: model_report,
    Intent.FEATURE_REPORT: feature_report,
    Intent.USAGE_REPORT: usage_report,
    Intent.CODE_REPORT: code_report,
    Intent.GENERIC_REPORT: generic_report,
    Intent.USER_LOOKUP: user_lookup,
    Intent.TOP_USERS: top_users,
    Intent.TRENDS: trends,
    Intent.LANGUAGES: languages,
    Intent.MODELS: models,
    Intent.FEATURES: features,
    Intent.IDES: ides,
    Intent.SUMMARY: summary,
    Intent.FALLBACK: fallback,
}


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------
def _share_table(
    headers: List[str], result: TopNResult, metric_name: str, other_label: str
) -> str:
    total = sum(b.value(metric_name) for b in result.top) + result.other_value
    rows = [
        [b.label, fmt(b.value(metric_name)), f"{fmt_pct(b.value(metric_name), total)}%"]
        for b in result.top
    ]
    if result.other_value:
        rows.append(
            [
                other_label,
                fmt(result.other_value),
                f"{fmt_pct(result.other_value, total)}%",
            ]
        )
    return markdown_table(headers, rows)


def _feature_table(features: Sequence[AggregationBucket]) -> str:
    return markdown_table(
        ["Feature", "Interactions", "Code Generated", "LOC Added"],
        [
            [
                feature_label(f),
                fmt(f.interactions),
                fmt(f.code_generated),
                fmt(f.loc_added),
            ]
            for f in features
        ],
    )


def _period_line(stats: SummaryStats) -> str:
    return (
        f"**Period:** {fmt_day(stats.period_start)} to {fmt_day(stats.period_end)}"
    )
