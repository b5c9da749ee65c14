"""Pre-compiled reports rebuilt wholesale from each record snapshot."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from copilot_metrics.aggregation import views
from copilot_metrics.domain.interfaces import IReportCompiler
from copilot_metrics.domain.models import ChartType, DailyRecord, Report, ReportInfo
from copilot_metrics.utils.formatting import (
    fmt,
    fmt_day,
    fmt_pct,
    fmt_short,
    markdown_table,
    round_int,
)

from . import panels
from .charts import bucket_chart, metric, totals_chart
from .panels import feature_label

PER_USER_UNAVAILABLE = (
    "Per-user data is not available in organization-level reports. "
    "Only daily aggregates are collected, so individual breakdowns cannot "
    "be produced."
)

REPORT_CATALOG: Tuple[ReportInfo, ...] = (
    ReportInfo(id="copilot-usage", title="Copilot Usage", icon="📊"),
    ReportInfo(id="code-generation", title="Code Generation", icon="⚡"),
    ReportInfo(id="executive-summary", title="Executive Summary", icon="📋"),
    ReportInfo(id="usage-trends", title="Usage Trends", icon="📈"),
    ReportInfo(id="feature-adoption", title="Feature Adoption", icon="🤖"),
    ReportInfo(id="language-breakdown", title="Language Breakdown", icon="💻"),
    ReportInfo(id="model-usage", title="Model Usage", icon="🧠"),
    ReportInfo(id="ide-distribution", title="IDE Distribution", icon="🖥️"),
    ReportInfo(id="top-users", title="Top Users", icon="🏆"),
)

ReportBuilder = Callable[[Sequence[DailyRecord], ReportInfo], Report]


def compile_reports(records: Sequence[DailyRecord]) -> Dict[str, Report]:
    """Build every catalog report from ``records``; a new mapping each call."""

    return {info.id: _BUILDERS[info.id](records, info) for info in REPORT_CATALOG}


class ReportCompiler(IReportCompiler):
    """Compiles the full report set for one snapshot."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def compile(self, records: Sequence[DailyRecord]) -> Mapping[str, Report]:
        reports = compile_reports(records)
        self._logger.info(
            "reports_compiled",
            extra={"report_count": len(reports), "record_count": len(records)},
        )
        return reports

    @staticmethod
    def catalog() -> List[ReportInfo]:
        return list(REPORT_CATALOG)


# ----------------------------------------------------------------------
# Report builders
# ----------------------------------------------------------------------
def _copilot_usage(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    stats = views.summary_stats(records)
    share = views.activity_share(records)
    chat_models = views.chat_model_distribution(records)
    top_chat_model = chat_models[0].label if chat_models else "N/A"
    kpis = markdown_table(
        [
            "Avg Daily Active Users",
            "Peak DAU",
            "Agent Activity",
            "Most Used Chat Model",
        ],
        [
            [
                f"**{fmt(stats.average_daily_active_users)}**",
                f"**{fmt(stats.peak_daily_active_users)}**",
                f"**{share.agent_pct:.1f}%** of total",
                f"**{top_chat_model}**",
            ]
        ],
        centered=True,
    )
    return Report(
        id=info.id,
        title=info.title,
        markdown=f"# Copilot IDE Usage\n\n{kpis}",
        chart_specs=tuple(panels.usage_dashboard(records)),
    )


def _code_generation(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    stats = views.summary_stats(records)
    agent = views.agent_initiated_code_changes(records)
    user = views.user_initiated_code_changes(records)
    loc_changed = stats.total_loc_added + stats.total_loc_deleted
    avg_agent_deletions = (
        round_int(agent.deleted / stats.total_days) if stats.total_days else 0
    )
    kpis = markdown_table(
        [
            "Lines of Code Changed with AI",
            "Agent Contribution",
            "Avg Agent Deletions/Day",
        ],
        [
            [
                f"**{fmt_short(loc_changed)}** ({fmt(loc_changed)})",
                f"**{fmt_pct(agent.changed, loc_changed)}%**",
                f"**{fmt(avg_agent_deletions)}**",
            ]
        ],
        centered=True,
    )
    charts = [
        panels.daily_loc_chart(records),
        totals_chart(
            "User-Initiated Code Changes",
            ["Suggested to Add", "Actually Added"],
            [user.suggested, user.added],
            "Lines of Code",
        ),
        totals_chart(
            "Agent-Initiated Code Changes",
            ["Added", "Deleted"],
            [agent.added, agent.deleted],
            "Lines of Code",
        ),
        panels.code_changes_chart(
            "User-Initiated Code Changes per Model",
            views.user_code_changes_by_model(records),
            user=True,
        ),
        panels.code_changes_chart(
            "Agent-Initiated Code Changes per Model",
            views.agent_code_changes_by_model(records),
            user=False,
        ),
        panels.code_changes_chart(
            "User-Initiated Code Changes per Language",
            views.user_code_changes_by_language(records),
            user=True,
        ),
        panels.code_changes_chart(
            "Agent-Initiated Code Changes per Language",
            views.agent_code_changes_by_language(records),
            user=False,
        ),
    ]
    return Report(
        id=info.id,
        title=info.title,
        markdown=f"# IDE Code Generation\n\n{kpis}",
        chart_specs=tuple(charts),
    )


def _executive_summary(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    stats = views.summary_stats(records)
    share = views.activity_share(records)
    user_days = sum(trend.active_users for trend in views.day_trends(records))
    per_user = stats.total_interactions / user_days if user_days else 0.0
    loc_per_day = (
        round_int(stats.total_loc_added / stats.total_days) if stats.total_days else 0
    )
    table = markdown_table(
        ["Metric", "Value"],
        [
            ["Peak Daily Active Users", fmt(stats.peak_daily_active_users)],
            ["Total Interactions", fmt(stats.total_interactions)],
            ["Code Generations", fmt(stats.total_code_generated)],
            ["Lines Added", fmt(stats.total_loc_added)],
            ["Lines Deleted", fmt(stats.total_loc_deleted)],
            ["Agent Activity", fmt(share.agent_activity)],
            ["Chat Activity (interactions)", fmt(share.chat_interactions)],
        ],
    )
    markdown = "\n".join(
        [
            "# 📊 Executive Summary",
            _period_line(stats.period_start, stats.period_end),
            "",
            table,
            "",
            "## Key Insights",
            f"- Average **{per_user:.1f}** interactions per active user per day.",
            f"- Agent features account for **{share.agent_pct:.1f}%** of total "
            f"activity; user-initiated features for **{share.user_pct:.1f}%**.",
            f"- Average **{fmt(loc_per_day)}** lines of code added per day.",
        ]
    )
    return Report(
        id=info.id,
        title=info.title,
        markdown=markdown,
        chart_specs=(panels.activity_split_chart(records),),
    )


def _usage_trends(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    stats = views.summary_stats(records)
    trends = views.day_trends(records)
    table = markdown_table(
        ["Day", "Active Users", "Interactions", "Code Generated", "LOC Added"],
        [
            [
                t.day.isoformat(),
                fmt(t.active_users),
                fmt(t.interactions),
                fmt(t.code_generated),
                fmt(t.loc_added),
            ]
            for t in trends
        ],
    )
    lines = [
        "# 📈 Usage Trends",
        _period_line(stats.period_start, stats.period_end),
        "",
        table,
        "",
        "## Summary",
    ]
    if trends:
        peak_users = max(trends, key=lambda t: t.active_users)
        peak_interactions = max(trends, key=lambda t: t.interactions)
        lines.append(
            f"- Peak active users: **{fmt(peak_users.active_users)}** "
            f"on {peak_users.day.isoformat()}"
        )
        lines.append(
            f"- Peak interactions: **{fmt(peak_interactions.interactions)}** "
            f"on {peak_interactions.day.isoformat()}"
        )
    else:
        lines.append("- No usage data in the current window.")
    return Report(
        id=info.id,
        title=info.title,
        markdown="\n".join(lines),
        chart_specs=(panels.trend_chart(records),),
    )


def _feature_adoption(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    features = views.feature_usage(records)
    table = markdown_table(
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
    lines = ["# 🤖 Feature Adoption", "", table, "", "## Insights"]
    if features:
        lines.append(
            f"- Most used feature: **{feature_label(features[0])}** with "
            f"{fmt(features[0].interactions)} interactions."
        )
    lines.append(f"- {len(features)} distinct features in use across the organization.")
    return Report(
        id=info.id,
        title=info.title,
        markdown="\n".join(lines),
        chart_specs=(
            panels.feature_chart(
                records, "Feature Adoption", with_code_generated=True
            ),
        ),
    )


def _language_breakdown(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    result = views.language_usage(records)
    table = panels.language_table(result)
    markdown = "\n".join(
        [
            "# 💻 Language Breakdown",
            "",
            f"Top {views.LEADERBOARD_SIZE} languages by code generation activity.",
            "",
            table,
        ]
    )
    chart = bucket_chart(
        "Language Breakdown",
        result.top,
        [
            ("Code Generated", metric(views.CODE_GENERATED)),
            ("LOC Added", metric(views.LOC_ADDED)),
        ],
    )
    return Report(id=info.id, title=info.title, markdown=markdown, chart_specs=(chart,))


def _model_usage(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    result = views.model_usage(records)
    table = panels.model_table(result)
    markdown = "\n".join(
        [
            "# 🧠 Model Usage",
            "",
            f"Top {views.LEADERBOARD_SIZE} models by interaction count.",
            "",
            table,
        ]
    )
    chart = bucket_chart(
        "Model Usage",
        result.top,
        [
            ("Interactions", metric(views.INTERACTIONS)),
            ("Code Generated", metric(views.CODE_GENERATED)),
        ],
    )
    return Report(id=info.id, title=info.title, markdown=markdown, chart_specs=(chart,))


def _ide_distribution(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    ides = views.ide_usage(records)
    table = markdown_table(
        ["IDE", "Interactions", "Code Generated"],
        [[i.label, fmt(i.interactions), fmt(i.code_generated)] for i in ides],
    )
    chart = bucket_chart(
        "IDE Distribution",
        ides,
        [("Interactions", metric(views.INTERACTIONS))],
        chart_type=ChartType.PIE,
    )
    return Report(
        id=info.id,
        title=info.title,
        markdown=f"# 🖥️ IDE Distribution\n\n{table}",
        chart_specs=(chart,),
    )


def _top_users(records: Sequence[DailyRecord], info: ReportInfo) -> Report:
    stats = views.summary_stats(records)
    table = markdown_table(
        ["Metric", "Value"],
        [
            ["Peak Daily Active Users", fmt(stats.peak_daily_active_users)],
            ["Total Interactions", fmt(stats.total_interactions)],
            ["Total Code Generations", fmt(stats.total_code_generated)],
        ],
    )
    markdown = "\n".join(
        [
            "# 🏆 Top Users",
            "",
            f"> {PER_USER_UNAVAILABLE}",
            "",
            "## Organization Summary",
            table,
        ]
    )
    return Report(id=info.id, title=info.title, markdown=markdown)


def _period_line(start, end) -> str:
    return f"**Period:** {fmt_day(start)} to {fmt_day(end)}"


_BUILDERS: Dict[str, ReportBuilder] = {
    "copilot-usage": _copilot_usage,
    "code-generation": _code_generation,
    "executive-summary": _executive_summary,
    "usage-trends": _usage_trends,
    "feature-adoption": _feature_adoption,
    "language-breakdown": _language_breakdown,
    "model-usage": _model_usage,
    "ide-distribution": _ide_distribution,
    "top-users": _top_users,
}
