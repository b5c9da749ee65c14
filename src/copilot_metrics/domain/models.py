"""Domain value objects for daily usage metrics and their derived views."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CategoryKey = Union[str, Tuple[str, str]]

METRIC_FIELDS: Tuple[str, ...] = (
    "user_initiated_interaction_count",
    "code_generation_activity_count",
    "code_acceptance_activity_count",
    "loc_added_sum",
    "loc_deleted_sum",
    "loc_suggested_to_add_sum",
    "loc_suggested_to_delete_sum",
)


def _coerce_count(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class _MetricCounts(BaseModel):
    """Shared integer counters; missing or null values read as zero."""

    model_config = ConfigDict(frozen=True, extra="allow")

    user_initiated_interaction_count: int = 0
    code_generation_activity_count: int = 0
    code_acceptance_activity_count: int = 0
    loc_added_sum: int = 0
    loc_deleted_sum: int = 0
    loc_suggested_to_add_sum: int = 0
    loc_suggested_to_delete_sum: int = 0

    @field_validator(*METRIC_FIELDS, mode="before")
    @classmethod
    def default_missing_counts(cls, value: Any) -> int:
        return _coerce_count(value)

    def metric(self, field: str) -> int:
        """Return a numeric field by name, treating anything unknown as zero."""

        if field in type(self).model_fields:
            value = getattr(self, field)
        else:
            value = (self.model_extra or {}).get(field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return int(value)


class CategoryEntry(_MetricCounts):
    """One row of a nested per-category breakdown inside a daily record."""

    feature: Optional[str] = None
    language: Optional[str] = None
    model: Optional[str] = None
    ide: Optional[str] = None


class PullRequestTotals(BaseModel):
    """Pull request counters reported alongside a daily record."""

    model_config = ConfigDict(frozen=True, extra="allow")

    total_created: int = 0
    total_reviewed: int = 0
    total_created_by_copilot: int = 0
    total_reviewed_by_copilot: int = 0

    @field_validator(
        "total_created",
        "total_reviewed",
        "total_created_by_copilot",
        "total_reviewed_by_copilot",
        mode="before",
    )
    @classmethod
    def default_missing_counts(cls, value: Any) -> int:
        return _coerce_count(value)


class DailyRecord(_MetricCounts):
    """Organization-level usage totals for a single calendar day."""

    day: date
    enterprise_id: Optional[str] = None
    daily_active_users: int = Field(default=0, ge=0)
    totals_by_feature: Tuple[CategoryEntry, ...] = ()
    totals_by_language_feature: Tuple[CategoryEntry, ...] = ()
    totals_by_model_feature: Tuple[CategoryEntry, ...] = ()
    totals_by_ide: Tuple[CategoryEntry, ...] = ()
    totals_by_language_model: Tuple[CategoryEntry, ...] = ()
    pull_requests: Optional[PullRequestTotals] = None

    @field_validator("daily_active_users", mode="before")
    @classmethod
    def default_missing_users(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator("enterprise_id", mode="before")
    @classmethod
    def stringify_enterprise_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator(
        "totals_by_feature",
        "totals_by_language_feature",
        "totals_by_model_feature",
        "totals_by_ide",
        "totals_by_language_model",
        mode="before",
    )
    @classmethod
    def default_missing_breakdowns(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def scope_key(self) -> Tuple[str, date]:
        return (self.enterprise_id or "default", self.day)

    def entries(self, records_field: str) -> Tuple[CategoryEntry, ...]:
        value = getattr(self, records_field, None)
        if not isinstance(value, tuple):
            return ()
        return value


class AggregationBucket(BaseModel):
    """Running totals for one category key across a record window."""

    model_config = ConfigDict(frozen=True)

    category_key: CategoryKey
    metrics: Dict[str, int] = Field(default_factory=dict)

    def value(self, metric: str) -> int:
        return self.metrics.get(metric, 0)

    @property
    def label(self) -> str:
        if isinstance(self.category_key, tuple):
            return " / ".join(self.category_key)
        return self.category_key

    @property
    def interactions(self) -> int:
        return self.value("user_initiated_interaction_count")

    @property
    def code_generated(self) -> int:
        return self.value("code_generation_activity_count")

    @property
    def code_accepted(self) -> int:
        return self.value("code_acceptance_activity_count")

    @property
    def loc_added(self) -> int:
        return self.value("loc_added_sum")

    @property
    def loc_deleted(self) -> int:
        return self.value("loc_deleted_sum")

    @property
    def loc_suggested(self) -> int:
        return self.value("loc_suggested_to_add_sum")


class TopNResult(BaseModel):
    """Fixed-size leaderboard plus the summed remainder."""

    model_config = ConfigDict(frozen=True)

    top: Tuple[AggregationBucket, ...] = ()
    other_value: int = 0


class ChartType(str, Enum):
    """Chart shapes understood by the dashboard renderer."""

    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    DOUGHNUT = "doughnut"


class Dataset(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    data: List[float] = Field(default_factory=list)


class ChartSpec(BaseModel):
    """Renderer-agnostic chart description."""

    model_config = ConfigDict(frozen=True)

    title: str
    type: ChartType
    stacked: bool = False
    labels: List[str] = Field(default_factory=list)
    datasets: List[Dataset] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_dataset_lengths(self) -> "ChartSpec":
        for dataset in self.datasets:
            if len(dataset.data) != len(self.labels):
                raise ValueError(
                    f"dataset '{dataset.label}' has {len(dataset.data)} points "
                    f"for {len(self.labels)} labels"
                )
        return self


class Report(BaseModel):
    """Pre-compiled markdown and charts for one named report."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    markdown: str
    chart_specs: Tuple[ChartSpec, ...] = ()


class QueryResponse(BaseModel):
    """Answer to a free-text question about the current window."""

    model_config = ConfigDict(frozen=True)

    intent: str
    markdown: str
    chart_specs: Tuple[ChartSpec, ...] = ()
    available: bool = True

    @property
    def chart(self) -> Optional[ChartSpec]:
        return self.chart_specs[0] if self.chart_specs else None


class DailySeries(BaseModel):
    """One value per day present in the window."""

    model_config = ConfigDict(frozen=True)

    days: Tuple[date, ...] = ()
    values: Tuple[float, ...] = ()

    @model_validator(mode="after")
    def validate_lengths(self) -> "DailySeries":
        if len(self.days) != len(self.values):
            raise ValueError("days and values must have the same length")
        return self

    @property
    def labels(self) -> List[str]:
        return [day.isoformat() for day in self.days]


class StackedSeries(BaseModel):
    """Several named per-day series sharing the same day axis."""

    model_config = ConfigDict(frozen=True)

    days: Tuple[date, ...] = ()
    series: Dict[str, List[float]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_lengths(self) -> "StackedSeries":
        for name, values in self.series.items():
            if len(values) != len(self.days):
                raise ValueError(f"series '{name}' does not cover every day")
        return self

    @property
    def labels(self) -> List[str]:
        return [day.isoformat() for day in self.days]


class ShareMatrix(BaseModel):
    """Percentage of each column category within each row category."""

    model_config = ConfigDict(frozen=True)

    rows: Tuple[str, ...] = ()
    series: Dict[str, List[float]] = Field(default_factory=dict)


class SummaryStats(BaseModel):
    """Organization-wide totals over the current window."""

    model_config = ConfigDict(frozen=True)

    period_start: Optional[date] = None
    period_end: Optional[date] = None
    peak_daily_active_users: int = 0
    average_daily_active_users: int = 0
    total_interactions: int = 0
    total_code_generated: int = 0
    total_code_accepted: int = 0
    total_loc_added: int = 0
    total_loc_deleted: int = 0
    total_days: int = 0


class DayTrend(BaseModel):
    """Headline counters for one day."""

    model_config = ConfigDict(frozen=True)

    day: date
    active_users: int = 0
    interactions: int = 0
    code_generated: int = 0
    loc_added: int = 0
    loc_deleted: int = 0


class CodeChangeTotals(BaseModel):
    """Lines of code suggested, added and deleted by one initiator group."""

    model_config = ConfigDict(frozen=True)

    suggested: int = 0
    added: int = 0
    deleted: int = 0

    @property
    def changed(self) -> int:
        return self.added + self.deleted


class ActivityShare(BaseModel):
    """Feature activity split into agent and user-initiated groups.

    ``total_activity`` covers every feature, including ones in neither group.
    """

    model_config = ConfigDict(frozen=True)

    agent_activity: int = 0
    user_activity: int = 0
    chat_interactions: int = 0
    total_activity: int = 0

    @property
    def agent_pct(self) -> float:
        if self.total_activity <= 0:
            return 0.0
        return self.agent_activity / self.total_activity * 100

    @property
    def user_pct(self) -> float:
        if self.total_activity <= 0:
            return 0.0
        return self.user_activity / self.total_activity * 100


class ReportInfo(BaseModel):
    """Catalog entry describing a pre-compiled report."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    icon: str = ""
