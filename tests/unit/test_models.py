from datetime import date

import pytest
from pydantic import ValidationError

from copilot_metrics.domain.models import (
    AggregationBucket,
    ChartSpec,
    ChartType,
    DailyRecord,
    DailySeries,
    Dataset,
    QueryResponse,
)


def test_daily_record_defaults_missing_counts_to_zero():
    record = DailyRecord.model_validate(
        {
            "day": "2026-01-01",
            "daily_active_users": None,
            "loc_added_sum": None,
            "totals_by_feature": [{"feature": "code_completion"}],
        }
    )

    assert record.day == date(2026, 1, 1)
    assert record.daily_active_users == 0
    assert record.loc_added_sum == 0
    assert record.totals_by_feature[0].user_initiated_interaction_count == 0
    assert record.totals_by_ide == ()


def test_daily_record_keeps_unknown_fields_and_reads_them_as_metrics():
    record = DailyRecord.model_validate(
        {"day": "2026-01-01", "monthly_active_agent_users": 7, "label": "x"}
    )

    assert record.metric("monthly_active_agent_users") == 7
    assert record.metric("label") == 0
    assert record.metric("not_there") == 0


def test_daily_record_scope_key_defaults_enterprise():
    record = DailyRecord(day=date(2026, 1, 1))
    numeric = DailyRecord.model_validate({"day": "2026-01-01", "enterprise_id": 42})

    assert record.scope_key == ("default", date(2026, 1, 1))
    assert numeric.scope_key == ("42", date(2026, 1, 1))


def test_daily_record_is_immutable():
    record = DailyRecord(day=date(2026, 1, 1))
    with pytest.raises(ValidationError):
        record.daily_active_users = 5  # type: ignore[misc]


def test_bucket_label_joins_pair_keys():
    bucket = AggregationBucket(category_key=("python", "gpt-4o"), metrics={})
    assert bucket.label == "python / gpt-4o"
    assert bucket.interactions == 0


def test_chart_spec_rejects_mismatched_dataset_length():
    with pytest.raises(ValidationError):
        ChartSpec(
            title="t",
            type=ChartType.BAR,
            labels=["a", "b"],
            datasets=[Dataset(label="d", data=[1])],
        )


def test_daily_series_requires_matching_lengths():
    with pytest.raises(ValidationError):
        DailySeries(days=(date(2026, 1, 1),), values=())


def test_query_response_chart_is_first_spec_or_none():
    response = QueryResponse(intent="fallback", markdown="x")
    assert response.chart is None
    assert response.available is True
