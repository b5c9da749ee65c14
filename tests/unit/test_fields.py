from datetime import date

from copilot_metrics.aggregation.fields import (
    average_field,
    date_range,
    peak_field,
    sum_field,
    sum_nested,
)
from copilot_metrics.aggregation.categorical import in_features
from copilot_metrics.domain.models import DailyRecord


def _record(day: int, users: int, **kwargs) -> DailyRecord:
    return DailyRecord(day=date(2026, 1, day), daily_active_users=users, **kwargs)


def _window():
    return [
        _record(1, 100, user_initiated_interaction_count=10),
        _record(2, 120, user_initiated_interaction_count=5),
        _record(3, 90, user_initiated_interaction_count=7),
    ]


def test_sum_field_is_permutation_invariant():
    records = _window()
    assert sum_field(records, "daily_active_users") == 310
    assert sum_field(list(reversed(records)), "daily_active_users") == 310
    assert sum_field(records[1:] + records[:1], "daily_active_users") == 310


def test_sum_field_unknown_name_is_zero():
    assert sum_field(_window(), "dailyActiveUsers") == 0


def test_empty_window_yields_identity_values():
    assert sum_field([], "daily_active_users") == 0
    assert peak_field([], "daily_active_users") == 0
    assert average_field([], "daily_active_users") == 0
    assert date_range([]) == (None, None)


def test_peak_average_and_range():
    records = _window()
    assert peak_field(records, "daily_active_users") == 120
    assert average_field(records, "daily_active_users") == 103
    assert date_range(records) == (date(2026, 1, 1), date(2026, 1, 3))


def test_sum_nested_applies_entry_filter():
    record = DailyRecord.model_validate(
        {
            "day": "2026-01-01",
            "totals_by_feature": [
                {"feature": "code_completion", "loc_added_sum": 10},
                {"feature": "agent_edit", "loc_added_sum": 4},
                {"feature": "chat_panel_agent_mode", "loc_added_sum": None},
            ],
        }
    )

    assert sum_nested([record], "totals_by_feature", "loc_added_sum") == 14
    assert (
        sum_nested(
            [record],
            "totals_by_feature",
            "loc_added_sum",
            in_features({"agent_edit"}),
        )
        == 4
    )
    assert sum_nested([record], "no_such_breakdown", "loc_added_sum") == 0
