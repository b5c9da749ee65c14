from datetime import date

import pytest

from copilot_metrics.aggregation import views
from copilot_metrics.domain.models import DailyRecord


def _feature(name, interactions=0, generated=0, accepted=0, added=0, deleted=0, suggested=0):
    return {
        "feature": name,
        "user_initiated_interaction_count": interactions,
        "code_generation_activity_count": generated,
        "code_acceptance_activity_count": accepted,
        "loc_added_sum": added,
        "loc_deleted_sum": deleted,
        "loc_suggested_to_add_sum": suggested,
    }


def _record(day, users, features, models=(), languages=(), ides=()):
    return DailyRecord.model_validate(
        {
            "day": date(2026, 1, day),
            "daily_active_users": users,
            "user_initiated_interaction_count": sum(
                f["user_initiated_interaction_count"] for f in features
            ),
            "code_generation_activity_count": sum(
                f["code_generation_activity_count"] for f in features
            ),
            "loc_added_sum": sum(f["loc_added_sum"] for f in features),
            "loc_deleted_sum": sum(f["loc_deleted_sum"] for f in features),
            "totals_by_feature": list(features),
            "totals_by_model_feature": list(models),
            "totals_by_language_feature": list(languages),
            "totals_by_ide": list(ides),
        }
    )


def _window():
    return [
        _record(
            1,
            10,
            [
                _feature("code_completion", 0, 40, 20, 30, 0, 60),
                _feature("chat_panel_ask_mode", 20, 5, 0, 10, 0, 15),
                _feature("chat_panel_agent_mode", 30, 10, 0, 100, 40),
            ],
            models=[
                {"model": "gpt-4o", "feature": "chat_panel_ask_mode", "user_initiated_interaction_count": 20},
                {"model": "claude", "feature": "chat_panel_agent_mode", "user_initiated_interaction_count": 30},
                {"model": "gpt-4o", "feature": "code_completion", "code_generation_activity_count": 40},
            ],
            languages=[
                {"language": "python", "feature": "code_completion", "code_generation_activity_count": 30},
                {"language": "go", "feature": "code_completion", "code_generation_activity_count": 10},
            ],
            ides=[{"ide": "vscode", "user_initiated_interaction_count": 50}],
        ),
        _record(
            2,
            20,
            [
                _feature("code_completion", 0, 60, 30, 50, 0, 80),
                _feature("chat_panel_ask_mode", 10, 0, 0, 0, 0, 0),
            ],
            ides=[
                {"ide": "vscode", "user_initiated_interaction_count": 6},
                {"ide": "jetbrains", "user_initiated_interaction_count": 4},
            ],
        ),
    ]


def test_summary_stats_on_window():
    stats = views.summary_stats(_window())

    assert stats.period_start == date(2026, 1, 1)
    assert stats.period_end == date(2026, 1, 2)
    assert stats.peak_daily_active_users == 20
    assert stats.average_daily_active_users == 15
    assert stats.total_interactions == 60
    assert stats.total_code_generated == 115
    assert stats.total_days == 2


def test_summary_stats_on_empty_window():
    stats = views.summary_stats([])
    assert stats.period_start is None
    assert stats.peak_daily_active_users == 0
    assert stats.total_loc_added == 0


def test_activity_share_partitions_agent_and_user_features():
    share = views.activity_share(_window())

    assert share.agent_activity == 40
    assert share.user_activity == 135
    assert share.total_activity == 175
    assert share.chat_interactions == 60
    assert share.agent_pct + share.user_pct == pytest.approx(100.0, abs=0.1)


def test_feature_usage_ranked_by_interactions():
    buckets = views.feature_usage(_window())
    assert [b.category_key for b in buckets] == [
        "chat_panel_ask_mode",
        "chat_panel_agent_mode",
        "code_completion",
    ]


def test_chat_model_distribution_excludes_completions():
    buckets = views.chat_model_distribution(_window())
    assert [(b.category_key, b.interactions) for b in buckets] == [
        ("claude", 30),
        ("gpt-4o", 20),
    ]


def test_language_usage_with_limit_reports_remainder():
    result = views.language_usage(_window(), limit=1)
    assert result.top[0].category_key == "python"
    assert result.other_value == 10


def test_ide_usage_totals_across_days():
    buckets = views.ide_usage(_window())
    assert [(b.label, b.interactions) for b in buckets] == [
        ("vscode", 56),
        ("jetbrains", 4),
    ]


def test_user_and_agent_code_changes():
    user = views.user_initiated_code_changes(_window())
    agent = views.agent_initiated_code_changes(_window())

    assert (user.suggested, user.added) == (155, 90)
    assert (agent.added, agent.deleted) == (100, 40)
    assert agent.changed == 140


def test_avg_chat_requests_ignores_completions():
    series = views.avg_chat_requests_per_user(_window())
    assert series.values == (5.0, 0.5)


def test_code_completions_and_acceptance_rate():
    completions = views.code_completions(_window())
    rate = views.completion_acceptance_rate(_window())

    assert completions.series == {"Shown": [40, 60], "Accepted": [20, 30]}
    assert rate.values == (50.0, 50.0)


def test_weekly_active_users_is_rolling_average_of_daily():
    assert views.daily_active_users(_window()).values == (10, 20)
    assert views.weekly_active_users(_window()).values == (10, 15)


def test_requests_per_chat_mode_uses_display_names():
    stacked = views.requests_per_chat_mode(_window())
    assert stacked.series["Ask Mode"] == [20, 10]
    assert stacked.series["Agent Mode"] == [30, 0]
    assert stacked.series["Inline Chat"] == [0, 0]


def test_model_usage_per_day_sums_to_hundred_on_active_days():
    stacked = views.model_usage_per_day(_window())
    first_day = sum(values[0] for values in stacked.series.values())
    assert first_day == pytest.approx(100.0, abs=0.01)
    assert all(values[1] == 0.0 for values in stacked.series.values())


def test_model_usage_per_chat_mode_rows_cover_every_mode():
    matrix = views.model_usage_per_chat_mode(_window())
    assert matrix.rows == (
        "Agent Mode",
        "Ask Mode",
        "Edit Mode",
        "Custom Mode",
        "Inline Chat",
    )
    assert matrix.series["claude"][0] == 100.0
    assert matrix.series["gpt-4o"][1] == 100.0
