from datetime import date, timedelta

import pytest

from copilot_metrics.core.config import MetricsConfig
from copilot_metrics.core.container import DIContainer
from copilot_metrics.domain.exceptions import RefreshError, ReportNotFoundError
from copilot_metrics.domain.models import QueryResponse
from copilot_metrics.ingestion.source import StaticRecordSource

pytestmark = pytest.mark.integration


def _raw_records(days: int = 10):
    start = date(2026, 1, 1)
    records = []
    for offset in range(days):
        users = 20 + offset
        records.append(
            {
                "day": (start + timedelta(days=offset)).isoformat(),
                "enterprise_id": 1,
                "daily_active_users": users,
                "user_initiated_interaction_count": users * 3,
                "code_generation_activity_count": users * 2,
                "code_acceptance_activity_count": users,
                "loc_added_sum": users * 10,
                "loc_deleted_sum": users * 2,
                "totals_by_feature": [
                    {
                        "feature": "code_completion",
                        "code_generation_activity_count": users * 2,
                        "code_acceptance_activity_count": users,
                        "loc_suggested_to_add_sum": users * 8,
                        "loc_added_sum": users * 4,
                    },
                    {
                        "feature": "chat_panel_agent_mode",
                        "user_initiated_interaction_count": users * 2,
                        "loc_added_sum": users * 6,
                        "loc_deleted_sum": users * 2,
                    },
                    {
                        "feature": "chat_panel_ask_mode",
                        "user_initiated_interaction_count": users,
                    },
                ],
                "totals_by_model_feature": [
                    {
                        "model": "claude-sonnet",
                        "feature": "chat_panel_agent_mode",
                        "user_initiated_interaction_count": users * 2,
                        "loc_added_sum": users * 6,
                        "loc_deleted_sum": users * 2,
                    },
                    {
                        "model": "gpt-4.1",
                        "feature": "chat_panel_ask_mode",
                        "user_initiated_interaction_count": users,
                    },
                ],
                "totals_by_language_feature": [
                    {
                        "language": "python",
                        "feature": "code_completion",
                        "code_generation_activity_count": users,
                    },
                    {
                        "language": "typescript",
                        "feature": "code_completion",
                        "code_generation_activity_count": users,
                    },
                ],
                "totals_by_language_model": [
                    {
                        "language": "python",
                        "model": "gpt-4.1",
                        "code_generation_activity_count": users,
                    }
                ],
                "totals_by_ide": [
                    {"ide": "vscode", "user_initiated_interaction_count": users * 3}
                ],
            }
        )
    return records


class _FlakySource:
    def __init__(self, records):
        self.records = records
        self.fail = False

    def load(self):
        if self.fail:
            raise ConnectionError("offline")
        return StaticRecordSource(self.records).load()


class _AgentStub:
    def __init__(self, fail: bool):
        self.fail = fail
        self.prompts = []

    def answer(self, prompt: str) -> QueryResponse:
        self.prompts.append(prompt)
        if self.fail:
            raise RuntimeError("model unavailable")
        return QueryResponse(intent="agent", markdown="from agent")


def _service(**kwargs):
    return DIContainer.create_service(
        MetricsConfig(),
        source=StaticRecordSource(_raw_records()),
        load=True,
        **kwargs,
    )


def test_reports_and_queries_agree_on_numbers():
    service = _service()

    report = service.report("ide-distribution")
    answer = service.query("ide usage")

    assert report.chart_specs[0].datasets[0].data == answer.chart.datasets[0].data


def test_every_catalog_report_is_available():
    service = _service()

    for info in service.report_catalog():
        assert service.report(info.id).id == info.id
    assert set(service.reports()) == {info.id for info in service.report_catalog()}


def test_unknown_report_raises():
    with pytest.raises(ReportNotFoundError):
        _service().report("nope")


def test_query_runs_through_validation():
    with pytest.raises(ValueError):
        _service().query("   ")


def test_normalized_language_trend_sums_to_hundred():
    service = _service()

    response = service.query("generate a language report")
    trend = response.chart_specs[1]

    for index in range(len(trend.labels)):
        assert sum(d.data[index] for d in trend.datasets) == pytest.approx(
            100.0, abs=0.01
        )


def test_agent_answers_first_and_falls_back_on_failure():
    working = _AgentStub(fail=False)
    failing = _AgentStub(fail=True)

    assert _service(agent=working).query("trend").intent == "agent"
    fallback = _service(agent=failing).query(" trend ")

    assert fallback.intent == "trends"
    assert failing.prompts == ["trend"]


def test_failed_refresh_keeps_serving_last_snapshot():
    source = _FlakySource(_raw_records(3))
    service = DIContainer.create_service(MetricsConfig(), source=source, load=True)
    before = service.records()

    source.fail = True
    with pytest.raises(RefreshError):
        service.refresh()

    assert service.records() is before
    assert service.query("trend").chart.labels == [
        "2026-01-01",
        "2026-01-02",
        "2026-01-03",
    ]


def test_per_user_questions_stay_unavailable_end_to_end():
    service = _service()
    for prompt in ["@alice usage", "top 10 users"]:
        response = service.query(prompt)
        assert response.available is False
        assert response.chart is None
