"""Basic metrics example using the built-in DI container."""

from datetime import date, timedelta

from copilot_metrics.core.config import MetricsConfig
from copilot_metrics.core.container import DIContainer
from copilot_metrics.ingestion.source import StaticRecordSource


def _demo_records():
    start = date(2026, 1, 1)
    for offset in range(14):
        users = 40 + offset * 3
        yield {
            "day": (start + timedelta(days=offset)).isoformat(),
            "daily_active_users": users,
            "user_initiated_interaction_count": users * 4,
            "code_generation_activity_count": users * 3,
            "loc_added_sum": users * 25,
            "totals_by_feature": [
                {"feature": "code_completion", "code_generation_activity_count": users * 3},
                {"feature": "chat_panel_agent_mode", "user_initiated_interaction_count": users * 4},
            ],
            "totals_by_language_feature": [
                {"language": "python", "code_generation_activity_count": users * 2},
                {"language": "go", "code_generation_activity_count": users},
            ],
        }


def main() -> None:
    service = DIContainer.create_service(
        MetricsConfig(), source=StaticRecordSource(_demo_records()), load=True
    )

    print(service.report("executive-summary").markdown)
    response = service.query("which language is most used?")
    print(response.markdown)
    print("Chart:", response.chart.title if response.chart else "none")


if __name__ == "__main__":
    main()
