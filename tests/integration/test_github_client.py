import json
from datetime import date

import httpx
import pytest

from copilot_metrics.core.config import MetricsConfig
from copilot_metrics.domain.exceptions import (
    IngestionAuthError,
    IngestionError,
    IngestionUnavailableError,
)
from copilot_metrics.ingestion.github_client import GitHubMetricsClient

pytestmark = pytest.mark.integration

DAY = date(2026, 2, 3)
DOWNLOAD_URL = "https://downloads.example.com/report-1.ndjson"


def _client(handler, **config_overrides) -> GitHubMetricsClient:
    config = MetricsConfig(token="ghp-test", enterprise="acme", **config_overrides)
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return GitHubMetricsClient(http_client, config, sleep=lambda _: None)


def test_fetch_day_follows_download_links():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.host == "api.github.com":
            return httpx.Response(
                200, json={"download_links": [DOWNLOAD_URL, {"url": DOWNLOAD_URL}]}
            )
        body = "\n".join(
            [
                json.dumps({"day": "2026-02-03", "daily_active_users": 4}),
                "",
                "{not json",
                json.dumps({"day": "2026-02-03", "daily_active_users": 6}),
            ]
        )
        return httpx.Response(200, text=body)

    records = _client(handler).fetch_day(DAY)

    assert [r["daily_active_users"] for r in records] == [4, 6, 4, 6]
    api_request = seen[0]
    assert api_request.url.path == (
        "/enterprises/acme/copilot/metrics/reports/enterprise-1-day"
    )
    assert api_request.url.params["day"] == "2026-02-03"
    assert api_request.headers["Authorization"] == "Bearer ghp-test"
    assert api_request.headers["Accept"] == "application/vnd.github+json"
    assert api_request.headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_fetch_day_accepts_array_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"day": "2026-02-03"}, "junk"])

    assert _client(handler).fetch_day(DAY) == [{"day": "2026-02-03"}]


def test_fetch_day_missing_report_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    assert _client(handler).fetch_day(DAY) == []


def test_failed_download_link_is_skipped():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.github.com":
            return httpx.Response(200, json={"download_urls": [DOWNLOAD_URL]})
        return httpx.Response(500)

    assert _client(handler).fetch_day(DAY) == []


@pytest.mark.parametrize("status", [401, 403])
def test_auth_failures_raise(status):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status)

    with pytest.raises(IngestionAuthError):
        _client(handler).fetch_day(DAY)


def test_unexpected_client_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422)

    with pytest.raises(IngestionError) as excinfo:
        _client(handler).fetch_day(DAY)
    assert excinfo.value.context["status_code"] == 422


def test_transient_errors_are_retried():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503 if calls["count"] == 1 else 429)
        return httpx.Response(200, json=[{"day": "2026-02-03"}])

    records = _client(handler, max_retries=3).fetch_day(DAY)

    assert calls["count"] == 3
    assert len(records) == 1


def test_transient_errors_exhaust_retries():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(502)

    with pytest.raises(IngestionUnavailableError):
        _client(handler, max_retries=2).fetch_day(DAY)
    assert calls["count"] == 3


def test_client_requires_token():
    with pytest.raises(IngestionAuthError):
        GitHubMetricsClient(httpx.Client(), MetricsConfig(token=None))
