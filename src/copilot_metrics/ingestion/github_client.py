"""HTTP client for the GitHub Copilot enterprise usage metrics API."""

from __future__ import annotations

import json
import logging
import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import httpx

from copilot_metrics.core.config import MetricsConfig
from copilot_metrics.domain.exceptions import (
    IngestionAuthError,
    IngestionError,
    IngestionUnavailableError,
)
from copilot_metrics.utils.retry import retry

ONE_DAY_REPORT_PATH = (
    "/enterprises/{enterprise}/copilot/metrics/reports/enterprise-1-day"
)
GITHUB_MEDIA_TYPE = "application/vnd.github+json"

RawRecord = Dict[str, Any]


class GitHubMetricsClient:
    """Fetches the raw per-day records for one enterprise."""

    def __init__(
        self,
        http_client: httpx.Client,
        config: MetricsConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not config.token:
            raise IngestionAuthError(
                "A GitHub token is required",
                context={"env": ["GH_TOKEN", "GITHUB_TOKEN"]},
            )
        self._http = http_client
        self._config = config
        self._logger = logger or logging.getLogger(__name__)
        self._endpoint = config.api_base.rstrip("/") + ONE_DAY_REPORT_PATH.format(
            enterprise=config.enterprise
        )
        self._fetch_report = retry(
            attempts=config.max_retries + 1,
            delay=config.backoff_seconds,
            exceptions=(IngestionUnavailableError,),
            sleep=sleep,
        )(self._request_report)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def fetch_day(self, day: date) -> List[RawRecord]:
        """Return every raw record the API publishes for ``day``.

        A day with no report yet (404) yields an empty list. Auth failures and
        exhausted retries raise.
        """

        payload = self._fetch_report(day)
        if payload is None:
            self._logger.info("metrics_day_missing", extra={"day": day.isoformat()})
            return []

        links = self._download_links(payload)
        if links:
            records: List[RawRecord] = []
            for link in links:
                records.extend(self._download(link))
        elif isinstance(payload, list):
            records = [item for item in payload if isinstance(item, dict)]
        else:
            records = []

        self._logger.info(
            "metrics_day_fetched",
            extra={"day": day.isoformat(), "record_count": len(records)},
        )
        return records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": GITHUB_MEDIA_TYPE,
            "Authorization": f"Bearer {self._config.token}",
            "X-GitHub-Api-Version": self._config.api_version,
        }

    def _request_report(self, day: date) -> Any:
        try:
            response = self._http.get(
                self._endpoint,
                params={"day": day.isoformat()},
                headers=self._headers(),
                timeout=self._config.timeout_seconds,
            )
        except httpx.TransportError as exc:
            raise IngestionUnavailableError(
                "Metrics API request failed",
                context={"day": day.isoformat(), "error": str(exc)},
            ) from exc
        return self._map_response(response, day)

    def _map_response(self, response: httpx.Response, day: date) -> Any:
        status = response.status_code
        context = {"day": day.isoformat(), "status_code": status}
        if status == 404:
            return None
        if status in (401, 403):
            raise IngestionAuthError(
                "GitHub rejected the token; it needs manage_billing:copilot "
                "or read:enterprise scope",
                context=context,
            )
        if status == 429 or status >= 500:
            raise IngestionUnavailableError(context=context)
        if status >= 400:
            raise IngestionError(
                f"Metrics API error: {response.reason_phrase}", context=context
            )
        try:
            return response.json()
        except ValueError as exc:
            raise IngestionError(
                "Metrics API returned malformed JSON", context=context
            ) from exc

    @staticmethod
    def _download_links(payload: Any) -> List[str]:
        if not isinstance(payload, dict):
            return []
        links = payload.get("download_links") or payload.get("download_urls") or []
        urls = []
        for link in links:
            url = link if isinstance(link, str) else (link or {}).get("url")
            if url:
                urls.append(url)
        return urls

    def _download(self, url: str) -> List[RawRecord]:
        try:
            response = self._http.get(url, timeout=self._config.timeout_seconds)
        except httpx.TransportError as exc:
            self._logger.warning(
                "metrics_download_failed", extra={"url": url, "error": str(exc)}
            )
            return []
        if response.status_code >= 400:
            self._logger.warning(
                "metrics_download_failed",
                extra={"url": url, "status_code": response.status_code},
            )
            return []
        return self._parse_ndjson(response.text, url)

    def _parse_ndjson(self, text: str, url: str) -> List[RawRecord]:
        records: List[RawRecord] = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except ValueError:
                self._logger.warning(
                    "metrics_line_skipped", extra={"url": url, "line": line_number}
                )
                continue
            if isinstance(record, dict):
                records.append(record)
        return records
