"""Middleware system for query cross-cutting concerns."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence

from copilot_metrics.domain.models import QueryResponse
from copilot_metrics.utils.validators import MAX_PROMPT_LENGTH, validate_prompt


class IMiddleware(Protocol):
    """Protocol describing middleware hooks."""

    def process_prompt(self, prompt: str) -> str: ...

    def process_response(self, response: QueryResponse) -> QueryResponse: ...


class LoggingMiddleware(IMiddleware):
    """Logs inbound questions and outbound answers."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def process_prompt(self, prompt: str) -> str:
        self._logger.info("query_request", extra={"prompt_preview": prompt[:100]})
        return prompt

    def process_response(self, response: QueryResponse) -> QueryResponse:
        self._logger.info(
            "query_response",
            extra={
                "intent": response.intent,
                "available": response.available,
                "chart_count": len(response.chart_specs),
            },
        )
        return response


class ValidationMiddleware(IMiddleware):
    """Rejects empty or oversized prompts before any work is done."""

    def __init__(self, max_length: int = MAX_PROMPT_LENGTH) -> None:
        self._max_length = max_length

    def process_prompt(self, prompt: str) -> str:
        validate_prompt(prompt, self._max_length)
        return prompt.strip()

    def process_response(self, response: QueryResponse) -> QueryResponse:
        return response


class MiddlewareChain:
    """Applies middleware around a handler using chain of responsibility."""

    def __init__(self, middlewares: Sequence[IMiddleware]) -> None:
        self._middlewares = list(middlewares)

    def execute(
        self, prompt: str, handler: Callable[[str], QueryResponse]
    ) -> QueryResponse:
        for middleware in self._middlewares:
            prompt = middleware.process_prompt(prompt)

        response = handler(prompt)

        for middleware in reversed(self._middlewares):
            response = middleware.process_response(response)

        return response
