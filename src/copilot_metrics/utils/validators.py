"""Input validation helpers used across the service."""

from __future__ import annotations

MAX_PROMPT_LENGTH = 20000


def validate_prompt(prompt: str, max_length: int = MAX_PROMPT_LENGTH) -> None:
    if not prompt or not prompt.strip():
        raise ValueError("Prompt must be non-empty")
    if len(prompt) > max_length:
        raise ValueError("Prompt exceeds maximum supported length")


def validate_report_id(report_id: str) -> None:
    if not report_id or not report_id.strip():
        raise ValueError("Report id must be non-empty")
