"""Ordered keyword rules that classify free-text questions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

Predicate = Callable[[str], bool]

REPORT_REQUEST_PATTERN = re.compile(
    r"\b(generate|create|build|make|produce|give me)\b"
    r".*\b(report|dashboard|breakdown|analysis|overview)\b",
    re.IGNORECASE | re.DOTALL,
)
MENTION_PATTERN = re.compile(r"@(\w[\w-]*)")


class Intent(str, Enum):
    """Every answer shape the rule-based dispatcher can produce."""

    LANGUAGE_REPORT = "language_report"
    MODEL_REPORT = "model_report"
    FEATURE_REPORT = "feature_report"
    USAGE_REPORT = "usage_report"
    CODE_REPORT = "code_report"
    GENERIC_REPORT = "generic_report"
    USER_LOOKUP = "user_lookup"
    TOP_USERS = "top_users"
    TRENDS = "trends"
    LANGUAGES = "languages"
    MODELS = "models"
    FEATURES = "features"
    IDES = "ides"
    SUMMARY = "summary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    predicate: Predicate


def contains_any(*keywords: str) -> Predicate:
    """Case-insensitive substring match on any keyword."""

    lowered = tuple(keyword.lower() for keyword in keywords)
    return lambda prompt: any(keyword in prompt.lower() for keyword in lowered)


def contains_all(*keywords: str) -> Predicate:
    lowered = tuple(keyword.lower() for keyword in keywords)
    return lambda prompt: all(keyword in prompt.lower() for keyword in lowered)


def is_report_request(prompt: str) -> bool:
    return REPORT_REQUEST_PATTERN.search(prompt) is not None


def mentioned_handle(prompt: str) -> Optional[str]:
    match = MENTION_PATTERN.search(prompt)
    return match.group(1) if match else None


def has_mention(prompt: str) -> bool:
    return mentioned_handle(prompt) is not None


# Checked in order once a prompt asks for a report; first hit wins.
REPORT_TOPIC_RULES: Sequence[IntentRule] = (
    IntentRule(Intent.LANGUAGE_REPORT, contains_any("language", "lang")),
    IntentRule(Intent.MODEL_REPORT, contains_any("model")),
    IntentRule(Intent.FEATURE_REPORT, contains_any("agent", "adoption", "feature")),
    IntentRule(
        Intent.USAGE_REPORT,
        contains_any("trend", "usage", "active", "daily", "weekly"),
    ),
    IntentRule(Intent.CODE_REPORT, contains_any("code", "loc", "line")),
)

# Checked in order for every other prompt; first hit wins.
QUERY_RULES: Sequence[IntentRule] = (
    IntentRule(Intent.USER_LOOKUP, has_mention),
    IntentRule(Intent.TOP_USERS, contains_all("top", "user")),
    IntentRule(Intent.TRENDS, contains_any("trend")),
    IntentRule(Intent.LANGUAGES, contains_any("language")),
    IntentRule(Intent.MODELS, contains_any("model")),
    IntentRule(Intent.FEATURES, contains_any("feature", "compare", "agent", "chat")),
    IntentRule(Intent.IDES, contains_any("ide")),
    IntentRule(Intent.SUMMARY, contains_any("active", "summary", "how many")),
)


def first_match(rules: Sequence[IntentRule], prompt: str, default: Intent) -> Intent:
    for rule in rules:
        if rule.predicate(prompt):
            return rule.intent
    return default


def classify(prompt: str) -> Intent:
    """Map a prompt to exactly one intent using the ordered rule lists."""

    if is_report_request(prompt):
        return first_match(REPORT_TOPIC_RULES, prompt, Intent.GENERIC_REPORT)
    return first_match(QUERY_RULES, prompt, Intent.FALLBACK)
