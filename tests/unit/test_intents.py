import pytest

from copilot_metrics.query.intents import (
    Intent,
    classify,
    is_report_request,
    mentioned_handle,
)


@pytest.mark.parametrize(
    "prompt, expected",
    [
        ("generate a language and model report", Intent.LANGUAGE_REPORT),
        ("Create a model usage dashboard", Intent.MODEL_REPORT),
        ("build an agent adoption report", Intent.FEATURE_REPORT),
        ("make a weekly usage overview", Intent.USAGE_REPORT),
        ("produce a lines of code breakdown", Intent.CODE_REPORT),
        ("give me a report", Intent.GENERIC_REPORT),
        ("@alice usage", Intent.USER_LOOKUP),
        ("top 10 users", Intent.TOP_USERS),
        ("show me the trend", Intent.TRENDS),
        ("which language is most used", Intent.LANGUAGES),
        ("what model do people prefer", Intent.MODELS),
        ("compare chat modes", Intent.FEATURES),
        ("ide split", Intent.IDES),
        ("how many people are active", Intent.SUMMARY),
        ("hello there", Intent.FALLBACK),
    ],
)
def test_classify(prompt, expected):
    assert classify(prompt) is expected


def test_report_topic_order_prefers_language_over_model():
    assert classify("GENERATE a MODEL and LANGUAGE report") is Intent.LANGUAGE_REPORT


def test_mention_beats_other_keywords():
    assert classify("what model does @bob use") is Intent.USER_LOOKUP


def test_report_request_needs_verb_and_noun():
    assert is_report_request("please create a quick report")
    assert not is_report_request("report on languages")
    assert not is_report_request("create something")


def test_mentioned_handle_extracts_first_handle():
    assert mentioned_handle("compare @jane-doe and @bob") == "jane-doe"
    assert mentioned_handle("no handle here") is None
