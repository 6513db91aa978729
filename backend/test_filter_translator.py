"""
Natural-language translator tests. Gemini is replaced by a session that
returns canned responses.
"""

import json

import pytest
import requests

from escalator.schema.filters import GroupLogic
from escalator.services.filter_translator import (
    FilterTranslator,
    TranslationError,
    TranslationErrorReason,
    TranslatorNotConfigured,
    build_prompt,
    parse_response_text,
)


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


class FakeSession:

    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


def gemini_reply(text):
    return FakeResponse(payload={
        "candidates": [{"content": {"parts": [{"text": text}]}}],
        "usageMetadata": {"totalTokenCount": 42},
    })


FINANCE_OVERDUE = {
    "filters": [{
        "id": "1",
        "conditions": [
            {"column": "department", "operator": "equals", "value": "Finance"},
            {"column": "pendingSince", "operator": "greater_than", "value": 30},
        ],
        "logic": "AND",
    }]
}


def test_prompt_lists_registry_columns_and_query():
    prompt = build_prompt("  finance files over 30 days  ")

    assert "pendingSince(number)" in prompt
    assert "mailSent(boolean)" in prompt
    assert "column_greater_equal" in prompt
    assert prompt.rstrip().endswith("Query: finance files over 30 days\n\nJSON only:")


def test_parses_fenced_json():
    groups = parse_response_text("```json\n" + json.dumps(FINANCE_OVERDUE) + "\n```")

    [group] = groups
    assert group.logic == GroupLogic.AND
    assert [c.column for c in group.conditions] == ["department", "pendingSince"]


def test_parses_column_compare():
    payload = {"filters": [{"id": "a", "conditions": [
        {"column": "pendingSince", "operator": "column_greater_than", "value": 0, "compareColumn": "tatDays"},
    ], "logic": "OR"}]}

    [group] = parse_response_text(json.dumps(payload))

    assert group.logic == GroupLogic.OR
    assert group.conditions[0].compare_column == "tatDays"


@pytest.mark.parametrize("text, reason", [
    ("", TranslationErrorReason.EMPTY_RESPONSE),
    ("```\n```", TranslationErrorReason.EMPTY_RESPONSE),
    ("Sure! Here are your filters", TranslationErrorReason.UNPARSEABLE),
    ('{"groups": []}', TranslationErrorReason.INVALID_STRUCTURE),
    ('[{"id": "1"}]', TranslationErrorReason.INVALID_STRUCTURE),
    ('{"filters": [{"conditions": []}]}', TranslationErrorReason.INVALID_STRUCTURE),
    ('{"filters": [{"id": "1", "logic": "XOR"}]}', TranslationErrorReason.INVALID_STRUCTURE),
])
def test_rejects_malformed_output(text, reason):
    with pytest.raises(TranslationError) as exc_info:
        parse_response_text(text)
    assert exc_info.value.reason == reason


@pytest.mark.parametrize("condition", [
    {"column": "owner", "operator": "equals", "value": "x"},
    {"column": "department", "operator": "greater_than", "value": 5},
    {"column": "pendingSince", "operator": "column_equals", "value": 0},
])
def test_rejects_output_outside_the_registry(condition):
    text = json.dumps({"filters": [{"id": "1", "conditions": [condition], "logic": "AND"}]})

    with pytest.raises(TranslationError) as exc_info:
        parse_response_text(text)

    assert exc_info.value.reason == TranslationErrorReason.SCHEMA_MISMATCH


def test_translate_calls_gemini():
    session = FakeSession(gemini_reply(json.dumps(FINANCE_OVERDUE)))
    translator = FilterTranslator(api_key="key-123", model="gemini-test", session=session)

    groups = translator.translate("finance files over 30 days")

    assert len(groups) == 1
    [(url, kwargs)] = session.calls
    assert url.endswith("/gemini-test:generateContent")
    assert kwargs["params"] == {"key": "key-123"}
    assert "finance files over 30 days" in kwargs["json"]["contents"][0]["parts"][0]["text"]


def test_translate_without_key():
    translator = FilterTranslator(api_key=None, session=FakeSession())

    assert not translator.is_configured()
    with pytest.raises(TranslatorNotConfigured):
        translator.translate("anything")


def test_translate_api_error():
    translator = FilterTranslator(api_key="k", session=FakeSession(FakeResponse(503, text="overloaded")))

    with pytest.raises(TranslationError) as exc_info:
        translator.translate("anything")

    assert exc_info.value.reason == TranslationErrorReason.REQUEST_FAILED


def test_translate_network_error():
    translator = FilterTranslator(api_key="k", session=FakeSession(error=requests.ConnectionError("down")))

    with pytest.raises(TranslationError) as exc_info:
        translator.translate("anything")

    assert exc_info.value.reason == TranslationErrorReason.REQUEST_FAILED


def test_translate_without_candidates():
    translator = FilterTranslator(api_key="k", session=FakeSession(FakeResponse(payload={"candidates": []})))

    with pytest.raises(TranslationError) as exc_info:
        translator.translate("anything")

    assert exc_info.value.reason == TranslationErrorReason.EMPTY_RESPONSE
