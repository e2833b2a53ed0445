"""
Tests for the OpenAI adapter without network: responses are SimpleNamespace fakes.
"""
from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace

import pytest

from aurora_planner.domain.common.errors import UpstreamError, ValidationError
from aurora_planner.infra.llm.openai_suggestions import (
    TOOL_NAME,
    OpenAISuggestionGenerator,
    extract_suggestions,
)


def _response(arguments) -> SimpleNamespace:
    call = SimpleNamespace(function=SimpleNamespace(name=TOOL_NAME, arguments=arguments))
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(tool_calls=[call], content=None))])


class _FakeCompletions:
    def __init__(self, response) -> None:
        self.response = response
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return self.response


def _fake_client(response) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=_FakeCompletions(response)))


def test_extract_returns_suggestions_array():
    items = [{"type": "new_task", "title": "t", "reason": "r", "data": {}, "confidence": 0.5}]
    assert extract_suggestions(_response(json.dumps({"suggestions": items}))) == items


def test_extract_missing_array_is_empty():
    assert extract_suggestions(_response("{}")) == []


def test_extract_requires_tool_call():
    free_text = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(tool_calls=None, content="Sure! Here are ideas"))]
    )
    with pytest.raises(ValidationError):
        extract_suggestions(free_text)


def test_extract_rejects_bad_json_and_shapes():
    with pytest.raises(ValidationError):
        extract_suggestions(_response("{not json"))
    with pytest.raises(ValidationError):
        extract_suggestions(_response("[1, 2]"))
    with pytest.raises(ValidationError):
        extract_suggestions(_response(json.dumps({"suggestions": {"type": "new_task"}})))


def test_generate_forces_the_tool():
    client = _fake_client(_response(json.dumps({"suggestions": []})))
    gen = OpenAISuggestionGenerator(api_key="", model="test-model", client=client)

    result = asyncio.run(gen.generate("system text", "user context"))

    assert result == []
    kwargs = client.chat.completions.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"][0] == {"role": "system", "content": "system text"}
    assert kwargs["messages"][1] == {"role": "user", "content": "user context"}
    assert kwargs["tool_choice"] == {"type": "function", "function": {"name": TOOL_NAME}}
    assert kwargs["tools"][0]["function"]["name"] == TOOL_NAME


def test_missing_api_key_is_upstream_error():
    gen = OpenAISuggestionGenerator(api_key="  ")
    with pytest.raises(UpstreamError):
        asyncio.run(gen.generate("a", "b"))
