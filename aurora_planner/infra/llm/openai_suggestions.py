# -*- coding: utf-8 -*-
"""
Planner suggestions through the OpenAI Chat Completions API (function calling).
API key from OPENAI_API_KEY; do not log user data or the key.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

from openai import APIError, AsyncOpenAI

from aurora_planner.domain.common.errors import UpstreamError, ValidationError
from aurora_planner.domain.suggestions.models import SUGGESTION_TYPES
from aurora_planner.domain.suggestions.ports import SuggestionGenerator

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
TOOL_NAME = "create_suggestion"

SUGGESTION_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Create a task suggestion, scheduling recommendation, or prioritization change",
        "parameters": {
            "type": "object",
            "properties": {
                "suggestions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "type": {"type": "string", "enum": list(SUGGESTION_TYPES)},
                            "title": {"type": "string"},
                            "reason": {"type": "string"},
                            "data": {
                                "type": "object",
                                "description": "Task details including title, description, priority, category, scheduled_date, etc.",
                            },
                            "confidence": {"type": "number", "description": "Confidence score 0-1"},
                        },
                        "required": ["type", "title", "reason", "data", "confidence"],
                    },
                }
            },
            "required": ["suggestions"],
        },
    },
}


def extract_suggestions(response: Any) -> list[Any]:
    """
    Pull the `suggestions` array out of a chat completion.
    Only the function-call path is accepted; free text is an error.
    """
    choices = getattr(response, "choices", None) or []
    message = getattr(choices[0], "message", None) if choices else None
    tool_calls = getattr(message, "tool_calls", None) or []
    if not tool_calls:
        raise ValidationError("No tool call in AI response")

    arguments = getattr(getattr(tool_calls[0], "function", None), "arguments", None)
    if not isinstance(arguments, str):
        raise ValidationError("AI tool call has no arguments")
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as e:
        raise ValidationError("AI tool call arguments are not valid JSON") from e

    if not isinstance(parsed, dict):
        raise ValidationError("AI tool call arguments must be an object")
    suggestions = parsed.get("suggestions") or []
    if not isinstance(suggestions, list):
        raise ValidationError("AI suggestions must be an array")
    return suggestions


class OpenAISuggestionGenerator(SuggestionGenerator):
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._client = client
        self._model = model

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key or not self._api_key.strip():
                raise UpstreamError("OPENAI_API_KEY not configured")
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._base_url or None)
        return self._client

    async def generate(self, instructions: str, context: str) -> Sequence[Any]:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": instructions},
                    {"role": "user", "content": context},
                ],
                tools=[SUGGESTION_TOOL],
                tool_choice={"type": "function", "function": {"name": TOOL_NAME}},
            )
        except APIError as e:
            status = getattr(e, "status_code", None)
            logger.error("AI API error: status=%s type=%s", status, type(e).__name__)
            raise UpstreamError(f"AI API error: {status or type(e).__name__}") from e

        suggestions = extract_suggestions(response)
        logger.info("AI returned %d suggestions", len(suggestions))
        return suggestions
