from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

from bettertodo.core.config import env_float
from bettertodo.core.http import BetterTodoHTTPError, request_with_retry

from .errors import NoTextResponse
from .schemas import AssistantTurn, ProviderResponse, TextOnly, ToolCall, ToolRequest, ToolResultTurn, Turn, UserTurn
from .wire import provider_error, stringify_arguments

OPENAI_MODEL = "gpt-4o"
OPENAI_MAX_TOKENS = 4096
_DEFAULT_URL = "https://api.openai.com/v1/chat/completions"

logger = logging.getLogger("bettertodo.providers")


def to_openai_messages(system_prompt: str, turns: list[Turn]) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    for turn in turns:
        if isinstance(turn, UserTurn):
            messages.append({"role": "user", "content": turn.text})
        elif isinstance(turn, AssistantTurn):
            message: dict[str, Any] = {"role": "assistant", "content": turn.text or None}
            if turn.tool_calls:
                message["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
                    }
                    for call in turn.tool_calls
                ]
            messages.append(message)
        elif isinstance(turn, ToolResultTurn):
            for result in turn.results:
                messages.append({"role": "tool", "tool_call_id": result.call_id, "content": result.content})
    return messages


def _parse_arguments(raw: object) -> dict[str, str]:
    if isinstance(raw, dict):
        return stringify_arguments(raw)
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        return stringify_arguments(json.loads(raw))
    except json.JSONDecodeError:
        logger.warning("unparseable tool arguments", extra={"extra_fields": {"provider": "openai"}})
        return {}


def _first_choice(data: dict[str, Any]) -> dict[str, Any]:
    choices = data.get("choices") or []
    if not choices:
        return {}
    return choices[0] or {}


def map_openai_response(data: dict[str, Any]) -> ProviderResponse:
    choice = _first_choice(data)
    message = choice.get("message") or {}
    text = str(message.get("content") or "")
    calls = [
        ToolCall(
            id=str(item.get("id") or ""),
            name=str((item.get("function") or {}).get("name") or ""),
            arguments=_parse_arguments((item.get("function") or {}).get("arguments")),
        )
        for item in message.get("tool_calls") or []
    ]
    if not calls or choice.get("finish_reason") == "stop":
        return TextOnly(text=text)
    return ToolRequest(text=text, calls=calls)


def first_openai_text(data: dict[str, Any]) -> str:
    message = _first_choice(data).get("message") or {}
    content = message.get("content")
    if not content:
        raise NoTextResponse("No response from OpenAI")
    return str(content)


class OpenAIClient:
    def __init__(self, url: str | None = None, timeout_s: float | None = None) -> None:
        self.url = url or os.getenv("BETTERTODO_OPENAI_URL", _DEFAULT_URL)
        self.timeout_s = timeout_s if timeout_s is not None else env_float("BETTERTODO_LLM_TIMEOUT_S", 120.0)

    def chat_completion(
        self,
        api_key: str,
        system_prompt: str,
        turns: list[Turn],
        tools: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": OPENAI_MODEL,
            "max_tokens": OPENAI_MAX_TOKENS,
            "messages": to_openai_messages(system_prompt, turns),
        }
        if tools:
            payload["tools"] = tools

        headers = {"Authorization": f"Bearer {api_key}", "content-type": "application/json"}
        start = time.perf_counter()
        try:
            response = request_with_retry("POST", self.url, headers=headers, json=payload, timeout_override=self.timeout_s)
            data = response.json()
        except BetterTodoHTTPError as exc:
            self._log_call(start, ok=False, tools=bool(tools))
            raise provider_error("OpenAI", exc) from exc
        except ValueError as exc:
            self._log_call(start, ok=False, tools=bool(tools))
            raise NoTextResponse("No response from OpenAI") from exc

        self._log_call(start, ok=True, tools=bool(tools), finish_reason=_first_choice(data).get("finish_reason"))
        return data

    def _log_call(self, start: float, ok: bool, tools: bool, finish_reason: str | None = None) -> None:
        logger.info(
            "llm_call",
            extra={
                "extra_fields": {
                    "provider": "openai",
                    "model": OPENAI_MODEL,
                    "tools": tools,
                    "ok": ok,
                    "finish_reason": finish_reason,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                }
            },
        )
