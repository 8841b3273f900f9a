from __future__ import annotations

import logging
import os
import time
from typing import Any

from bettertodo.core.config import env_float
from bettertodo.core.http import BetterTodoHTTPError, request_with_retry

from .errors import NoTextResponse
from .schemas import AssistantTurn, ProviderResponse, TextOnly, ToolCall, ToolRequest, ToolResultTurn, Turn, UserTurn
from .wire import provider_error, stringify_arguments

ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
ANTHROPIC_MAX_TOKENS = 4096
ANTHROPIC_VERSION = "2023-06-01"
_DEFAULT_URL = "https://api.anthropic.com/v1/messages"

logger = logging.getLogger("bettertodo.providers")


def to_anthropic_messages(turns: list[Turn]) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    for turn in turns:
        if isinstance(turn, UserTurn):
            messages.append({"role": "user", "content": turn.text})
        elif isinstance(turn, AssistantTurn):
            if not turn.tool_calls:
                messages.append({"role": "assistant", "content": turn.text})
                continue
            blocks: list[dict[str, Any]] = []
            if turn.text:
                blocks.append({"type": "text", "text": turn.text})
            for call in turn.tool_calls:
                blocks.append({"type": "tool_use", "id": call.id, "name": call.name, "input": dict(call.arguments)})
            messages.append({"role": "assistant", "content": blocks})
        elif isinstance(turn, ToolResultTurn):
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "tool_result",
                            "tool_use_id": result.call_id,
                            "content": result.content,
                            "is_error": result.is_error,
                        }
                        for result in turn.results
                    ],
                }
            )
    return messages


def map_anthropic_response(data: dict[str, Any]) -> ProviderResponse:
    blocks = data.get("content") or []
    text = "".join(str(block.get("text") or "") for block in blocks if block.get("type") == "text")
    calls = [
        ToolCall(
            id=str(block.get("id") or ""),
            name=str(block.get("name") or ""),
            arguments=stringify_arguments(block.get("input")),
        )
        for block in blocks
        if block.get("type") == "tool_use"
    ]
    if not calls or data.get("stop_reason") == "end_turn":
        return TextOnly(text=text)
    return ToolRequest(text=text, calls=calls)


def first_anthropic_text(data: dict[str, Any]) -> str:
    for block in data.get("content") or []:
        if block.get("type") == "text" and block.get("text"):
            return str(block["text"])
    raise NoTextResponse("No text response from Claude")


class AnthropicClient:
    def __init__(self, url: str | None = None, timeout_s: float | None = None) -> None:
        self.url = url or os.getenv("BETTERTODO_ANTHROPIC_URL", _DEFAULT_URL)
        self.timeout_s = timeout_s if timeout_s is not None else env_float("BETTERTODO_LLM_TIMEOUT_S", 120.0)

    def create_message(
        self,
        api_key: str,
        system_prompt: str,
        turns: list[Turn],
        tools: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": ANTHROPIC_MODEL,
            "max_tokens": ANTHROPIC_MAX_TOKENS,
            "system": system_prompt,
            "messages": to_anthropic_messages(turns),
        }
        if tools:
            payload["tools"] = tools

        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        start = time.perf_counter()
        try:
            response = request_with_retry("POST", self.url, headers=headers, json=payload, timeout_override=self.timeout_s)
            data = response.json()
        except BetterTodoHTTPError as exc:
            self._log_call(start, ok=False, tools=bool(tools))
            raise provider_error("Anthropic", exc) from exc
        except ValueError as exc:
            self._log_call(start, ok=False, tools=bool(tools))
            raise NoTextResponse("No text response from Claude") from exc

        self._log_call(start, ok=True, tools=bool(tools), stop_reason=data.get("stop_reason"))
        return data

    def _log_call(self, start: float, ok: bool, tools: bool, stop_reason: str | None = None) -> None:
        logger.info(
            "llm_call",
            extra={
                "extra_fields": {
                    "provider": "claude",
                    "model": ANTHROPIC_MODEL,
                    "tools": tools,
                    "ok": ok,
                    "stop_reason": stop_reason,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                }
            },
        )
