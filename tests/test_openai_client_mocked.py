from __future__ import annotations

import json

import httpx
import pytest

from bettertodo.core.providers import (
    AssistantTurn,
    LLMProviderClient,
    NoTextResponse,
    ProviderRequestFailed,
    TextOnly,
    ToolCall,
    ToolRequest,
    ToolResult,
    ToolResultTurn,
    UserTurn,
)


def _install(monkeypatch, handler) -> None:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr("bettertodo.core.http.client.get_http_client", lambda: client)
    monkeypatch.setattr("bettertodo.core.http.client.time.sleep", lambda _: None)


def test_complete_sends_chat_completion_with_system_message(monkeypatch) -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            request=request,
            json={"choices": [{"message": {"role": "assistant", "content": "Summary"}, "finish_reason": "stop"}]},
        )

    _install(monkeypatch, handler)

    text = LLMProviderClient().complete(
        "openai",
        "sk-openai-123",
        "be concise",
        [UserTurn(text="first"), AssistantTurn(text="answer"), UserTurn(text="more?")],
    )

    assert text == "Summary"
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["auth"] == "Bearer sk-openai-123"
    assert captured["body"]["model"] == "gpt-4o"
    assert captured["body"]["max_tokens"] == 4096
    assert captured["body"]["messages"] == [
        {"role": "system", "content": "be concise"},
        {"role": "user", "content": "first"},
        {"role": "assistant", "content": "answer"},
        {"role": "user", "content": "more?"},
    ]


def test_empty_content_raises_no_text_response(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, request=request, json={"choices": [{"message": {"content": None}}]})

    _install(monkeypatch, handler)

    with pytest.raises(NoTextResponse, match="No response from OpenAI"):
        LLMProviderClient().complete("openai", "sk-openai-123", "s", [UserTurn(text="hi")])


def test_tool_calls_map_to_tool_request_with_string_arguments(monkeypatch) -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            request=request,
            json={
                "choices": [
                    {
                        "message": {
                            "role": "assistant",
                            "content": None,
                            "tool_calls": [
                                {
                                    "id": "call_1",
                                    "type": "function",
                                    "function": {"name": "searchTodos", "arguments": '{"query": "milk", "includeCompleted": false}'},
                                },
                                {
                                    "id": "call_2",
                                    "type": "function",
                                    "function": {"name": "archiveDate", "arguments": "not json"},
                                },
                            ],
                        },
                        "finish_reason": "tool_calls",
                    }
                ]
            },
        )

    _install(monkeypatch, handler)

    turns = [
        UserTurn(text="note"),
        AssistantTurn(text="Looking.", tool_calls=[ToolCall(id="call_0", name="createTodo", arguments={"content": "x"})]),
        ToolResultTurn(results=[ToolResult(call_id="call_0", content='{"success": true}')]),
    ]
    response = LLMProviderClient().complete_with_tools("openai", "sk-openai-123", "s", turns)

    assert isinstance(response, ToolRequest)
    assert response.text == ""
    assert response.calls == [
        ToolCall(id="call_1", name="searchTodos", arguments={"query": "milk", "includeCompleted": "false"}),
        ToolCall(id="call_2", name="archiveDate", arguments={}),
    ]

    body = captured["body"]
    assert body["tools"][0]["type"] == "function"
    assert body["messages"][2] == {
        "role": "assistant",
        "content": "Looking.",
        "tool_calls": [
            {"id": "call_0", "type": "function", "function": {"name": "createTodo", "arguments": '{"content": "x"}'}}
        ],
    }
    assert body["messages"][3] == {"role": "tool", "tool_call_id": "call_0", "content": '{"success": true}'}


def test_stop_without_tool_calls_is_text_only(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            request=request,
            json={"choices": [{"message": {"content": "All done."}, "finish_reason": "stop"}]},
        )

    _install(monkeypatch, handler)

    response = LLMProviderClient().complete_with_tools("openai", "sk-openai-123", "s", [UserTurn(text="note")])

    assert response == TextOnly(text="All done.")


def test_server_error_after_retries_is_request_failure(monkeypatch) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(500, request=request, json={"error": {"message": "The server had an error"}})

    _install(monkeypatch, handler)
    monkeypatch.setenv("BETTERTODO_HTTP_RETRIES", "1")

    with pytest.raises(ProviderRequestFailed, match="The server had an error"):
        LLMProviderClient().complete("openai", "sk-openai-123", "s", [UserTurn(text="hi")])

    assert calls["count"] == 2
