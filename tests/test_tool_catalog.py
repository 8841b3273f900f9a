from __future__ import annotations

import pytest

from bettertodo.core.tools.catalog import AGENT_TOOLS, render
from bettertodo.core.tools.dispatch import DISPATCH

EXPECTED_TOOLS = [
    "createTodo",
    "updateTodo",
    "completeTodo",
    "deleteTodo",
    "createNote",
    "updateNote",
    "moveTodosToDate",
    "searchTodos",
    "searchNotes",
    "getTodosForDate",
    "archiveDate",
]


def test_catalog_lists_every_tool_in_order() -> None:
    assert [tool.name for tool in AGENT_TOOLS] == EXPECTED_TOOLS


def test_every_catalog_tool_has_a_dispatch_entry() -> None:
    assert set(DISPATCH) == {tool.name for tool in AGENT_TOOLS}


def test_claude_rendering_shape() -> None:
    rendered = render("claude")

    create_todo = rendered[0]
    assert set(create_todo) == {"name", "description", "input_schema"}
    assert create_todo["name"] == "createTodo"
    schema = create_todo["input_schema"]
    assert schema["type"] == "object"
    assert schema["required"] == ["content"]
    assert schema["properties"]["pinned"] == {
        "type": "string",
        "description": "Whether to pin this todo to the top. Use 'true' or 'false'.",
        "enum": ["true", "false"],
    }
    assert "enum" not in schema["properties"]["content"]


def test_openai_rendering_shape() -> None:
    rendered = render("openai")

    move = next(item for item in rendered if item["function"]["name"] == "moveTodosToDate")
    assert move["type"] == "function"
    assert move["function"]["description"] == "Move one or more todos to a different date."
    assert move["function"]["parameters"]["required"] == ["todoIds", "targetDate"]
    assert all(prop["type"] == "string" for prop in move["function"]["parameters"]["properties"].values())


def test_rendering_is_deterministic_and_returns_fresh_copies() -> None:
    first = render("claude")
    first[0]["input_schema"]["properties"].clear()

    second = render("claude")

    assert second == render("claude")
    assert second[0]["input_schema"]["properties"]


def test_unknown_format_rejected() -> None:
    with pytest.raises(ValueError):
        render("gemini")  # type: ignore[arg-type]
