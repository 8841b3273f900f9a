from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Literal

ToolFormat = Literal["claude", "openai"]

_BOOL_ENUM = ["true", "false"]


@dataclass(frozen=True)
class ToolProperty:
    description: str
    enum: list[str] | None = None

    def schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "string", "description": self.description}
        if self.enum is not None:
            out["enum"] = list(self.enum)
        return out


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    properties: dict[str, ToolProperty]
    required: list[str] = field(default_factory=list)

    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {key: prop.schema() for key, prop in self.properties.items()},
            "required": list(self.required),
        }


AGENT_TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="createTodo",
        description="Create a new todo item. Use this to add tasks or action items.",
        properties={
            "content": ToolProperty("The text content of the todo item"),
            "date": ToolProperty("The date for the todo in YYYY-MM-DD format. Defaults to today if not specified."),
            "pinned": ToolProperty("Whether to pin this todo to the top. Use 'true' or 'false'.", _BOOL_ENUM),
        },
        required=["content"],
    ),
    ToolDefinition(
        name="updateTodo",
        description="Update an existing todo item's content or properties.",
        properties={
            "todoId": ToolProperty("The ID of the todo to update"),
            "content": ToolProperty("New text content for the todo"),
            "pinned": ToolProperty("Whether to pin this todo. Use 'true' or 'false'.", _BOOL_ENUM),
        },
        required=["todoId"],
    ),
    ToolDefinition(
        name="completeTodo",
        description="Mark a todo as completed (checked off).",
        properties={"todoId": ToolProperty("The ID of the todo to complete")},
        required=["todoId"],
    ),
    ToolDefinition(
        name="deleteTodo",
        description="Delete a todo item permanently.",
        properties={"todoId": ToolProperty("The ID of the todo to delete")},
        required=["todoId"],
    ),
    ToolDefinition(
        name="createNote",
        description="Create a new full-page note with markdown content.",
        properties={
            "title": ToolProperty("The title of the note"),
            "content": ToolProperty("The markdown content of the note"),
            "date": ToolProperty("The date for the note in YYYY-MM-DD format. Defaults to today if not specified."),
        },
        required=["content"],
    ),
    ToolDefinition(
        name="updateNote",
        description="Update an existing note's title or content.",
        properties={
            "noteId": ToolProperty("The ID of the note to update"),
            "title": ToolProperty("New title for the note"),
            "content": ToolProperty("New markdown content for the note"),
        },
        required=["noteId"],
    ),
    ToolDefinition(
        name="moveTodosToDate",
        description="Move one or more todos to a different date.",
        properties={
            "todoIds": ToolProperty("Comma-separated list of todo IDs to move"),
            "targetDate": ToolProperty("The target date in YYYY-MM-DD format"),
        },
        required=["todoIds", "targetDate"],
    ),
    ToolDefinition(
        name="searchTodos",
        description="Search for todos by content. Returns matching todos with their IDs.",
        properties={
            "query": ToolProperty("Search query to find in todo content"),
            "date": ToolProperty("Optional: limit search to a specific date (YYYY-MM-DD)"),
            "includeCompleted": ToolProperty(
                "Whether to include completed todos. Use 'true' or 'false'. Defaults to 'false'.", _BOOL_ENUM
            ),
        },
        required=["query"],
    ),
    ToolDefinition(
        name="searchNotes",
        description="Search for notes by title or content. Returns matching notes with their IDs.",
        properties={"query": ToolProperty("Search query to find in note title or content")},
        required=["query"],
    ),
    ToolDefinition(
        name="getTodosForDate",
        description="Get all todos for a specific date. Useful for understanding what tasks exist.",
        properties={
            "date": ToolProperty("The date to get todos for in YYYY-MM-DD format"),
            "includeCompleted": ToolProperty(
                "Whether to include completed todos. Use 'true' or 'false'. Defaults to 'false'.", _BOOL_ENUM
            ),
        },
        required=["date"],
    ),
    ToolDefinition(
        name="archiveDate",
        description="Archive all todos for a specific date.",
        properties={"date": ToolProperty("The date to archive in YYYY-MM-DD format")},
        required=["date"],
    ),
)


def render(fmt: ToolFormat, tools: tuple[ToolDefinition, ...] | list[ToolDefinition] = AGENT_TOOLS) -> list[dict[str, Any]]:
    """Project the catalog into a provider's tool description format.

    Every call builds new dictionaries, so callers may mutate the result.
    """
    if fmt == "claude":
        rendered = [
            {"name": tool.name, "description": tool.description, "input_schema": tool.input_schema()}
            for tool in tools
        ]
    elif fmt == "openai":
        rendered = [
            {
                "type": "function",
                "function": {"name": tool.name, "description": tool.description, "parameters": tool.input_schema()},
            }
            for tool in tools
        ]
    else:
        raise ValueError(f"Unknown tool format: {fmt}")
    return copy.deepcopy(rendered)
