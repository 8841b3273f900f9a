from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

Provider = Literal["claude", "openai"]


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: dict[str, str]


@dataclass
class ToolResult:
    call_id: str
    content: str
    is_error: bool = False


@dataclass
class UserTurn:
    text: str


@dataclass
class AssistantTurn:
    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass
class ToolResultTurn:
    results: list[ToolResult]


Turn = Union[UserTurn, AssistantTurn, ToolResultTurn]


@dataclass
class TextOnly:
    text: str


@dataclass
class ToolRequest:
    text: str
    calls: list[ToolCall]


ProviderResponse = Union[TextOnly, ToolRequest]
