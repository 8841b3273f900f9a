from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

SourceType = Literal["todo", "fullPageNote"]
ProviderName = Literal["claude", "openai"]
TaskType = Literal["expand", "code", "summarize", "analyze", "other", "run"]
TaskStatus = Literal["pending", "processing", "completed", "failed"]
LogStatus = Literal["pending", "success", "error"]

TASK_STATUSES: tuple[TaskStatus, ...] = ("pending", "processing", "completed", "failed")


def utc_now_iso() -> str:
    # Fixed width so timestamps sort lexicographically.
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    ts_iso: str = Field(default_factory=utc_now_iso)
    provider: ProviderName | None = None


class ExecutionLogEntry(BaseModel):
    tool_name: str
    tool_input: str
    tool_result: str | None = None
    status: LogStatus = "pending"
    ts_iso: str = Field(default_factory=utc_now_iso)


class AgentTask(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    created_at_iso: str = Field(default_factory=utc_now_iso)
    source_id: str
    source_type: SourceType
    source_content: str
    source_title: str | None = None
    provider: ProviderName
    actual_provider: ProviderName | None = None
    task_type: TaskType
    custom_instructions: str | None = None
    status: TaskStatus = "pending"
    result: str | None = None
    error: str | None = None
    messages: list[ConversationMessage] = Field(default_factory=list)
    execution_log: list[ExecutionLogEntry] = Field(default_factory=list)
    folder_id: str | None = None
    date: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.status in {"pending", "processing"}


class TaskCounts(BaseModel):
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    total: int = 0
