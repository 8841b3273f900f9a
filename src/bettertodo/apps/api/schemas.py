from __future__ import annotations

from pydantic import BaseModel, Field

from bettertodo.core.agent.schemas import ProviderName, SourceType, TaskType


class CreateAgentTaskRequest(BaseModel):
    source_id: str
    source_type: SourceType
    source_content: str
    source_title: str | None = None
    provider: ProviderName
    task_type: TaskType
    custom_instructions: str | None = None
    folder_id: str | None = None
    date: str | None = None


class FollowUpRequest(BaseModel):
    message: str = Field(min_length=1)


class CreateTodosRequest(BaseModel):
    date: str | None = None
    folder_id: str | None = None


class SaveNoteRequest(BaseModel):
    title: str | None = None


class SetApiKeyRequest(BaseModel):
    key: str


class PauseApiKeyRequest(BaseModel):
    paused: bool
