from __future__ import annotations

import json
from datetime import date as date_type
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_bool_string(value: Any) -> Any:
    if isinstance(value, str):
        normalized = value.strip().casefold()
        if normalized == "true":
            return True
        if normalized == "false":
            return False
        raise ValueError("expected 'true' or 'false'")
    return value


def parse_date_string(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("expected a date string")
    candidate = value.strip()
    try:
        parsed = date_type.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("expected a date in YYYY-MM-DD format") from exc
    if len(candidate) != 10:
        raise ValueError("expected a date in YYYY-MM-DD format")
    return parsed.isoformat()


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ToolInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)


class CreateTodoInput(ToolInput):
    content: str = Field(min_length=1)
    date: str | None = None
    pinned: bool = False

    @field_validator("pinned", mode="before")
    @classmethod
    def validate_pinned(cls, value: Any) -> Any:
        return parse_bool_string(value)

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> Any:
        return parse_date_string(_blank_to_none(value))


class UpdateTodoInput(ToolInput):
    todo_id: str = Field(alias="todoId", min_length=1)
    content: str | None = None
    pinned: bool | None = None

    @field_validator("pinned", mode="before")
    @classmethod
    def validate_pinned(cls, value: Any) -> Any:
        return parse_bool_string(_blank_to_none(value))


class CompleteTodoInput(ToolInput):
    todo_id: str = Field(alias="todoId", min_length=1)


class DeleteTodoInput(ToolInput):
    todo_id: str = Field(alias="todoId", min_length=1)


class CreateNoteInput(ToolInput):
    title: str | None = None
    content: str = Field(min_length=1)
    date: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> Any:
        return parse_date_string(_blank_to_none(value))


class UpdateNoteInput(ToolInput):
    note_id: str = Field(alias="noteId", min_length=1)
    title: str | None = None
    content: str | None = None


class MoveTodosToDateInput(ToolInput):
    todo_ids: list[str] = Field(alias="todoIds", min_length=1)
    target_date: str = Field(alias="targetDate")

    @field_validator("todo_ids", mode="before")
    @classmethod
    def split_ids(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().startswith("["):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError("expected a comma-separated list of todo ids") from exc
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        return value

    @field_validator("target_date", mode="before")
    @classmethod
    def validate_target_date(cls, value: Any) -> Any:
        return parse_date_string(value)


class SearchTodosInput(ToolInput):
    query: str = Field(min_length=1)
    date: str | None = None
    include_completed: bool = Field(default=False, alias="includeCompleted")

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> Any:
        return parse_date_string(_blank_to_none(value))

    @field_validator("include_completed", mode="before")
    @classmethod
    def validate_include_completed(cls, value: Any) -> Any:
        return parse_bool_string(value)


class SearchNotesInput(ToolInput):
    query: str = Field(min_length=1)


class GetTodosForDateInput(ToolInput):
    date: str
    include_completed: bool = Field(default=False, alias="includeCompleted")

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> Any:
        return parse_date_string(value)

    @field_validator("include_completed", mode="before")
    @classmethod
    def validate_include_completed(cls, value: Any) -> Any:
        return parse_bool_string(value)


class ArchiveDateInput(ToolInput):
    date: str

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> Any:
        return parse_date_string(value)
