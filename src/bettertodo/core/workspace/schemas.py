from __future__ import annotations

from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field


class Todo(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    content: str
    date: str | None = None
    folder_id: str | None = None
    type: Literal["todo", "h1", "h2", "h3"] = "todo"
    completed: bool = False
    archived: bool = False
    pinned: bool = False
    order: float


class FullPageNote(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    title: str = "Untitled"
    content: str
    date: str | None = None
    folder_id: str | None = None
    order: float


class ArchivedDate(BaseModel):
    user_id: str
    date: str
