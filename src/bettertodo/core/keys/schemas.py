from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

KeyProvider = Literal["anthropic", "openai"]


class UserApiKeys(BaseModel):
    user_id: str
    anthropic_key: str | None = None
    openai_key: str | None = None
    anthropic_paused: bool = False
    openai_paused: bool = False


class AvailableApiKeys(BaseModel):
    anthropic_available: bool = False
    anthropic_key: str | None = None
    openai_available: bool = False
    openai_key: str | None = None


class MaskedApiKeys(BaseModel):
    anthropic_key: str | None = None
    openai_key: str | None = None
    has_anthropic_key: bool = False
    has_openai_key: bool = False
    anthropic_paused: bool = False
    openai_paused: bool = False
