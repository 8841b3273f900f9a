from __future__ import annotations

from dataclasses import dataclass

from bettertodo.core.keys import AvailableApiKeys

from .errors import NoApiKeyAvailable
from .schemas import Provider

NO_API_KEY_MESSAGE = (
    "No API key available. Add an Anthropic or OpenAI API key in Settings, "
    "or unpause a paused key, then try again."
)


@dataclass(frozen=True)
class ResolvedProvider:
    provider: Provider
    api_key: str
    fell_back: bool


def _usable(provider: Provider, keys: AvailableApiKeys) -> str | None:
    if provider == "claude":
        return keys.anthropic_key if keys.anthropic_available and keys.anthropic_key else None
    return keys.openai_key if keys.openai_available and keys.openai_key else None


def resolve_provider(preferred: Provider, keys: AvailableApiKeys) -> ResolvedProvider:
    key = _usable(preferred, keys)
    if key is not None:
        return ResolvedProvider(provider=preferred, api_key=key, fell_back=False)

    other: Provider = "openai" if preferred == "claude" else "claude"
    key = _usable(other, keys)
    if key is not None:
        return ResolvedProvider(provider=other, api_key=key, fell_back=True)

    raise NoApiKeyAvailable(NO_API_KEY_MESSAGE)
