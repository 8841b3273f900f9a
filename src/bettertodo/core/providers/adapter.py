from __future__ import annotations

from typing import Protocol, Sequence

from bettertodo.core.tools.catalog import AGENT_TOOLS, ToolDefinition, render

from .anthropic import AnthropicClient, first_anthropic_text, map_anthropic_response
from .openai import OpenAIClient, first_openai_text, map_openai_response
from .schemas import Provider, ProviderResponse, Turn


class ProviderClient(Protocol):
    def complete(self, provider: Provider, api_key: str, system_prompt: str, turns: list[Turn]) -> str: ...

    def complete_with_tools(
        self,
        provider: Provider,
        api_key: str,
        system_prompt: str,
        turns: list[Turn],
        tools: Sequence[ToolDefinition] = AGENT_TOOLS,
    ) -> ProviderResponse: ...


class LLMProviderClient:
    """Dispatches provider-agnostic requests to the Anthropic or OpenAI wire client.

    Holds no per-call state; the API key travels with every request.
    """

    def __init__(self, anthropic: AnthropicClient | None = None, openai: OpenAIClient | None = None) -> None:
        self.anthropic = anthropic or AnthropicClient()
        self.openai = openai or OpenAIClient()

    def complete(self, provider: Provider, api_key: str, system_prompt: str, turns: list[Turn]) -> str:
        if provider == "claude":
            return first_anthropic_text(self.anthropic.create_message(api_key, system_prompt, turns))
        return first_openai_text(self.openai.chat_completion(api_key, system_prompt, turns))

    def complete_with_tools(
        self,
        provider: Provider,
        api_key: str,
        system_prompt: str,
        turns: list[Turn],
        tools: Sequence[ToolDefinition] = AGENT_TOOLS,
    ) -> ProviderResponse:
        if provider == "claude":
            data = self.anthropic.create_message(api_key, system_prompt, turns, tools=render("claude", list(tools)))
            return map_anthropic_response(data)
        data = self.openai.chat_completion(api_key, system_prompt, turns, tools=render("openai", list(tools)))
        return map_openai_response(data)
