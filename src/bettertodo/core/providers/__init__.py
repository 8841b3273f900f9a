from .adapter import LLMProviderClient, ProviderClient
from .errors import NoApiKeyAvailable, NoTextResponse, ProviderError, ProviderRequestFailed
from .resolution import ResolvedProvider, resolve_provider
from .schemas import (
    AssistantTurn,
    Provider,
    ProviderResponse,
    TextOnly,
    ToolCall,
    ToolRequest,
    ToolResult,
    ToolResultTurn,
    Turn,
    UserTurn,
)

__all__ = [
    "AssistantTurn",
    "LLMProviderClient",
    "NoApiKeyAvailable",
    "NoTextResponse",
    "Provider",
    "ProviderClient",
    "ProviderError",
    "ProviderRequestFailed",
    "ProviderResponse",
    "ResolvedProvider",
    "TextOnly",
    "ToolCall",
    "ToolRequest",
    "ToolResult",
    "ToolResultTurn",
    "Turn",
    "UserTurn",
    "resolve_provider",
]
