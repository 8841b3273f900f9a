from __future__ import annotations


class ToolError(RuntimeError):
    """Base error for agent tool dispatch."""


class ToolNotFound(ToolError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolExecutionFailed(ToolError):
    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name
