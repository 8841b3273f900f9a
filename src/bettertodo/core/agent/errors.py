from __future__ import annotations


class AgentTaskError(RuntimeError):
    """Base error for agent task operations surfaced to callers."""


class TaskValidationError(AgentTaskError):
    pass


class TaskNotFound(AgentTaskError):
    def __init__(self, message: str = "Task not found") -> None:
        super().__init__(message)


class TaskBusy(AgentTaskError):
    def __init__(self, message: str = "Task is still processing") -> None:
        super().__init__(message)


class TaskNotRetryable(AgentTaskError):
    def __init__(self, message: str = "Can only retry failed tasks") -> None:
        super().__init__(message)
