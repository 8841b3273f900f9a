from .errors import AgentTaskError, TaskBusy, TaskNotFound, TaskNotRetryable, TaskValidationError
from .schemas import AgentTask, ConversationMessage, ExecutionLogEntry, TaskCounts
from .store import AgentTaskStore

__all__ = [
    "AgentTask",
    "AgentTaskError",
    "AgentTaskStore",
    "ConversationMessage",
    "ExecutionLogEntry",
    "TaskBusy",
    "TaskCounts",
    "TaskNotFound",
    "TaskNotRetryable",
    "TaskValidationError",
]
