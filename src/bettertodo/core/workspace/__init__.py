from .schemas import ArchivedDate, FullPageNote, Todo
from .store import WorkspaceNotFound, WorkspaceStore

__all__ = ["ArchivedDate", "FullPageNote", "Todo", "WorkspaceNotFound", "WorkspaceStore"]
