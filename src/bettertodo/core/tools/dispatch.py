from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from bettertodo.core.providers.schemas import ToolCall
from bettertodo.core.workspace import Todo, WorkspaceNotFound, WorkspaceStore

from .errors import ToolExecutionFailed, ToolNotFound
from .inputs import (
    ArchiveDateInput,
    CompleteTodoInput,
    CreateNoteInput,
    CreateTodoInput,
    DeleteTodoInput,
    GetTodosForDateInput,
    MoveTodosToDateInput,
    SearchNotesInput,
    SearchTodosInput,
    UpdateNoteInput,
    UpdateTodoInput,
)

logger = logging.getLogger("bettertodo.tools")


@dataclass(frozen=True)
class ToolContext:
    user_id: str
    today: str
    folder_id: str | None = None

    def placement(self, requested_date: str | None) -> tuple[str | None, str | None]:
        """Return ``(date, folder_id)`` for a new todo or note."""
        if self.folder_id:
            return None, self.folder_id
        return requested_date or self.today, None


ToolHandler = Callable[[WorkspaceStore, ToolContext, Any], dict[str, Any]]


@dataclass(frozen=True)
class ToolSpec:
    input_model: type[BaseModel]
    fn: ToolHandler


def _todo_summary(todo: Todo) -> dict[str, Any]:
    return {
        "id": todo.id,
        "content": todo.content,
        "date": todo.date,
        "completed": todo.completed,
        "pinned": todo.pinned,
    }


def _create_todo(store: WorkspaceStore, ctx: ToolContext, args: CreateTodoInput) -> dict[str, Any]:
    date, folder_id = ctx.placement(args.date)
    todo = store.create_todo(ctx.user_id, args.content, date=date, folder_id=folder_id, pinned=args.pinned)
    return {"success": True, "todoId": todo.id}


def _update_todo(store: WorkspaceStore, ctx: ToolContext, args: UpdateTodoInput) -> dict[str, Any]:
    store.update_todo(ctx.user_id, args.todo_id, content=args.content, pinned=args.pinned)
    return {"success": True}


def _complete_todo(store: WorkspaceStore, ctx: ToolContext, args: CompleteTodoInput) -> dict[str, Any]:
    store.complete_todo(ctx.user_id, args.todo_id)
    return {"success": True}


def _delete_todo(store: WorkspaceStore, ctx: ToolContext, args: DeleteTodoInput) -> dict[str, Any]:
    store.delete_todo(ctx.user_id, args.todo_id)
    return {"success": True}


def _create_note(store: WorkspaceStore, ctx: ToolContext, args: CreateNoteInput) -> dict[str, Any]:
    date, folder_id = ctx.placement(args.date)
    note = store.create_note(ctx.user_id, args.content, title=args.title, date=date, folder_id=folder_id)
    return {"success": True, "noteId": note.id}


def _update_note(store: WorkspaceStore, ctx: ToolContext, args: UpdateNoteInput) -> dict[str, Any]:
    store.update_note(ctx.user_id, args.note_id, title=args.title, content=args.content)
    return {"success": True}


def _move_todos_to_date(store: WorkspaceStore, ctx: ToolContext, args: MoveTodosToDateInput) -> dict[str, Any]:
    moved = store.move_todos_to_date(ctx.user_id, args.todo_ids, args.target_date)
    return {"success": True, "movedCount": moved}


def _search_todos(store: WorkspaceStore, ctx: ToolContext, args: SearchTodosInput) -> dict[str, Any]:
    todos = store.search_todos(ctx.user_id, args.query, date=args.date, include_completed=args.include_completed)
    return {"todos": [_todo_summary(todo) for todo in todos]}


def _search_notes(store: WorkspaceStore, ctx: ToolContext, args: SearchNotesInput) -> dict[str, Any]:
    return {"notes": store.search_notes(ctx.user_id, args.query)}


def _get_todos_for_date(store: WorkspaceStore, ctx: ToolContext, args: GetTodosForDateInput) -> dict[str, Any]:
    todos = store.get_todos_for_date(ctx.user_id, args.date, include_completed=args.include_completed)
    return {"todos": [{**_todo_summary(todo), "archived": todo.archived} for todo in todos]}


def _archive_date(store: WorkspaceStore, ctx: ToolContext, args: ArchiveDateInput) -> dict[str, Any]:
    archived = store.archive_date(ctx.user_id, args.date)
    return {"success": True, "archivedCount": archived}


DISPATCH: dict[str, ToolSpec] = {
    "createTodo": ToolSpec(CreateTodoInput, _create_todo),
    "updateTodo": ToolSpec(UpdateTodoInput, _update_todo),
    "completeTodo": ToolSpec(CompleteTodoInput, _complete_todo),
    "deleteTodo": ToolSpec(DeleteTodoInput, _delete_todo),
    "createNote": ToolSpec(CreateNoteInput, _create_note),
    "updateNote": ToolSpec(UpdateNoteInput, _update_note),
    "moveTodosToDate": ToolSpec(MoveTodosToDateInput, _move_todos_to_date),
    "searchTodos": ToolSpec(SearchTodosInput, _search_todos),
    "searchNotes": ToolSpec(SearchNotesInput, _search_notes),
    "getTodosForDate": ToolSpec(GetTodosForDateInput, _get_todos_for_date),
    "archiveDate": ToolSpec(ArchiveDateInput, _archive_date),
}


def _format_validation_error(name: str, exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "input"
        parts.append(f"{loc}: {error.get('msg', 'invalid value')}")
    return f"Invalid input for {name}: " + "; ".join(parts)


class ToolDispatcher:
    def __init__(self, workspace: WorkspaceStore, table: dict[str, ToolSpec] | None = None) -> None:
        self.workspace = workspace
        self.table = table if table is not None else DISPATCH

    def execute(self, call: ToolCall, ctx: ToolContext) -> dict[str, Any]:
        spec = self.table.get(call.name)
        if spec is None:
            raise ToolNotFound(call.name)

        try:
            args = spec.input_model.model_validate(call.arguments)
        except ValidationError as exc:
            raise ToolExecutionFailed(call.name, _format_validation_error(call.name, exc)) from exc

        try:
            result = spec.fn(self.workspace, ctx, args)
        except (WorkspaceNotFound, ValueError, OSError) as exc:
            raise ToolExecutionFailed(call.name, str(exc) or f"{call.name} failed") from exc
        except Exception as exc:
            logger.exception("tool_crashed", extra={"extra_fields": {"tool": call.name}})
            raise ToolExecutionFailed(call.name, f"{call.name} failed: {exc.__class__.__name__}") from exc

        logger.info("tool_executed", extra={"extra_fields": {"tool": call.name}})
        return result
