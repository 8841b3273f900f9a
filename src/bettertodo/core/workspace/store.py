from __future__ import annotations

import time
from pathlib import Path

from bettertodo.core.config import state_dir as default_state_dir
from bettertodo.core.storage.jsonl import JsonlTable

from .schemas import ArchivedDate, FullPageNote, Todo

_SEARCH_TODOS_LIMIT = 20
_SEARCH_NOTES_LIMIT = 10
_PREVIEW_CHARS = 100


class WorkspaceNotFound(LookupError):
    pass


def _order_now() -> float:
    return time.time() * 1000


class WorkspaceStore:
    def __init__(self, state_dir: Path | None = None) -> None:
        self.state_dir = state_dir or default_state_dir()
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.todos = JsonlTable(self.state_dir / "todos.jsonl", Todo)
        self.notes = JsonlTable(self.state_dir / "notes.jsonl", FullPageNote)
        self.archived_dates = JsonlTable(self.state_dir / "archived_dates.jsonl", ArchivedDate)

    def create_todo(
        self,
        user_id: str,
        content: str,
        date: str | None = None,
        folder_id: str | None = None,
        pinned: bool = False,
        order: float | None = None,
    ) -> Todo:
        todo = Todo(
            user_id=user_id,
            content=content,
            date=date,
            folder_id=folder_id,
            pinned=pinned,
            order=order if order is not None else _order_now(),
        )
        with self.todos.locked():
            self.todos.append(todo)
        return todo

    def get_todo(self, user_id: str, todo_id: str) -> Todo | None:
        for todo in self.todos.load_all():
            if todo.id == todo_id and todo.user_id == user_id:
                return todo
        return None

    def update_todo(self, user_id: str, todo_id: str, content: str | None = None, pinned: bool | None = None) -> Todo:
        with self.todos.locked():
            records = self.todos.load_all()
            todo = self._find_owned_todo(records, user_id, todo_id)
            if content is not None:
                todo.content = content
            if pinned is not None:
                todo.pinned = pinned
            self.todos.rewrite(records)
        return todo

    def complete_todo(self, user_id: str, todo_id: str) -> Todo:
        with self.todos.locked():
            records = self.todos.load_all()
            todo = self._find_owned_todo(records, user_id, todo_id)
            if not todo.completed:
                todo.completed = True
                todo.archived = True
                self.todos.rewrite(records)
        return todo

    def delete_todo(self, user_id: str, todo_id: str) -> bool:
        with self.todos.locked():
            records = self.todos.load_all()
            kept = [todo for todo in records if not (todo.id == todo_id and todo.user_id == user_id)]
            if len(kept) == len(records):
                return False
            self.todos.rewrite(kept)
        return True

    def move_todos_to_date(self, user_id: str, todo_ids: list[str], target_date: str) -> int:
        wanted = set(todo_ids)
        moved = 0
        with self.todos.locked():
            records = self.todos.load_all()
            for todo in records:
                if todo.id in wanted and todo.user_id == user_id:
                    todo.date = target_date
                    moved += 1
            if moved:
                self.todos.rewrite(records)
        return moved

    def search_todos(
        self,
        user_id: str,
        query: str,
        date: str | None = None,
        include_completed: bool = False,
    ) -> list[Todo]:
        needle = query.casefold().strip()
        matches: list[Todo] = []
        for todo in self.todos.load_all():
            if todo.user_id != user_id or needle not in todo.content.casefold():
                continue
            if date is not None and todo.date != date:
                continue
            if not include_completed and todo.completed:
                continue
            matches.append(todo)
            if len(matches) >= _SEARCH_TODOS_LIMIT:
                break
        return matches

    def get_todos_for_date(self, user_id: str, date: str, include_completed: bool = False) -> list[Todo]:
        todos = [
            todo
            for todo in self.todos.load_all()
            if todo.user_id == user_id and todo.date == date and (include_completed or not todo.completed)
        ]
        return sorted(todos, key=lambda item: item.order)

    def archive_date(self, user_id: str, date: str) -> int:
        with self.todos.locked():
            records = self.todos.load_all()
            archived = 0
            for todo in records:
                if todo.user_id == user_id and todo.date == date and not todo.archived:
                    todo.archived = True
                    todo.completed = True
                    archived += 1
            if archived:
                self.todos.rewrite(records)

        with self.archived_dates.locked():
            existing = self.archived_dates.load_all()
            if not any(item.user_id == user_id and item.date == date for item in existing):
                self.archived_dates.append(ArchivedDate(user_id=user_id, date=date))
        return archived

    def is_date_archived(self, user_id: str, date: str) -> bool:
        return any(item.user_id == user_id and item.date == date for item in self.archived_dates.load_all())

    def create_note(
        self,
        user_id: str,
        content: str,
        title: str | None = None,
        date: str | None = None,
        folder_id: str | None = None,
    ) -> FullPageNote:
        note = FullPageNote(
            user_id=user_id,
            title=title or "Untitled",
            content=content,
            date=date,
            folder_id=folder_id,
            order=_order_now(),
        )
        with self.notes.locked():
            self.notes.append(note)
        return note

    def get_note(self, user_id: str, note_id: str) -> FullPageNote | None:
        for note in self.notes.load_all():
            if note.id == note_id and note.user_id == user_id:
                return note
        return None

    def update_note(self, user_id: str, note_id: str, title: str | None = None, content: str | None = None) -> FullPageNote:
        with self.notes.locked():
            records = self.notes.load_all()
            for note in records:
                if note.id == note_id and note.user_id == user_id:
                    break
            else:
                raise WorkspaceNotFound("Note not found or not owned by user")
            if title is not None:
                note.title = title
            if content is not None:
                note.content = content
            self.notes.rewrite(records)
        return note

    def search_notes(self, user_id: str, query: str) -> list[dict[str, str | None]]:
        needle = query.casefold().strip()
        results: list[dict[str, str | None]] = []
        for note in self.notes.load_all():
            if note.user_id != user_id:
                continue
            if needle not in note.content.casefold() and needle not in note.title.casefold():
                continue
            preview = note.content[:_PREVIEW_CHARS] + ("..." if len(note.content) > _PREVIEW_CHARS else "")
            results.append({"id": note.id, "title": note.title, "content_preview": preview, "date": note.date})
            if len(results) >= _SEARCH_NOTES_LIMIT:
                break
        return results

    @staticmethod
    def _find_owned_todo(records: list[Todo], user_id: str, todo_id: str) -> Todo:
        for todo in records:
            if todo.id == todo_id and todo.user_id == user_id:
                return todo
        raise WorkspaceNotFound("Todo not found or not owned by user")
