from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Any, Callable, Protocol

from bettertodo.core.config import state_dir as default_state_dir
from bettertodo.core.scheduler.jobs import run_agent_task, run_executable_note, run_follow_up
from bettertodo.core.workspace import WorkspaceStore

from .errors import TaskNotFound, TaskValidationError
from .schemas import AgentTask, ProviderName, SourceType, TaskCounts, TaskStatus, TaskType
from .store import AgentTaskStore

logger = logging.getLogger("bettertodo.agent.service")

_CHECKBOX_RE = re.compile(r"^[-*]\s*\[\s*\]\s+(.+)$")
_BULLET_RE = re.compile(r"^[-*]\s+(?!\[)(.+)$")
_NUMBERED_RE = re.compile(r"^\d+\.\s+(.+)$")

_PROVIDER_LABELS = {"claude": "Claude", "openai": "OpenAI"}


class TaskScheduler(Protocol):
    def run_after(
        self,
        delay_ms: int,
        func: Callable[..., Any],
        kwargs: dict[str, Any],
        job_id: str | None = None,
    ) -> str: ...


def extract_todo_items(text: str) -> list[str]:
    """Pull checkbox, bullet and numbered list items out of markdown."""
    items: list[str] = []
    for line in text.split("\n"):
        stripped = line.strip()
        match = _CHECKBOX_RE.match(stripped)
        if match:
            items.append(match.group(1).strip())
            continue
        match = _BULLET_RE.match(stripped)
        if match and not stripped.startswith("---") and not stripped.startswith("***"):
            items.append(match.group(1).strip())
            continue
        match = _NUMBERED_RE.match(stripped)
        if match:
            items.append(match.group(1).strip())
    return items


def conversation_markdown(task: AgentTask) -> str:
    content = task.result or ""
    default_label = _PROVIDER_LABELS[task.actual_provider or task.provider]
    for message in task.messages:
        if message.role == "user":
            label = "**You:**"
        else:
            label = f"**{_PROVIDER_LABELS[message.provider] if message.provider else default_label}:**"
        content += f"\n\n{label}\n{message.content}"
    return content


class AgentTaskService:
    def __init__(
        self,
        store: AgentTaskStore,
        workspace: WorkspaceStore,
        scheduler: TaskScheduler,
        state_dir: Path | None = None,
    ) -> None:
        self.store = store
        self.workspace = workspace
        self.scheduler = scheduler
        self.state_dir = state_dir or default_state_dir()

    def create_agent_task(
        self,
        user_id: str,
        source_id: str,
        source_type: SourceType,
        source_content: str,
        provider: ProviderName,
        task_type: TaskType,
        source_title: str | None = None,
        custom_instructions: str | None = None,
        folder_id: str | None = None,
        date: str | None = None,
    ) -> str:
        task = self.store.create(
            user_id=user_id,
            source_id=source_id,
            source_type=source_type,
            source_content=source_content,
            provider=provider,
            task_type=task_type,
            source_title=source_title,
            custom_instructions=custom_instructions,
            folder_id=folder_id,
            date=date,
        )
        self._dispatch(task)
        logger.info("agent_task_created", extra={"extra_fields": {"task_id": task.id, "task_type": task_type}})
        return task.id

    def add_follow_up_message(self, task_id: str, user_id: str, message: str) -> None:
        task = self.store.append_follow_up(task_id, user_id, message)
        self.scheduler.run_after(0, run_follow_up, {"task_id": task.id, "state_dir": str(self.state_dir)})

    def retry_agent_task(self, task_id: str, user_id: str) -> None:
        task = self.store.reset_for_retry(task_id, user_id)
        self._dispatch(task)

    def delete_agent_task(self, task_id: str, user_id: str) -> None:
        self.store.delete(task_id, user_id)

    def delete_all_agent_tasks(self, user_id: str, date: str | None = None, folder_id: str | None = None) -> int:
        return self.store.delete_all(user_id, date=date, folder_id=folder_id)

    def clear_conversation(self, task_id: str, user_id: str) -> None:
        self.store.clear_conversation(task_id, user_id)

    def get_agent_task(self, task_id: str, user_id: str) -> AgentTask:
        task = self.store.get_owned(task_id, user_id)
        if task is None:
            raise TaskNotFound()
        return task

    def list_agent_tasks(
        self,
        user_id: str,
        status: TaskStatus | None = None,
        date: str | None = None,
        folder_id: str | None = None,
    ) -> list[AgentTask]:
        return self.store.list_for_user(user_id, status=status, date=date, folder_id=folder_id)

    def agent_task_counts(self, user_id: str) -> TaskCounts:
        return self.store.counts(user_id)

    def create_todos_from_agent(
        self,
        task_id: str,
        user_id: str,
        date: str | None = None,
        folder_id: str | None = None,
    ) -> int:
        task = self.get_agent_task(task_id, user_id)
        content = task.result or ""
        replies = [message.content for message in task.messages if message.role == "assistant"]
        if replies:
            content = content + "\n\n" + "\n\n".join(replies)
        if not content.strip():
            return 0

        items = extract_todo_items(content)
        base_order = time.time() * 1000
        for index, item in enumerate(items):
            self.workspace.create_todo(
                user_id,
                item,
                date=date or task.date,
                folder_id=folder_id or task.folder_id,
                order=base_order + index,
            )
        return len(items)

    def save_result_as_note(self, task_id: str, user_id: str, title: str | None = None) -> str:
        task = self.get_agent_task(task_id, user_id)
        content = conversation_markdown(task)
        if not content.strip():
            raise TaskValidationError("No result content to save")

        note_title = title or task.source_title or f"Agent {task.task_type.capitalize()} Result"
        note = self.workspace.create_note(user_id, content, title=note_title, date=task.date, folder_id=task.folder_id)
        return note.id

    def _dispatch(self, task: AgentTask) -> None:
        func = run_executable_note if task.task_type == "run" else run_agent_task
        self.scheduler.run_after(0, func, {"task_id": task.id, "state_dir": str(self.state_dir)})
