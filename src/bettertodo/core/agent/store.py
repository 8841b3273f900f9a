from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from bettertodo.core.config import env_int
from bettertodo.core.config import state_dir as default_state_dir
from bettertodo.core.storage.jsonl import JsonlTable

from .errors import TaskBusy, TaskNotFound, TaskNotRetryable, TaskValidationError
from .schemas import (
    AgentTask,
    ConversationMessage,
    ExecutionLogEntry,
    LogStatus,
    ProviderName,
    SourceType,
    TaskCounts,
    TaskStatus,
    TaskType,
    utc_now_iso,
)

logger = logging.getLogger("bettertodo.agent.store")


def _next_ts(task: AgentTask) -> str:
    now = utc_now_iso()
    if task.messages and task.messages[-1].ts_iso > now:
        return task.messages[-1].ts_iso
    return now


class AgentTaskStore:
    def __init__(self, state_dir: Path | None = None, max_records: int | None = None) -> None:
        self.state_dir = state_dir or default_state_dir()
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.max_records = max(1, max_records if max_records is not None else env_int("BETTERTODO_TASKS_MAX", 1000))
        self.table = JsonlTable(self.state_dir / "agent_tasks.jsonl", AgentTask)

    def create(
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
    ) -> AgentTask:
        if task_type == "other" and not (custom_instructions or "").strip():
            raise TaskValidationError("Custom instructions are required for 'other' task type")

        task = AgentTask(
            user_id=user_id,
            source_id=source_id,
            source_type=source_type,
            source_content=source_content,
            source_title=source_title,
            provider=provider,
            task_type=task_type,
            custom_instructions=custom_instructions,
            folder_id=folder_id,
            date=date,
        )
        with self.table.locked():
            self.table.append(task)
            self._trim()
        return task

    def get(self, task_id: str) -> AgentTask | None:
        for task in self.table.load_all():
            if task.id == task_id:
                return task
        return None

    def get_owned(self, task_id: str, user_id: str) -> AgentTask | None:
        task = self.get(task_id)
        if task is None or task.user_id != user_id:
            return None
        return task

    def list_for_user(
        self,
        user_id: str,
        status: TaskStatus | None = None,
        date: str | None = None,
        folder_id: str | None = None,
    ) -> list[AgentTask]:
        tasks = [task for task in self.table.load_all() if task.user_id == user_id]
        if folder_id is not None:
            tasks = [task for task in tasks if task.folder_id == folder_id]
        elif date is not None:
            tasks = [task for task in tasks if task.date == date]
        if status is not None:
            tasks = [task for task in tasks if task.status == status]
        return sorted(tasks, key=lambda task: task.created_at_iso, reverse=True)

    def counts(self, user_id: str) -> TaskCounts:
        counts = TaskCounts()
        for task in self.table.load_all():
            if task.user_id != user_id:
                continue
            setattr(counts, task.status, getattr(counts, task.status) + 1)
            counts.total += 1
        return counts

    def mark_processing(self, task_id: str) -> AgentTask | None:
        def apply(task: AgentTask) -> None:
            task.status = "processing"

        return self._mutate(task_id, apply)

    def mark_completed(self, task_id: str, result: str, actual_provider: ProviderName | None) -> AgentTask | None:
        def apply(task: AgentTask) -> None:
            if task.result is None:
                task.result = result
            task.status = "completed"
            task.error = None
            task.actual_provider = actual_provider

        return self._mutate(task_id, apply)

    def mark_failed(self, task_id: str, error: str, actual_provider: ProviderName | None = None) -> AgentTask | None:
        def apply(task: AgentTask) -> None:
            task.status = "failed"
            task.error = error
            if actual_provider is not None:
                task.actual_provider = actual_provider

        return self._mutate(task_id, apply)

    def append_follow_up(self, task_id: str, user_id: str, content: str) -> AgentTask:
        if not content.strip():
            raise TaskValidationError("Message cannot be empty")

        with self.table.locked():
            records = self.table.load_all()
            task = self._find_owned(records, task_id, user_id)
            if task.is_busy:
                raise TaskBusy()
            task.messages.append(ConversationMessage(role="user", content=content, ts_iso=_next_ts(task)))
            task.status = "processing"
            self.table.rewrite(records)
        return task

    def append_assistant_reply(self, task_id: str, content: str, provider: ProviderName | None = None) -> AgentTask | None:
        def apply(task: AgentTask) -> None:
            task.messages.append(
                ConversationMessage(role="assistant", content=content, ts_iso=_next_ts(task), provider=provider)
            )
            task.status = "completed"
            task.error = None

        return self._mutate(task_id, apply)

    def mark_follow_up_failed(self, task_id: str, error: str) -> AgentTask | None:
        # Status returns to completed with the original result kept.
        def apply(task: AgentTask) -> None:
            task.status = "completed"
            task.error = error

        return self._mutate(task_id, apply)

    def append_execution_log_entry(self, task_id: str, entry: ExecutionLogEntry) -> int | None:
        index: int | None = None

        def apply(task: AgentTask) -> None:
            nonlocal index
            task.execution_log.append(entry)
            index = len(task.execution_log) - 1

        self._mutate(task_id, apply)
        return index

    def update_execution_log_entry(
        self,
        task_id: str,
        index: int,
        status: LogStatus,
        tool_result: str | None = None,
    ) -> AgentTask | None:
        def apply(task: AgentTask) -> None:
            if not 0 <= index < len(task.execution_log):
                logger.warning("execution log index out of range", extra={"extra_fields": {"index": index}})
                return
            entry = task.execution_log[index]
            entry.status = status
            entry.tool_result = tool_result

        return self._mutate(task_id, apply)

    def delete(self, task_id: str, user_id: str) -> None:
        with self.table.locked():
            records = self.table.load_all()
            kept = [task for task in records if not (task.id == task_id and task.user_id == user_id)]
            if len(kept) != len(records):
                self.table.rewrite(kept)

    def delete_all(self, user_id: str, date: str | None = None, folder_id: str | None = None) -> int:
        def matches(task: AgentTask) -> bool:
            if task.user_id != user_id:
                return False
            if folder_id is not None:
                return task.folder_id == folder_id
            if date is not None:
                return task.date == date
            return True

        with self.table.locked():
            records = self.table.load_all()
            kept = [task for task in records if not matches(task)]
            deleted = len(records) - len(kept)
            if deleted:
                self.table.rewrite(kept)
        return deleted

    def reset_for_retry(self, task_id: str, user_id: str) -> AgentTask:
        with self.table.locked():
            records = self.table.load_all()
            task = self._find_owned(records, task_id, user_id)
            if task.status != "failed":
                raise TaskNotRetryable()
            task.status = "pending"
            task.result = None
            task.error = None
            task.actual_provider = None
            task.messages = []
            task.execution_log = []
            self.table.rewrite(records)
        return task

    def clear_conversation(self, task_id: str, user_id: str) -> AgentTask:
        with self.table.locked():
            records = self.table.load_all()
            task = self._find_owned(records, task_id, user_id)
            task.messages = []
            self.table.rewrite(records)
        return task

    def _mutate(self, task_id: str, apply: Callable[[AgentTask], None]) -> AgentTask | None:
        with self.table.locked():
            records = self.table.load_all()
            for task in records:
                if task.id == task_id:
                    break
            else:
                # Deleted while a runner was working on it.
                logger.info("task gone, update skipped", extra={"extra_fields": {"task_id": task_id}})
                return None
            apply(task)
            self.table.rewrite(records)
        return task

    @staticmethod
    def _find_owned(records: list[AgentTask], task_id: str, user_id: str) -> AgentTask:
        for task in records:
            if task.id == task_id and task.user_id == user_id:
                return task
        raise TaskNotFound()

    def _trim(self) -> None:
        records = self.table.load_all()
        excess = len(records) - self.max_records
        if excess <= 0:
            return
        # Only terminal tasks are trimmed, oldest first.
        terminal = sorted(
            (task for task in records if task.status in {"completed", "failed"}),
            key=lambda task: task.created_at_iso,
        )
        drop = {task.id for task in terminal[:excess]}
        if not drop:
            return
        self.table.rewrite([task for task in records if task.id not in drop])
