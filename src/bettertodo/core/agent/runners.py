from __future__ import annotations

import logging
from datetime import datetime

from bettertodo.core.config import local_timezone
from bettertodo.core.keys import ApiKeyStore
from bettertodo.core.logging import log_context
from bettertodo.core.providers import (
    AssistantTurn,
    ProviderClient,
    ProviderError,
    ResolvedProvider,
    Turn,
    UserTurn,
    resolve_provider,
)
from bettertodo.core.tools.dispatch import ToolContext, ToolDispatcher
from bettertodo.core.workspace import WorkspaceStore

from .loop import AgenticLoop
from .prompts import (
    executable_note_prompt,
    follow_up_opening_message,
    follow_up_system_prompt,
    initial_user_message,
    source_message,
    system_prompt_for,
)
from .schemas import AgentTask
from .store import AgentTaskStore

logger = logging.getLogger("bettertodo.agent")

UNKNOWN_ERROR = "Unknown error occurred"


def _error_message(exc: Exception) -> str:
    return str(exc) or UNKNOWN_ERROR


def today_iso() -> str:
    return datetime.now(local_timezone()).date().isoformat()


class _Runner:
    def __init__(self, store: AgentTaskStore, keys: ApiKeyStore, client: ProviderClient) -> None:
        self.store = store
        self.keys = keys
        self.client = client

    def _load(self, task_id: str) -> AgentTask | None:
        task = self.store.get(task_id)
        if task is None:
            logger.warning("task not found", extra={"extra_fields": {"task_id": task_id}})
        return task

    def _resolve(self, task: AgentTask) -> ResolvedProvider:
        resolved = resolve_provider(task.provider, self.keys.get_available_api_keys(task.user_id))
        if resolved.fell_back:
            logger.info(
                "provider_fallback",
                extra={"extra_fields": {"preferred": task.provider, "actual": resolved.provider}},
            )
        return resolved


class SingleShotRunner(_Runner):
    """Runs expand/code/summarize/analyze/other tasks with one completion."""

    def run(self, task_id: str) -> None:
        task = self._load(task_id)
        if task is None:
            return

        with log_context(task_id=task.id, user_id=task.user_id):
            self.store.mark_processing(task.id)
            resolved: ResolvedProvider | None = None
            try:
                resolved = self._resolve(task)
                result = self.client.complete(
                    resolved.provider,
                    resolved.api_key,
                    system_prompt_for(task.task_type),
                    [UserTurn(text=initial_user_message(task))],
                )
            except ProviderError as exc:
                logger.warning("agent_task_failed", extra={"extra_fields": {"error": str(exc)}})
                self.store.mark_failed(task.id, _error_message(exc), resolved.provider if resolved else None)
                return
            except Exception as exc:
                logger.exception("agent_task_crashed")
                self.store.mark_failed(task.id, _error_message(exc), resolved.provider if resolved else None)
                return

            self.store.mark_completed(task.id, result, resolved.provider)
            logger.info("agent_task_completed", extra={"extra_fields": {"provider": resolved.provider}})


class ExecutableNoteRunner(_Runner):
    """Runs ``run`` tasks through the agentic tool-use loop."""

    def __init__(
        self,
        store: AgentTaskStore,
        keys: ApiKeyStore,
        client: ProviderClient,
        workspace: WorkspaceStore,
        max_iterations: int | None = None,
    ) -> None:
        super().__init__(store, keys, client)
        self.workspace = workspace
        loop_kwargs = {} if max_iterations is None else {"max_iterations": max_iterations}
        self.loop = AgenticLoop(client, ToolDispatcher(workspace), store, **loop_kwargs)

    def run(self, task_id: str) -> None:
        task = self._load(task_id)
        if task is None:
            return

        with log_context(task_id=task.id, user_id=task.user_id):
            self.store.mark_processing(task.id)
            today = today_iso()
            ctx = ToolContext(user_id=task.user_id, today=today, folder_id=task.folder_id)
            resolved: ResolvedProvider | None = None
            try:
                resolved = self._resolve(task)
                outcome = self.loop.run(
                    task.id,
                    resolved.provider,
                    resolved.api_key,
                    executable_note_prompt(today),
                    source_message(task),
                    ctx,
                )
            except ProviderError as exc:
                logger.warning("executable_note_failed", extra={"extra_fields": {"error": str(exc)}})
                self.store.mark_failed(task.id, _error_message(exc), resolved.provider if resolved else None)
                return
            except Exception as exc:
                logger.exception("executable_note_crashed")
                self.store.mark_failed(task.id, _error_message(exc), resolved.provider if resolved else None)
                return

            self.store.mark_completed(task.id, outcome.final_text, resolved.provider)


class FollowUpRunner(_Runner):
    """Answers the newest user message of a task's conversation without tools."""

    @staticmethod
    def transcript(task: AgentTask) -> list[Turn]:
        turns: list[Turn] = [UserTurn(text=follow_up_opening_message(task))]
        if task.result:
            turns.append(AssistantTurn(text=task.result))
        for message in task.messages:
            if message.role == "user":
                turns.append(UserTurn(text=message.content))
            else:
                turns.append(AssistantTurn(text=message.content))
        return turns

    def run(self, task_id: str) -> None:
        task = self._load(task_id)
        if task is None:
            return

        with log_context(task_id=task.id, user_id=task.user_id):
            try:
                resolved = self._resolve(task)
                reply = self.client.complete(
                    resolved.provider,
                    resolved.api_key,
                    follow_up_system_prompt(task.task_type),
                    self.transcript(task),
                )
            except ProviderError as exc:
                logger.warning("follow_up_failed", extra={"extra_fields": {"error": str(exc)}})
                self.store.mark_follow_up_failed(task.id, _error_message(exc))
                return
            except Exception as exc:
                logger.exception("follow_up_crashed")
                self.store.mark_follow_up_failed(task.id, _error_message(exc))
                return

            self.store.append_assistant_reply(task.id, reply, resolved.provider)
            logger.info("follow_up_completed", extra={"extra_fields": {"provider": resolved.provider}})
