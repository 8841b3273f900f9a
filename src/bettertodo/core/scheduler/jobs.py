from __future__ import annotations

from pathlib import Path

from bettertodo.core.agent.runners import ExecutableNoteRunner, FollowUpRunner, SingleShotRunner
from bettertodo.core.agent.store import AgentTaskStore
from bettertodo.core.keys import ApiKeyStore
from bettertodo.core.logging import log_context
from bettertodo.core.providers import LLMProviderClient, ProviderClient
from bettertodo.core.workspace import WorkspaceStore


def _stores(state_dir: str) -> tuple[AgentTaskStore, ApiKeyStore]:
    path = Path(state_dir)
    return AgentTaskStore(state_dir=path), ApiKeyStore(state_dir=path)


def run_agent_task(task_id: str, state_dir: str, client: ProviderClient | None = None) -> None:
    store, keys = _stores(state_dir)
    with log_context(job_id=f"run_agent_task:{task_id}"):
        SingleShotRunner(store, keys, client or LLMProviderClient()).run(task_id)


def run_executable_note(task_id: str, state_dir: str, client: ProviderClient | None = None) -> None:
    store, keys = _stores(state_dir)
    workspace = WorkspaceStore(state_dir=Path(state_dir))
    with log_context(job_id=f"run_executable_note:{task_id}"):
        ExecutableNoteRunner(store, keys, client or LLMProviderClient(), workspace).run(task_id)


def run_follow_up(task_id: str, state_dir: str, client: ProviderClient | None = None) -> None:
    store, keys = _stores(state_dir)
    with log_context(job_id=f"run_follow_up:{task_id}"):
        FollowUpRunner(store, keys, client or LLMProviderClient()).run(task_id)
