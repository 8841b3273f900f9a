from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from bettertodo.core.agent.service import AgentTaskService
from bettertodo.core.agent.store import AgentTaskStore
from bettertodo.core.config import state_dir
from bettertodo.core.keys import ApiKeyStore
from bettertodo.core.scheduler.scheduler import SchedulerService
from bettertodo.core.workspace import WorkspaceStore


@lru_cache(maxsize=1)
def get_state_dir() -> Path:
    path = state_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


@lru_cache(maxsize=1)
def get_scheduler_service() -> SchedulerService:
    return SchedulerService(state_dir=get_state_dir())


@lru_cache(maxsize=1)
def get_agent_task_store() -> AgentTaskStore:
    return AgentTaskStore(state_dir=get_state_dir())


@lru_cache(maxsize=1)
def get_workspace_store() -> WorkspaceStore:
    return WorkspaceStore(state_dir=get_state_dir())


@lru_cache(maxsize=1)
def get_api_key_store() -> ApiKeyStore:
    return ApiKeyStore(state_dir=get_state_dir())


@lru_cache(maxsize=1)
def get_agent_task_service() -> AgentTaskService:
    return AgentTaskService(
        store=get_agent_task_store(),
        workspace=get_workspace_store(),
        scheduler=get_scheduler_service(),
        state_dir=get_state_dir(),
    )


def clear_caches() -> None:
    for getter in (
        get_state_dir,
        get_scheduler_service,
        get_agent_task_store,
        get_workspace_store,
        get_api_key_store,
        get_agent_task_service,
    ):
        getter.cache_clear()
