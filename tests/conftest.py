from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from bettertodo.core.agent.store import AgentTaskStore
from bettertodo.core.keys import ApiKeyStore
from bettertodo.core.providers import ProviderResponse
from bettertodo.core.workspace import WorkspaceStore


@pytest.fixture(autouse=True)
def isolated_state(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BETTERTODO_STATE_DIR", str(tmp_path))
    monkeypatch.setenv("BETTERTODO_TEST_MODE", "1")
    monkeypatch.setenv("BETTERTODO_LOG_TO_FILE", "off")
    monkeypatch.setenv("BETTERTODO_TIMEZONE", "UTC")


@dataclass
class ScriptedClient:
    """Provider client that replays canned responses and records every call."""

    text_replies: list[str | Exception] = field(default_factory=list)
    tool_replies: list[ProviderResponse | Exception] = field(default_factory=list)
    repeat_last: bool = False
    calls: list[dict[str, Any]] = field(default_factory=list)

    def _next(self, queue: list):
        if not queue:
            raise AssertionError("unexpected provider call")
        item = queue[0] if self.repeat_last and len(queue) == 1 else queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def complete(self, provider, api_key, system_prompt, turns) -> str:
        self.calls.append(
            {"kind": "complete", "provider": provider, "api_key": api_key, "system": system_prompt, "turns": list(turns)}
        )
        return self._next(self.text_replies)

    def complete_with_tools(self, provider, api_key, system_prompt, turns, tools=None) -> ProviderResponse:
        self.calls.append(
            {"kind": "tools", "provider": provider, "api_key": api_key, "system": system_prompt, "turns": list(turns)}
        )
        return self._next(self.tool_replies)


@dataclass
class RecordingScheduler:
    jobs: list[tuple[int, Callable[..., Any], dict[str, Any]]] = field(default_factory=list)

    def run_after(self, delay_ms, func, kwargs, job_id=None) -> str:
        self.jobs.append((delay_ms, func, kwargs))
        return job_id or f"job-{len(self.jobs)}"


@pytest.fixture
def scripted_client() -> Callable[..., ScriptedClient]:
    return ScriptedClient


@pytest.fixture
def recording_scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def task_store(tmp_path) -> AgentTaskStore:
    return AgentTaskStore(state_dir=tmp_path)


@pytest.fixture
def key_store(tmp_path) -> ApiKeyStore:
    return ApiKeyStore(state_dir=tmp_path)


@pytest.fixture
def workspace(tmp_path) -> WorkspaceStore:
    return WorkspaceStore(state_dir=tmp_path)
