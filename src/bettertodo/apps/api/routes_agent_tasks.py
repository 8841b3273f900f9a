from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from bettertodo.core.agent.schemas import AgentTask, TaskCounts, TaskStatus
from bettertodo.core.agent.service import AgentTaskService

from .auth import get_current_user_id
from .deps import get_agent_task_service
from .schemas import CreateAgentTaskRequest, CreateTodosRequest, FollowUpRequest, SaveNoteRequest

router = APIRouter()


@router.get("", response_model=list[AgentTask])
def list_agent_tasks(
    status: TaskStatus | None = Query(default=None),
    date: str | None = Query(default=None),
    folder_id: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> list[AgentTask]:
    return service.list_agent_tasks(user_id, status=status, date=date, folder_id=folder_id)


@router.get("/counts", response_model=TaskCounts)
def agent_task_counts(
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> TaskCounts:
    return service.agent_task_counts(user_id)


@router.get("/{task_id}", response_model=AgentTask)
def get_agent_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> AgentTask:
    return service.get_agent_task(task_id, user_id)


@router.post("")
def create_agent_task(
    request: CreateAgentTaskRequest,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, str]:
    task_id = service.create_agent_task(user_id=user_id, **request.model_dump())
    return {"task_id": task_id}


@router.post("/{task_id}/follow-ups")
def add_follow_up_message(
    task_id: str,
    request: FollowUpRequest,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, bool]:
    service.add_follow_up_message(task_id, user_id, request.message)
    return {"ok": True}


@router.post("/{task_id}/retry")
def retry_agent_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, bool]:
    service.retry_agent_task(task_id, user_id)
    return {"ok": True}


@router.post("/{task_id}/clear-conversation")
def clear_conversation(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, bool]:
    service.clear_conversation(task_id, user_id)
    return {"ok": True}


@router.post("/{task_id}/todos")
def create_todos_from_agent(
    task_id: str,
    request: CreateTodosRequest,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, int]:
    created = service.create_todos_from_agent(task_id, user_id, date=request.date, folder_id=request.folder_id)
    return {"created": created}


@router.post("/{task_id}/note")
def save_result_as_note(
    task_id: str,
    request: SaveNoteRequest,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, str]:
    note_id = service.save_result_as_note(task_id, user_id, title=request.title)
    return {"note_id": note_id}


@router.delete("/{task_id}")
def delete_agent_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, bool]:
    service.delete_agent_task(task_id, user_id)
    return {"ok": True}


@router.delete("")
def delete_all_agent_tasks(
    date: str | None = Query(default=None),
    folder_id: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    service: AgentTaskService = Depends(get_agent_task_service),
) -> dict[str, int]:
    return {"deleted": service.delete_all_agent_tasks(user_id, date=date, folder_id=folder_id)}
