from __future__ import annotations

from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bettertodo.core.agent.errors import TaskBusy, TaskNotFound, TaskNotRetryable, TaskValidationError
from bettertodo.core.logging import configure_logging, log_context

from .deps import get_scheduler_service, get_state_dir
from .routes_agent_tasks import router as agent_tasks_router
from .routes_api_keys import router as api_keys_router

app = FastAPI(title="better todo agent API")

app.include_router(agent_tasks_router, prefix="/agent-tasks", tags=["agent-tasks"])
app.include_router(api_keys_router, prefix="/api-keys", tags=["api-keys"])


@app.middleware("http")
async def request_context_middleware(request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
    with log_context(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.exception_handler(TaskValidationError)
def task_validation_error(request: Request, exc: TaskValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(TaskNotFound)
def task_not_found(request: Request, exc: TaskNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(TaskBusy)
def task_busy(request: Request, exc: TaskBusy) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(TaskNotRetryable)
def task_not_retryable(request: Request, exc: TaskNotRetryable) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.on_event("startup")
def startup() -> None:
    configure_logging(get_state_dir())
    app.state.scheduler_service = get_scheduler_service()
    app.state.scheduler_service.start()


@app.on_event("shutdown")
def shutdown() -> None:
    get_scheduler_service().shutdown()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


if __name__ == "__main__":
    uvicorn.run("bettertodo.apps.api.main:app", host="127.0.0.1", port=8000)
