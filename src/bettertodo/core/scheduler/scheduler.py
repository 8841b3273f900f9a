from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

from apscheduler.events import EVENT_JOB_ERROR, JobExecutionEvent
from apscheduler.job import Job
from apscheduler.jobstores.base import BaseJobStore
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from bettertodo.core.config import env_int, is_test_mode, local_timezone
from bettertodo.core.config import state_dir as default_state_dir

from .schemas import JobInfo

logger = logging.getLogger("bettertodo.scheduler")


class SchedulerService:
    """Background executor for agent jobs.

    Jobs are persisted in ``jobs.sqlite`` under the state directory so work
    queued right before a restart still runs. In test mode jobs stay in memory
    and the scheduler never starts, so tests drive the job functions directly.
    """

    def __init__(self, state_dir: Path | None = None) -> None:
        self.state_dir = state_dir or default_state_dir()
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.test_mode = is_test_mode()
        self.timezone = local_timezone()
        self.scheduler = BackgroundScheduler(
            jobstores={"default": self._job_store()},
            executors={"default": {"type": "threadpool", "max_workers": env_int("BETTERTODO_WORKERS", 4)}},
            job_defaults={"coalesce": True, "misfire_grace_time": None},
            timezone=self.timezone,
        )
        self.scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)
        self._started = False

    def _job_store(self) -> BaseJobStore:
        if self.test_mode:
            return MemoryJobStore()
        return SQLAlchemyJobStore(url=f"sqlite:///{self.state_dir / 'jobs.sqlite'}")

    @staticmethod
    def _on_job_error(event: JobExecutionEvent) -> None:
        logger.error(
            "job_failed",
            exc_info=(type(event.exception), event.exception, event.exception.__traceback__),
            extra={"extra_fields": {"job_id": event.job_id}},
        )

    def start(self) -> None:
        if self.test_mode or self._started:
            return
        self.scheduler.start()
        self._started = True
        logger.info("scheduler_started", extra={"extra_fields": {"jobs": len(self.scheduler.get_jobs())}})

    def shutdown(self) -> None:
        if not self._started:
            return
        self.scheduler.shutdown(wait=False)
        self._started = False

    @staticmethod
    def _job_info(job: Job) -> JobInfo:
        # Jobs added before start() have no next_run_time attribute yet.
        next_run = getattr(job, "next_run_time", None)
        return JobInfo(
            id=job.id,
            next_run_time_iso=next_run.isoformat() if next_run else None,
            trigger=str(job.trigger),
            kwargs=dict(job.kwargs),
        )

    def list_jobs(self) -> list[JobInfo]:
        return [self._job_info(job) for job in self.scheduler.get_jobs()]

    def run_after(
        self,
        delay_ms: int,
        func: Callable[..., Any],
        kwargs: dict[str, Any],
        job_id: str | None = None,
    ) -> str:
        """Queue ``func(**kwargs)`` to run once after ``delay_ms``. Returns the job id."""
        job_id = job_id or f"{func.__name__}-{uuid4()}"
        self.scheduler.add_job(
            func,
            trigger="date",
            run_date=datetime.now(self.timezone) + timedelta(milliseconds=max(0, delay_ms)),
            id=job_id,
            kwargs=kwargs,
            replace_existing=True,
        )
        return job_id

    def remove_job(self, job_id: str) -> None:
        self.scheduler.remove_job(job_id)
