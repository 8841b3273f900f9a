from .schemas import JobInfo
from .scheduler import SchedulerService

__all__ = ["JobInfo", "SchedulerService"]
