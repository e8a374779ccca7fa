"""Durable task queue and its SQLite store."""

from .models import TASK_STATUSES, Task, TaskStatus
from .queue import TaskProcessor, TaskQueue, WorkerState
from .store import TaskStore

__all__ = [
    "TASK_STATUSES",
    "Task",
    "TaskProcessor",
    "TaskQueue",
    "TaskStatus",
    "TaskStore",
    "WorkerState",
]
