"""Task records persisted by the queue."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

TaskStatus = Literal["pending", "running", "done", "failed"]
TASK_STATUSES: frozenset[str] = frozenset({"pending", "running", "done", "failed"})


@dataclass(frozen=True, slots=True)
class Task:
    """One durable unit of queued work for a single inbound request."""

    id: int
    sender: str
    message: str
    status: TaskStatus
    previous_context: str
    result: str
    created_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Task:
        return cls(
            id=int(row["id"]),  # type: ignore[arg-type]
            sender=str(row["sender"]),
            message=str(row["message"]),
            status=str(row["status"]),  # type: ignore[arg-type]
            previous_context=str(row["previous_context"]),
            result=str(row["result"]),
            created_at=str(row["created_at"]),
        )
