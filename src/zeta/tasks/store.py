"""SQLite persistence for queued tasks."""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from .models import Task, TaskStatus

LOGGER = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sender TEXT NOT NULL,
    message TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    previous_context TEXT NOT NULL DEFAULT '',
    result TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_tasks_status_id ON tasks (status, id);
"""


class TaskStore:
    """Single-writer task table; the only source of truth for task state."""

    def __init__(self, db_path: str | Path, *, logger: logging.Logger | None = None) -> None:
        self.db_path = str(db_path)
        self.logger = logger or LOGGER
        self._db: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("TaskStore is not connected")
        return self._db

    async def connect(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def insert(self, sender: str, message: str) -> int:
        cursor = await self.db.execute(
            "INSERT INTO tasks (sender, message) VALUES (?, ?)", (sender, message)
        )
        await self.db.commit()
        task_id = cursor.lastrowid
        await cursor.close()
        if task_id is None:
            raise RuntimeError("SQLite did not report an id for the inserted task")
        return int(task_id)

    async def get(self, task_id: int) -> Task | None:
        async with self.db.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)) as cursor:
            row = await cursor.fetchone()
        return Task.from_row(row) if row else None

    async def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        if status is None:
            query, params = "SELECT * FROM tasks ORDER BY id ASC", ()
        else:
            query, params = "SELECT * FROM tasks WHERE status = ? ORDER BY id ASC", (status,)
        async with self.db.execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [Task.from_row(row) for row in rows]

    async def oldest_pending(self) -> Task | None:
        async with self.db.execute(
            "SELECT * FROM tasks WHERE status = 'pending' ORDER BY id ASC LIMIT 1"
        ) as cursor:
            row = await cursor.fetchone()
        return Task.from_row(row) if row else None

    async def last_done_result(self) -> str:
        async with self.db.execute(
            "SELECT result FROM tasks WHERE status = 'done' ORDER BY id DESC LIMIT 1"
        ) as cursor:
            row = await cursor.fetchone()
        return str(row["result"]) if row else ""

    async def count_running(self) -> int:
        async with self.db.execute(
            "SELECT COUNT(*) AS running FROM tasks WHERE status = 'running'"
        ) as cursor:
            row = await cursor.fetchone()
        return int(row["running"]) if row else 0

    async def mark_running(self, task_id: int, previous_context: str) -> None:
        await self.db.execute(
            "UPDATE tasks SET status = 'running', previous_context = ? WHERE id = ?",
            (previous_context, task_id),
        )
        await self.db.commit()

    async def mark_finished(self, task_id: int, status: TaskStatus, result: str) -> None:
        if status not in ("done", "failed"):
            raise ValueError(f"Finished status must be done or failed, got {status!r}")
        await self.db.execute(
            "UPDATE tasks SET status = ?, result = ? WHERE id = ?", (status, result, task_id)
        )
        await self.db.commit()

    async def reset_running(self) -> int:
        """Move every running row back to pending; used only at startup."""
        cursor = await self.db.execute(
            "UPDATE tasks SET status = 'pending' WHERE status = 'running'"
        )
        await self.db.commit()
        changed = cursor.rowcount
        await cursor.close()
        return max(changed, 0)
