"""Durable FIFO task queue drained by a single worker."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from pathlib import Path

from .models import Task
from .store import TaskStore

LOGGER = logging.getLogger(__name__)

TaskProcessor = Callable[[Task], Awaitable[str]]


class WorkerState(enum.Enum):
    IDLE = "idle"
    DRAINING = "draining"


class TaskQueue:
    """Persists tasks and processes them one at a time, oldest first.

    Processing order is global: a slow task delays every later task regardless
    of sender. Each task's ``previous_context`` is the result of the most
    recently completed task at the moment it starts running, not when it was
    enqueued.

    A single worker coroutine owns draining. Enqueue and processor
    registration only set a wake-up event; the worker clears that event before
    each pass so a task enqueued while a pass is ending is still picked up.
    """

    def __init__(self, store: TaskStore, *, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.logger = logger or LOGGER
        self.state = WorkerState.IDLE
        self._processor: TaskProcessor | None = None
        self._worker: asyncio.Task[None] | None = None
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()

    @classmethod
    async def open(
        cls, db_path: str | Path, *, logger: logging.Logger | None = None
    ) -> TaskQueue:
        """Connect the store and recover tasks left running by a previous process."""
        store = TaskStore(db_path, logger=logger)
        await store.connect()
        queue = cls(store, logger=logger)
        await queue.recover()
        return queue

    async def recover(self) -> int:
        recovered = await self.store.reset_running()
        if recovered:
            self.logger.warning("tasks_recovered", extra={"recovered": recovered})
        return recovered

    @property
    def has_processor(self) -> bool:
        return self._processor is not None

    def set_processor(self, handler: TaskProcessor) -> None:
        if self._processor is not None:
            raise RuntimeError("A task processor is already registered")
        self._processor = handler
        self.logger.info("processor_registered")
        self._worker = asyncio.get_running_loop().create_task(
            self._run_worker(), name="zeta-task-worker"
        )
        self._wake()

    async def enqueue(self, sender: str, message: str) -> int:
        task_id = await self.store.insert(sender, message)
        self.logger.info(
            "task_enqueued",
            extra={"task_id": task_id, "sender": sender, "request": message[:80]},
        )
        if self._processor is None:
            self.logger.warning("task_queued_without_processor", extra={"task_id": task_id})
        else:
            self._wake()
        return task_id

    async def join(self) -> None:
        """Wait until the worker has drained every pending task."""
        if self._worker is None:
            return
        idle_waiter = asyncio.ensure_future(self._idle.wait())
        done, _ = await asyncio.wait(
            {idle_waiter, self._worker}, return_when=asyncio.FIRST_COMPLETED
        )
        if idle_waiter not in done:
            idle_waiter.cancel()
            # The worker only stops on a store failure; surface it to the caller.
            self._worker.result()

    async def close(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        await self.store.close()

    def _wake(self) -> None:
        self._idle.clear()
        self._wakeup.set()

    async def _run_worker(self) -> None:
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            self.state = WorkerState.DRAINING
            try:
                while await self._drain_one():
                    pass
            finally:
                self.state = WorkerState.IDLE
                if not self._wakeup.is_set():
                    self._idle.set()

    async def _drain_one(self) -> bool:
        """Process the oldest pending task; return false when nothing was run."""
        processor = self._processor
        if processor is None:
            return False
        if await self.store.count_running():
            self.logger.warning("drain_skipped_task_running")
            return False

        task = await self.store.oldest_pending()
        if task is None:
            return False

        context = await self.store.last_done_result()
        await self.store.mark_running(task.id, context)
        running = replace(task, status="running", previous_context=context)
        self.logger.info(
            "task_processing",
            extra={"task_id": task.id, "request": task.message[:80]},
        )

        try:
            result = await processor(running)
        except Exception as exc:  # noqa: BLE001
            error_message = str(exc) or exc.__class__.__name__
            await self.store.mark_finished(task.id, "failed", error_message)
            self.logger.error(
                "task_failed",
                extra={"task_id": task.id, "error": error_message},
            )
        else:
            await self.store.mark_finished(task.id, "done", result)
            self.logger.info("task_completed", extra={"task_id": task.id})
        return True
