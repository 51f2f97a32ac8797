"""Supervision of named background operations."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from cfi_harness.core.errors import (
    InvocationError,
    TaskAlreadyExistsError,
    TaskNotFoundError,
    TaskStillRunningError,
    TaskTimeoutError,
)
from cfi_harness.core.tasks.task_types import AsyncTask, TaskOutcome
from cfi_harness.core.world.locks import ReadWriteLock

logger = logging.getLogger(__name__)

Operation = Callable[[threading.Event], Any]


class TaskManager:
    """Starts operations on daemon threads and tracks them by name.

    Each task gets a thread of its own, so a slow task never delays another.
    The registry is guarded by a reader/writer lock: waits and result reads
    share it, starting a task takes it exclusively for the insert only.

    Cancellation is cooperative. A timed-out or cancelled task has its
    ``cancel`` event set, and an operation that never checks the event keeps
    running in the background until it returns on its own.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tasks: dict[str, AsyncTask] = {}
        self._lock = ReadWriteLock()

    def start(self, name: str, operation: Operation) -> AsyncTask:
        """Run ``operation(cancel_event)`` concurrently under ``name``.

        Returns immediately. A finished task with the same name is replaced.

        Raises:
            TaskAlreadyExistsError: A task with this name is still running
        """
        with self._lock.write():
            existing = self._tasks.get(name)
            if existing is not None and existing.is_running:
                raise TaskAlreadyExistsError(name)
            task = AsyncTask(name=name, started_at=time.monotonic())
            self._tasks[name] = task

        thread = threading.Thread(
            target=self._run,
            args=(task, operation),
            name=f"cfi-task-{name}",
            daemon=True,
        )
        task.thread = thread
        logger.info("Starting task %s", name)
        thread.start()
        return task

    def _run(self, task: AsyncTask, operation: Operation) -> None:
        value: Any = None
        error: BaseException | None = InvocationError(
            f"task {task.name} aborted before completing"
        )
        try:
            value = operation(task.cancel)
            error = None
        except Exception as e:
            logger.warning("Task %s raised: %s", task.name, e)
            error = e
        finally:
            if error is None and isinstance(value, BaseException):
                error, value = value, None
            task.complete(value, error)

        if task.error is not None:
            logger.info("Task %s failed: %s", task.name, task.error)
        else:
            logger.info("Task %s completed", task.name)

    def get(self, name: str) -> AsyncTask | None:
        with self._lock.read():
            return self._tasks.get(name)

    def _require(self, name: str) -> AsyncTask:
        task = self.get(name)
        if task is None:
            raise TaskNotFoundError(name)
        return task

    def wait(self, name: str, timeout: float | None) -> AsyncTask:
        """Block until the task completes or ``timeout`` seconds elapse.

        On timeout the task's cancel event is set; the task may still finish
        later and its outcome is kept.

        Raises:
            TaskNotFoundError: No task with this name
            TaskTimeoutError: The task did not complete in time
        """
        task = self._require(name)
        if not task.done.wait(timeout):
            task.cancel.set()
            logger.warning("Timed out waiting for task %s", name)
            raise TaskTimeoutError(name, timeout if timeout is not None else 0.0)
        return task

    def result(self, name: str) -> TaskOutcome:
        """Return the outcome of a completed task.

        Raises:
            TaskNotFoundError: No task with this name
            TaskStillRunningError: The task has not completed yet
        """
        task = self._require(name)
        if task.is_running:
            raise TaskStillRunningError(name)
        return task.outcome()

    def cancel(self, name: str) -> bool:
        """Signal cancellation; returns whether the task was still running."""
        task = self._require(name)
        task.cancel.set()
        return task.is_running

    def cancel_all(self) -> list[str]:
        """Signal cancellation to every running task.

        Returns:
            Names of the tasks that were still running
        """
        with self._lock.read():
            running = [task for task in self._tasks.values() if task.is_running]
        for task in running:
            task.cancel.set()
        if running:
            logger.info("Cancelled %d running task(s)", len(running))
        return [task.name for task in running]

    def is_running(self, name: str) -> bool:
        return self._require(name).is_running

    def names(self) -> list[str]:
        with self._lock.read():
            return sorted(self._tasks)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._tasks)
