"""Named background tasks with bounded waits."""

from cfi_harness.core.tasks.task_manager import Operation, TaskManager
from cfi_harness.core.tasks.task_types import AsyncTask, TaskOutcome

__all__ = ["AsyncTask", "Operation", "TaskManager", "TaskOutcome"]
