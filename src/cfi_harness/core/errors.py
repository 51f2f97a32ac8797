"""Exception types raised and stored by the harness.

Invocation faults and task errors are usually stored in the world as values
rather than raised past a step handler; match errors are raised so the
scenario runner marks the step as failed.
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for all harness errors."""


class InvocationError(HarnessError):
    """A dynamic call could not be made or raised while running."""


class TaskError(HarnessError):
    """Base class for async task manager errors."""

    def __init__(self, task_name: str, message: str) -> None:
        super().__init__(message)
        self.task_name = task_name


class TaskNotFoundError(TaskError):
    """No task is registered under the requested name."""

    def __init__(self, task_name: str) -> None:
        super().__init__(task_name, f"task {task_name} not found")


class TaskStillRunningError(TaskError):
    """The task has not completed yet."""

    def __init__(self, task_name: str) -> None:
        super().__init__(task_name, f"task {task_name} is still running")


class TaskTimeoutError(TaskError):
    """A wait on the task exceeded its bound."""

    def __init__(self, task_name: str, timeout_seconds: float) -> None:
        super().__init__(
            task_name,
            f"task {task_name} timed out after {_format_seconds(timeout_seconds)}",
        )
        self.timeout_seconds = timeout_seconds


class TaskAlreadyExistsError(TaskError):
    """A task with the same name is still running."""

    def __init__(self, task_name: str) -> None:
        super().__init__(task_name, f"task {task_name} already exists")


class MatchError(AssertionError):
    """Actual data did not match the expectation."""

    def __init__(self, message: str, trace: list[str] | None = None) -> None:
        super().__init__(message)
        self.trace = trace or []


class StepDefinitionError(HarnessError):
    """Step text matched no binding, or a binding was misused."""


def _format_seconds(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"
