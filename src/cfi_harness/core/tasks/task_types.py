"""Bookkeeping types for named background tasks."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TaskOutcome:
    """Value or error produced by a completed task."""

    value: Any = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def stored_value(self) -> Any:
        """What a wait-for step stores as its result: the error or the value."""
        return self.error if self.error is not None else self.value


@dataclass
class AsyncTask:
    """A named operation running on its own thread.

    ``done`` is set exactly once, after ``value`` / ``error`` are recorded.
    ``cancel`` is handed to the operation, which may observe it.
    """

    name: str
    started_at: float
    done: threading.Event = field(default_factory=threading.Event, repr=False)
    cancel: threading.Event = field(default_factory=threading.Event, repr=False)
    value: Any = None
    error: BaseException | None = None
    finished_at: float | None = None
    thread: threading.Thread | None = field(default=None, repr=False)
    _completion_lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @property
    def is_running(self) -> bool:
        return not self.done.is_set()

    @property
    def cancelled(self) -> bool:
        return self.cancel.is_set()

    @property
    def duration(self) -> float | None:
        """Seconds between start and completion, None while running."""
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def complete(self, value: Any, error: BaseException | None) -> bool:
        """Record the outcome and fire ``done``.

        Returns:
            False if the task had already completed; the first outcome wins
        """
        with self._completion_lock:
            if self.done.is_set():
                return False
            self.value = None if error is not None else value
            self.error = error
            self.finished_at = time.monotonic()
            self.done.set()
            return True

    def outcome(self) -> TaskOutcome:
        return TaskOutcome(value=self.value, error=self.error)
