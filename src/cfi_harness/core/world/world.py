"""Per-scenario world: value store plus the components that act on it."""

from __future__ import annotations

import copy
import logging
import threading
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from cfi_harness.core.context import HarnessContext
from cfi_harness.core.diagnostics import DiagnosticPrinter
from cfi_harness.core.errors import TaskError
from cfi_harness.core.invocation.invoker import Invoker
from cfi_harness.core.matching.assertions import ScalarAssertions
from cfi_harness.core.matching.data_matcher import DataMatcher
from cfi_harness.core.matching.expectation_table import ExpectationTable
from cfi_harness.core.resolution.reference_resolver import ReferenceResolver
from cfi_harness.core.tasks.task_manager import Operation, TaskManager
from cfi_harness.core.tasks.task_types import AsyncTask, TaskOutcome
from cfi_harness.core.world.value_store import ValueStore

logger = logging.getLogger(__name__)

TableLike = ExpectationTable | Sequence[Sequence[str]]


@dataclass(frozen=True)
class Attachment:
    """Data attached to the running scenario for downstream reporting."""

    name: str
    media_type: str
    data: bytes


def _as_table(table: TableLike) -> ExpectationTable:
    if isinstance(table, ExpectationTable):
        return table
    return ExpectationTable.from_grid(table)


class World:
    """Everything one scenario can see.

    A world owns its value store and task manager; the resolver, invoker and
    matcher all work against that store. Build a new world for every
    scenario so no value or task crosses scenario boundaries.

    Invocations and waited tasks store their outcome (value or error) under
    the configured result key, ``result`` by default. Assertions raise
    ``MatchError`` on failure.
    """

    def __init__(
        self,
        context: HarnessContext | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the world.

        Args:
            context: Session context; defaults to built-in configuration
            params: Scenario parameters copied into the store, on top of the
                configured ``scenario_params``
        """
        self.context = context or HarnessContext()
        seed = dict(self.context.config.scenario_params)
        seed.update(params or {})
        # The config outlives the scenario; mutable params must not be shared
        seed = copy.deepcopy(seed)

        self.store = ValueStore(seed)
        self.tasks = TaskManager()
        self.resolver = ReferenceResolver(self.store)
        self.invoker = Invoker(self.printer)
        self.matcher = DataMatcher(self.resolver, self.printer)
        self.assertions = ScalarAssertions(self.printer)
        self.attachments: list[Attachment] = []
        self._attachments_lock = threading.Lock()
        self._closed = False

    @property
    def printer(self) -> DiagnosticPrinter:
        return self.context.printer

    @property
    def result_key(self) -> str:
        return self.context.result_key

    @property
    def closed(self) -> bool:
        return self._closed

    # Values

    def resolve(self, token: Any) -> Any:
        """Resolve a step token against this world's values."""
        return self.resolver.resolve(token)

    def set_value(self, name: str, value: Any) -> None:
        self.store.set(name, value)

    def get_value(self, name: str, default: Any = None) -> Any:
        return self.store.get(name, default)

    def has_value(self, name: str) -> bool:
        return self.store.contains(name)

    @property
    def result(self) -> Any:
        """Outcome of the most recent invocation or waited task."""
        return self.store.get(self.result_key)

    def store_result(self, value: Any) -> None:
        self.store.set(self.result_key, value)

    def refer_to(self, source_token: str, name: str) -> Any:
        """Store the resolved ``source_token`` under ``name``."""
        value = self.resolve(source_token)
        self.set_value(name, value)
        return value

    def attach(self, name: str, media_type: str, data: bytes | str) -> Attachment:
        """Record an attachment for the scenario's report."""
        payload = data.encode() if isinstance(data, str) else bytes(data)
        attachment = Attachment(name=name, media_type=media_type, data=payload)
        with self._attachments_lock:
            self.attachments.append(attachment)
        self.printer.line(f"📎 Attached: {name} ({media_type}, {len(payload)} bytes)")
        return attachment

    # Invocation

    def _resolve_callable(self, function_ref: str) -> Any:
        target = self.resolve(function_ref)
        if isinstance(target, str):
            present, stored = self.store.lookup(target)
            return stored if present else None
        return target

    def invoke_function(self, function_ref: str, *args: str) -> Any:
        """Call a stored function with resolved arguments; store the outcome.

        ``function_ref`` may be a stored name (``add10``) or a symbolic token
        (``{add10}``).
        """
        target = self._resolve_callable(function_ref)
        resolved = [self.resolve(arg) for arg in args]
        value = self.invoker.call_function(target, resolved, function_ref)
        self.store_result(value)
        return value

    def invoke_method(self, object_ref: str, method_name: str, *args: str) -> Any:
        """Call a method on a resolved object; store the outcome."""
        obj = self._resolve_callable(object_ref)
        resolved = [self.resolve(arg) for arg in args]
        value = self.invoker.call_method(obj, method_name, resolved, object_ref)
        self.store_result(value)
        return value

    # Tasks

    def function_operation(self, function_ref: str, *args: str) -> Operation:
        """Build a task operation calling a stored function.

        The function and its arguments are resolved now, not when the task
        runs, so later changes to the store do not affect the task.
        """
        target = self._resolve_callable(function_ref)
        resolved = [self.resolve(arg) for arg in args]
        invoker = self.invoker

        def operation(cancel: Any) -> Any:
            return invoker.call_function(target, resolved, function_ref)

        return operation

    def method_operation(
        self, object_ref: str, method_name: str, *args: str
    ) -> Operation:
        """Build a task operation calling a method on a resolved object."""
        obj = self._resolve_callable(object_ref)
        resolved = [self.resolve(arg) for arg in args]
        invoker = self.invoker

        def operation(cancel: Any) -> Any:
            return invoker.call_method(obj, method_name, resolved, object_ref)

        return operation

    def start_task(self, name: str, operation: Operation) -> AsyncTask:
        """Start ``operation`` in the background under ``name``."""
        return self.tasks.start(name, operation)

    def start_function_task(
        self, task_name: str, function_ref: str, *args: str
    ) -> AsyncTask:
        return self.start_task(task_name, self.function_operation(function_ref, *args))

    def start_method_task(
        self, task_name: str, object_ref: str, method_name: str, *args: str
    ) -> AsyncTask:
        return self.start_task(
            task_name, self.method_operation(object_ref, method_name, *args)
        )

    def wait_task(self, name: str, timeout: float | None = None) -> AsyncTask:
        """Block until the task completes; ``timeout`` in seconds.

        Raises:
            TaskNotFoundError: No task with this name
            TaskTimeoutError: The task did not complete in time
        """
        if timeout is None:
            timeout = self.context.default_timeout
        return self.tasks.wait(name, timeout)

    def task_result(self, name: str) -> TaskOutcome:
        return self.tasks.result(name)

    def wait_and_store(self, name: str, timeout: float | None = None) -> Any:
        """Wait for a task and store its value, or the error, as the result.

        Task errors (not found, timeout, still running, failed operation)
        are stored rather than raised.
        """
        try:
            self.wait_task(name, timeout)
            outcome = self.task_result(name)
        except TaskError as e:
            logger.info("Waiting for task %s failed: %s", name, e)
            self.store_result(e)
            return e

        value = outcome.stored_value()
        self.store_result(value)
        return value

    def run_function(
        self, function_ref: str, *args: str, timeout: float | None = None
    ) -> Any:
        """Start a function task, wait for it, and store the outcome."""
        task_name = f"temp_{function_ref}"
        try:
            self.start_function_task(task_name, function_ref, *args)
        except TaskError as e:
            self.store_result(e)
            return e
        return self.wait_and_store(task_name, timeout)

    def run_method(
        self,
        object_ref: str,
        method_name: str,
        *args: str,
        timeout: float | None = None,
    ) -> Any:
        """Start a method task, wait for it, and store the outcome."""
        task_name = f"temp_{object_ref}_{method_name}"
        try:
            self.start_method_task(task_name, object_ref, method_name, *args)
        except TaskError as e:
            self.store_result(e)
            return e
        return self.wait_and_store(task_name, timeout)

    # Test fixtures built from step text

    def make_invocation_counter(self, handler_name: str, counter_name: str) -> None:
        """Store a no-argument handler that counts its calls into ``counter_name``."""
        store = self.store

        def increment(count: Any) -> int:
            if isinstance(count, int) and not isinstance(count, bool):
                return count + 1
            return 1

        def handler() -> None:
            store.update(counter_name, increment, 0)

        self.set_value(counter_name, 0)
        self.set_value(handler_name, handler)

    def make_value_function(self, function_name: str, value_token: str) -> None:
        """Store a no-argument function returning the value resolved now."""
        value = self.resolve(value_token)

        def returns_value() -> Any:
            return value

        self.set_value(function_name, returns_value)

    def wait_for_period(self, milliseconds: float) -> None:
        time.sleep(milliseconds / 1000)

    # Assertions

    def assert_sequence_exact(self, field_ref: str, table: TableLike) -> None:
        expectation = _as_table(table)
        actual = self.resolve(field_ref)
        self.matcher.match_exact(
            actual, expectation.rows, field_ref
        ).raise_for_failure()

    def assert_sequence_at_least(self, field_ref: str, table: TableLike) -> None:
        expectation = _as_table(table)
        actual = self.resolve(field_ref)
        self.matcher.match_at_least(
            actual, expectation.rows, field_ref
        ).raise_for_failure()

    def assert_sequence_none_of(self, field_ref: str, table: TableLike) -> None:
        expectation = _as_table(table)
        actual = self.resolve(field_ref)
        self.matcher.match_none_of(
            actual, expectation.rows, field_ref
        ).raise_for_failure()

    def assert_length(self, field_ref: str, length_ref: str) -> None:
        actual = self.resolve(field_ref)
        self.matcher.match_length(actual, length_ref, field_ref).raise_for_failure()

    def assert_string_sequence(self, field_ref: str, table: TableLike) -> None:
        expectation = _as_table(table)
        actual = self.resolve(field_ref)
        self.matcher.match_strings(
            actual, expectation.first_column(), field_ref
        ).raise_for_failure()

    def assert_object(self, field_ref: str, table: TableLike) -> None:
        expectation = _as_table(table)
        actual = self.resolve(field_ref)
        self.matcher.match_object(
            actual, expectation.single_row(), field_ref
        ).raise_for_failure()

    def assert_nil(self, field_ref: str) -> None:
        self.assertions.is_nil(self.resolve(field_ref), field_ref).raise_for_failure()

    def assert_not_nil(self, field_ref: str) -> None:
        self.assertions.is_not_nil(
            self.resolve(field_ref), field_ref
        ).raise_for_failure()

    def assert_true(self, field_ref: str) -> None:
        self.assertions.is_true(self.resolve(field_ref), field_ref).raise_for_failure()

    def assert_false(self, field_ref: str) -> None:
        self.assertions.is_false(
            self.resolve(field_ref), field_ref
        ).raise_for_failure()

    def assert_empty(self, field_ref: str) -> None:
        self.assertions.is_empty(
            self.resolve(field_ref), field_ref
        ).raise_for_failure()

    def assert_equals(self, field_ref: str, expected_ref: str) -> None:
        self.assertions.equals(
            self.resolve(field_ref), self.resolve(expected_ref), field_ref
        ).raise_for_failure()

    def assert_error(self, field_ref: str) -> None:
        self.assertions.is_error(
            self.resolve(field_ref), field_ref
        ).raise_for_failure()

    def assert_error_with_message(self, field_ref: str, message: str) -> None:
        self.assertions.is_error_with_message(
            self.resolve(field_ref), message, field_ref
        ).raise_for_failure()

    # Lifecycle

    def close(self) -> list[str]:
        """End the scenario: signal cancellation to still-running tasks.

        Tasks are not drained; an operation that ignores its cancel event
        keeps running on its daemon thread.

        Returns:
            Names of tasks that were still running
        """
        if self._closed:
            return []
        self._closed = True
        running = self.tasks.cancel_all()
        if running:
            logger.info("World closed with running tasks: %s", ", ".join(running))
        return running
