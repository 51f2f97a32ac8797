"""Generic step vocabulary shared by every feature suite.

Steps name stored values and functions in quotes. Arguments are resolved
through the world, so ``"{x}"`` is the stored value of ``x`` while a bare
``"5"`` is the literal string. Calls store their outcome under ``result``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cfi_harness.core.errors import StepDefinitionError
from cfi_harness.core.resolution.reference_resolver import parse_number
from cfi_harness.steps.catalogue import (
    StepCatalogue,
    StepVocabulary,
    Table,
    step_pattern,
)

if TYPE_CHECKING:
    from cfi_harness.core.world.world import World


def quoted(name: str) -> str:
    """A double-quoted capture group named ``name``."""
    return f'"(?P<{name}>[^"]*)"'


FUNCTION = quoted("function")
TARGET = quoted("target")
METHOD = quoted("method")
TASK = quoted("task")
FIELD = quoted("field")
ONE = f"with parameter {quoted('param1')}"
TWO = f"with parameters {quoted('param1')} and {quoted('param2')}"
THREE = (
    f"with parameters {quoted('param1')}, {quoted('param2')} and {quoted('param3')}"
)


def parse_milliseconds(text: str) -> int:
    """Parse a whole number of milliseconds from step text.

    Raises:
        StepDefinitionError: ``text`` is not a non-negative integer
    """
    value = parse_number(text)
    if not isinstance(value, int) or value < 0:
        raise StepDefinitionError(f"invalid duration: {text}")
    return value


class GenericSteps(StepVocabulary):
    """Calls, value assertions, data table checks and async tasks."""

    # Calls

    @step_pattern(f"I call {FUNCTION}")
    def call_function(self, world: World, function: str) -> None:
        """Call a stored function with no parameters."""
        world.invoke_function(function)

    @step_pattern(f"I call {TARGET} with {METHOD}")
    def call_method(self, world: World, target: str, method: str) -> None:
        """Call a method on a stored object."""
        world.invoke_method(target, method)

    @step_pattern(f"I call {TARGET} with {METHOD} {ONE}")
    def call_method_with_parameter(
        self, world: World, target: str, method: str, param1: str
    ) -> None:
        """Call a method on a stored object with one parameter."""
        world.invoke_method(target, method, param1)

    @step_pattern(f"I call {TARGET} with {METHOD} {TWO}")
    def call_method_with_two_parameters(
        self, world: World, target: str, method: str, param1: str, param2: str
    ) -> None:
        """Call a method on a stored object with two parameters."""
        world.invoke_method(target, method, param1, param2)

    @step_pattern(f"I call {TARGET} with {METHOD} {THREE}")
    def call_method_with_three_parameters(
        self,
        world: World,
        target: str,
        method: str,
        param1: str,
        param2: str,
        param3: str,
    ) -> None:
        """Call a method on a stored object with three parameters."""
        world.invoke_method(target, method, param1, param2, param3)

    @step_pattern(f"I call {FUNCTION} {ONE}")
    def call_function_with_parameter(
        self, world: World, function: str, param1: str
    ) -> None:
        """Call a stored function with one parameter."""
        world.invoke_function(function, param1)

    @step_pattern(f"I call {FUNCTION} {TWO}")
    def call_function_with_two_parameters(
        self, world: World, function: str, param1: str, param2: str
    ) -> None:
        """Call a stored function with two parameters."""
        world.invoke_function(function, param1, param2)

    @step_pattern(f"I call {FUNCTION} {THREE}")
    def call_function_with_three_parameters(
        self, world: World, function: str, param1: str, param2: str, param3: str
    ) -> None:
        """Call a stored function with three parameters."""
        world.invoke_function(function, param1, param2, param3)

    # Values

    @step_pattern(f"I refer to {quoted('source')} as {quoted('alias')}")
    def refer_to(self, world: World, source: str, alias: str) -> None:
        """Store a resolved value under another name."""
        world.refer_to(source, alias)

    # Data tables

    @step_pattern(
        f"{FIELD} is a slice of objects with the following contents", table=True
    )
    def slice_with_contents(self, world: World, field: str, table: Table) -> None:
        """Sequence matches the table row for row."""
        world.assert_sequence_exact(field, table)

    @step_pattern(
        f"{FIELD} is a slice of objects with at least the following contents",
        table=True,
    )
    def slice_with_at_least(self, world: World, field: str, table: Table) -> None:
        """Every table row matches some element of the sequence."""
        world.assert_sequence_at_least(field, table)

    @step_pattern(
        f"{FIELD} is a slice of objects which doesn't contain any of", table=True
    )
    def slice_without_any_of(self, world: World, field: str, table: Table) -> None:
        """No element of the sequence matches any table row."""
        world.assert_sequence_none_of(field, table)

    @step_pattern(f"{FIELD} is a slice of objects with length {quoted('length')}")
    def slice_with_length(self, world: World, field: str, length: str) -> None:
        """Sequence has the given length."""
        world.assert_length(field, length)

    @step_pattern(
        f"{FIELD} is a slice of strings with the following values", table=True
    )
    def slice_of_strings(self, world: World, field: str, table: Table) -> None:
        """Sequence equals the table's single column."""
        world.assert_string_sequence(field, table)

    @step_pattern(f"{FIELD} is an object with the following contents", table=True)
    def object_with_contents(self, world: World, field: str, table: Table) -> None:
        """Object has every field of the single table row."""
        world.assert_object(field, table)

    # Value assertions

    @step_pattern(f"{FIELD} is nil")
    def is_nil(self, world: World, field: str) -> None:
        """Value is nil."""
        world.assert_nil(field)

    @step_pattern(f"{FIELD} is not nil")
    def is_not_nil(self, world: World, field: str) -> None:
        """Value is not nil."""
        world.assert_not_nil(field)

    @step_pattern(f"{FIELD} is true")
    def is_true(self, world: World, field: str) -> None:
        """Value is boolean true."""
        world.assert_true(field)

    @step_pattern(f"{FIELD} is false")
    def is_false(self, world: World, field: str) -> None:
        """Value is boolean false."""
        world.assert_false(field)

    @step_pattern(f"{FIELD} is empty")
    def is_empty(self, world: World, field: str) -> None:
        """String or collection is empty."""
        world.assert_empty(field)

    @step_pattern(f"{FIELD} is {quoted('expected')}")
    def equals(self, world: World, field: str, expected: str) -> None:
        """Value equals the resolved expectation."""
        world.assert_equals(field, expected)

    @step_pattern(f"{FIELD} is an error with message {quoted('message')}")
    def is_error_with_message(self, world: World, field: str, message: str) -> None:
        """Value is an error with exactly this message."""
        world.assert_error_with_message(field, message)

    @step_pattern(f"{FIELD} is an error")
    def is_error(self, world: World, field: str) -> None:
        """Value is an error."""
        world.assert_error(field)

    # Test setup

    @step_pattern(
        f"{quoted('handler')} is a invocation counter into {quoted('counter')}"
    )
    def invocation_counter(self, world: World, handler: str, counter: str) -> None:
        """Store a handler that counts its calls."""
        world.make_invocation_counter(handler, counter)

    @step_pattern(
        f"{FUNCTION} is a function which returns a value of {quoted('value')}"
    )
    def function_returning_value(
        self, world: World, function: str, value: str
    ) -> None:
        """Store a function returning a resolved value."""
        world.make_value_function(function, value)

    @step_pattern(f"we wait for a period of {quoted('period')} ms")
    def wait_for_period(self, world: World, period: str) -> None:
        """Sleep for a number of milliseconds."""
        world.wait_for_period(parse_milliseconds(period))

    # Starting tasks

    @step_pattern(f"I start task {TASK} by calling {FUNCTION}")
    def start_function_task(self, world: World, task: str, function: str) -> None:
        """Start a background task calling a function."""
        world.start_function_task(task, function)

    @step_pattern(f"I start task {TASK} by calling {FUNCTION} {ONE}")
    def start_function_task_with_parameter(
        self, world: World, task: str, function: str, param1: str
    ) -> None:
        """Start a background task calling a function with one parameter."""
        world.start_function_task(task, function, param1)

    @step_pattern(f"I start task {TASK} by calling {FUNCTION} {TWO}")
    def start_function_task_with_two_parameters(
        self, world: World, task: str, function: str, param1: str, param2: str
    ) -> None:
        """Start a background task calling a function with two parameters."""
        world.start_function_task(task, function, param1, param2)

    @step_pattern(f"I start task {TASK} by calling {FUNCTION} {THREE}")
    def start_function_task_with_three_parameters(
        self,
        world: World,
        task: str,
        function: str,
        param1: str,
        param2: str,
        param3: str,
    ) -> None:
        """Start a background task calling a function with three parameters."""
        world.start_function_task(task, function, param1, param2, param3)

    @step_pattern(f"I start task {TASK} by calling {TARGET} with {METHOD}")
    def start_method_task(
        self, world: World, task: str, target: str, method: str
    ) -> None:
        """Start a background task calling an object method."""
        world.start_method_task(task, target, method)

    @step_pattern(f"I start task {TASK} by calling {TARGET} with {METHOD} {ONE}")
    def start_method_task_with_parameter(
        self, world: World, task: str, target: str, method: str, param1: str
    ) -> None:
        """Start a background task calling a method with one parameter."""
        world.start_method_task(task, target, method, param1)

    @step_pattern(f"I start task {TASK} by calling {TARGET} with {METHOD} {TWO}")
    def start_method_task_with_two_parameters(
        self,
        world: World,
        task: str,
        target: str,
        method: str,
        param1: str,
        param2: str,
    ) -> None:
        """Start a background task calling a method with two parameters."""
        world.start_method_task(task, target, method, param1, param2)

    @step_pattern(f"I start task {TASK} by calling {TARGET} with {METHOD} {THREE}")
    def start_method_task_with_three_parameters(
        self,
        world: World,
        task: str,
        target: str,
        method: str,
        param1: str,
        param2: str,
        param3: str,
    ) -> None:
        """Start a background task calling a method with three parameters."""
        world.start_method_task(task, target, method, param1, param2, param3)

    # Waiting for tasks

    @step_pattern(f"I wait for task {TASK} to complete")
    def wait_for_task(self, world: World, task: str) -> None:
        """Wait for a task with the default timeout and store its outcome."""
        world.wait_and_store(task)

    @step_pattern(f"I wait for task {TASK} to complete within {quoted('timeout')} ms")
    def wait_for_task_within(self, world: World, task: str, timeout: str) -> None:
        """Wait for a task at most this many milliseconds and store its outcome."""
        world.wait_and_store(task, parse_milliseconds(timeout) / 1000)

    # Start and wait

    @step_pattern(f"I wait for {FUNCTION}")
    def run_function(self, world: World, function: str) -> None:
        """Run a function in the background and wait for it."""
        world.run_function(function)

    @step_pattern(f"I wait for {FUNCTION} {ONE}")
    def run_function_with_parameter(
        self, world: World, function: str, param1: str
    ) -> None:
        """Run a function with one parameter and wait for it."""
        world.run_function(function, param1)

    @step_pattern(f"I wait for {FUNCTION} {TWO}")
    def run_function_with_two_parameters(
        self, world: World, function: str, param1: str, param2: str
    ) -> None:
        """Run a function with two parameters and wait for it."""
        world.run_function(function, param1, param2)

    @step_pattern(f"I wait for {FUNCTION} {THREE}")
    def run_function_with_three_parameters(
        self, world: World, function: str, param1: str, param2: str, param3: str
    ) -> None:
        """Run a function with three parameters and wait for it."""
        world.run_function(function, param1, param2, param3)

    @step_pattern(f"I wait for {TARGET} with {METHOD}")
    def run_method(self, world: World, target: str, method: str) -> None:
        """Run an object method and wait for it."""
        world.run_method(target, method)

    @step_pattern(f"I wait for {TARGET} with {METHOD} {ONE}")
    def run_method_with_parameter(
        self, world: World, target: str, method: str, param1: str
    ) -> None:
        """Run an object method with one parameter and wait for it."""
        world.run_method(target, method, param1)

    @step_pattern(f"I wait for {TARGET} with {METHOD} {TWO}")
    def run_method_with_two_parameters(
        self, world: World, target: str, method: str, param1: str, param2: str
    ) -> None:
        """Run an object method with two parameters and wait for it."""
        world.run_method(target, method, param1, param2)

    @step_pattern(f"I wait for {TARGET} with {METHOD} {THREE}")
    def run_method_with_three_parameters(
        self,
        world: World,
        target: str,
        method: str,
        param1: str,
        param2: str,
        param3: str,
    ) -> None:
        """Run an object method with three parameters and wait for it."""
        world.run_method(target, method, param1, param2, param3)


def generic_catalogue(*extra: StepVocabulary) -> StepCatalogue:
    """Catalogue of the generic steps followed by any ``extra`` vocabularies."""
    return StepCatalogue([GenericSteps(), *extra])
