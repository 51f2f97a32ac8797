"""Tests for the generic step vocabulary, dispatched by step text."""

import threading
import time
from dataclasses import dataclass
from typing import Any

import pytest

from cfi_harness.core.errors import (
    InvocationError,
    MatchError,
    StepDefinitionError,
    TaskTimeoutError,
)
from cfi_harness.core.world.world import World
from cfi_harness.steps.catalogue import StepCatalogue
from cfi_harness.steps.generic_steps import (
    GenericSteps,
    generic_catalogue,
    parse_milliseconds,
)


@dataclass
class Person:
    Name: str
    Age: int


class Greeter:
    def Hello(self) -> str:
        return "hello"

    def Greet(self, name: str) -> str:
        return f"hello {name}"

    def Join(self, a: str, b: str) -> str:
        return a + b

    def JoinThree(self, a: str, b: str, c: str) -> str:
        return "-".join([a, b, c])


@pytest.fixture
def catalogue() -> StepCatalogue:
    return generic_catalogue()


@pytest.fixture
def run(catalogue: StepCatalogue, world: World) -> Any:
    """Dispatch one step against the test world."""

    def dispatch(text: str, table: list[list[str]] | None = None) -> Any:
        return catalogue.dispatch(world, text, table)

    return dispatch


class TestCatalogueShape:
    """Every pattern is unambiguous."""

    def test_each_step_text_matches_one_binding(self) -> None:
        bindings = GenericSteps().bindings()
        samples = [
            'I call "f"',
            'I call "o" with "m"',
            'I call "o" with "m" with parameter "a"',
            'I call "o" with "m" with parameters "a" and "b"',
            'I call "o" with "m" with parameters "a", "b" and "c"',
            'I call "f" with parameter "a"',
            'I call "f" with parameters "a" and "b"',
            'I call "f" with parameters "a", "b" and "c"',
            '"{x}" is nil',
            '"{x}" is "nil"',
            '"{x}" is an error',
            '"{x}" is an error with message "m"',
            'I start task "t" by calling "f"',
            'I start task "t" by calling "o" with "m"',
            'I wait for task "t" to complete',
            'I wait for task "t" to complete within "10" ms',
            'I wait for "f"',
            'I wait for "o" with "m" with parameter "a"',
        ]

        for text in samples:
            matching = [b.name for b in bindings if b.match(text) is not None]
            assert len(matching) == 1, (text, matching)


class TestCallSteps:
    """Test function and method calls."""

    def test_function_arities(self, run: Any, world: World) -> None:
        world.set_value("none", lambda: "0")
        world.set_value("one", lambda a: a)
        world.set_value("two", lambda a, b: a + b)
        world.set_value("three", lambda a, b, c: a + b + c)

        run('I call "none"')
        assert world.result == "0"
        run('I call "one" with parameter "a"')
        assert world.result == "a"
        run('I call "two" with parameters "a" and "b"')
        assert world.result == "ab"
        run('I call "three" with parameters "a", "b" and "c"')
        assert world.result == "abc"

    def test_method_arities(self, run: Any, world: World) -> None:
        world.set_value("greeter", Greeter())

        run('I call "greeter" with "Hello"')
        assert world.result == "hello"
        run('I call "greeter" with "Greet" with parameter "bo"')
        assert world.result == "hello bo"
        run('I call "greeter" with "Join" with parameters "a" and "b"')
        assert world.result == "ab"
        run('I call "greeter" with "JoinThree" with parameters "a", "b" and "c"')
        assert world.result == "a-b-c"

    def test_parameters_are_resolved(self, run: Any, world: World) -> None:
        world.set_value("x", 5)
        world.set_value("double", lambda n: n * 2)

        run('I call "double" with parameter "{x}"')

        assert world.result == 10

    def test_missing_function_stores_error(self, run: Any, world: World) -> None:
        run('I call "ghost"')

        assert isinstance(world.result, InvocationError)
        run('"{result}" is an error with message "function ghost not found"')


class TestValueSteps:
    """Test value setup and assertions."""

    def test_refer_to(self, run: Any, world: World) -> None:
        world.set_value("person", Person(Name="Ann", Age=30))

        run('I refer to "{person.Name}" as "name"')

        assert world.get_value("name") == "Ann"

    def test_value_assertions(self, run: Any, world: World) -> None:
        world.set_value("nothing", None)
        world.set_value("flag", True)
        world.set_value("off", False)
        world.set_value("blank", "")
        world.set_value("count", 15)

        run('"{nothing}" is nil')
        run('"{flag}" is not nil')
        run('"{flag}" is true')
        run('"{off}" is false')
        run('"{blank}" is empty')
        run('"{count}" is "15"')

    def test_failed_assertion_raises(self, run: Any, world: World) -> None:
        world.set_value("count", 15)

        with pytest.raises(MatchError, match="to equal 16"):
            run('"{count}" is "16"')

    def test_function_returning_value(self, run: Any, world: World) -> None:
        world.set_value("answer", 42)

        run('"f" is a function which returns a value of "{answer}"')
        run('I call "f"')

        assert world.result == 42

    def test_invocation_counter(self, run: Any, world: World) -> None:
        run('"handler" is a invocation counter into "calls"')
        run('I call "handler"')
        run('I call "handler"')

        run('"{calls}" is "2"')

    def test_wait_for_period(self, run: Any) -> None:
        started = time.monotonic()

        run('we wait for a period of "50" ms')

        assert time.monotonic() - started >= 0.05

    def test_invalid_period(self, run: Any) -> None:
        with pytest.raises(StepDefinitionError, match="invalid duration: soon"):
            run('we wait for a period of "soon" ms')


class TestTableSteps:
    """Test data table assertions."""

    def test_slice_steps(self, run: Any, world: World) -> None:
        world.set_value(
            "users", [Person(Name="John", Age=30), Person(Name="Jane", Age=25)]
        )
        table = [["Name", "Age"], ["John", "30"], ["Jane", "25"]]

        run('"{users}" is a slice of objects with the following contents', table)
        run(
            '"{users}" is a slice of objects with at least the following contents',
            [["Name"], ["Jane"]],
        )
        run(
            "\"{users}\" is a slice of objects which doesn't contain any of",
            [["Name"], ["Bob"]],
        )
        run('"{users}" is a slice of objects with length "2"')

    def test_strings_and_object(self, run: Any, world: World) -> None:
        world.set_value("colors", ["red", "green"])
        world.set_value("person", Person(Name="Ann", Age=30))

        run(
            '"{colors}" is a slice of strings with the following values',
            [["value"], ["red"], ["green"]],
        )
        run(
            '"{person}" is an object with the following contents',
            [["Name", "Age"], ["Ann", "30"]],
        )

    def test_table_mismatch(self, run: Any, world: World) -> None:
        world.set_value("colors", ["red"])

        with pytest.raises(MatchError, match="slice length mismatch"):
            run(
                '"{colors}" is a slice of strings with the following values',
                [["value"], ["red"], ["blue"]],
            )


class TestTaskSteps:
    """Test background task steps."""

    def test_start_and_wait(self, run: Any, world: World) -> None:
        def slow(value: str) -> str:
            time.sleep(0.05)
            return value

        world.set_value("slow", slow)

        run('I start task "job" by calling "slow" with parameter "done"')
        run('I wait for task "job" to complete')

        assert world.result == "done"

    def test_method_task(self, run: Any, world: World) -> None:
        world.set_value("greeter", Greeter())

        run(
            'I start task "t" by calling "greeter" with "Join" '
            'with parameters "a" and "b"'
        )
        run('I wait for task "t" to complete within "1000" ms')

        assert world.result == "ab"

    def test_timeout_is_stored(self, run: Any, world: World) -> None:
        release = threading.Event()
        world.set_value("blocked", lambda: release.wait(5))

        run('I start task "stuck" by calling "blocked"')
        run('I wait for task "stuck" to complete within "50" ms')
        release.set()

        assert isinstance(world.result, TaskTimeoutError)
        run('"{result}" is an error with message "task stuck timed out after 50ms"')

    def test_unknown_task_is_stored(self, run: Any, world: World) -> None:
        run('I wait for task "ghost" to complete')

        run('"{result}" is an error with message "task ghost not found"')

    def test_start_and_wait_composites(self, run: Any, world: World) -> None:
        world.set_value("add", lambda a, b: int(a) + int(b))
        world.set_value("greeter", Greeter())

        run('I wait for "add" with parameters "2" and "3"')
        assert world.result == 5
        run('I wait for "greeter" with "Greet" with parameter "x"')
        assert world.result == "hello x"

    def test_three_parameter_tasks(self, run: Any, world: World) -> None:
        world.set_value("join", lambda a, b, c: a + b + c)
        world.set_value("greeter", Greeter())

        run('I start task "f3" by calling "join" with parameters "a", "b" and "c"')
        run('I wait for task "f3" to complete')
        assert world.result == "abc"

        run('I wait for "greeter" with "JoinThree" with parameters "x", "y" and "z"')
        assert world.result == "x-y-z"


class TestParseMilliseconds:
    """Test duration parsing."""

    def test_valid(self) -> None:
        assert parse_milliseconds("250") == 250

    @pytest.mark.parametrize("text", ["-1", "1.5", "soon", ""])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(StepDefinitionError):
            parse_milliseconds(text)
