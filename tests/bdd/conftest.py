"""BDD test configuration: example vocabulary and per-scenario data."""

import time
from dataclasses import dataclass
from typing import Any

import pytest

from cfi_harness.bdd.binding import bind_steps
from cfi_harness.core.world.world import World
from cfi_harness.steps.catalogue import StepCatalogue, StepVocabulary, step_pattern
from cfi_harness.steps.generic_steps import parse_milliseconds, quoted

NAME = quoted("name")


def user_records() -> list[dict[str, Any]]:
    return [
        {
            "name": "John Doe",
            "active": True,
            "profile": {"email": "john@example.com"},
        },
        {
            "name": "Jane Doe",
            "active": False,
            "profile": {"email": "jane@example.com"},
        },
    ]


class APIClient:
    """Canned HTTP-style client used as a call target."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url

    def Get(self, endpoint: str) -> dict[str, Any]:
        return {
            "status": 200,
            "message": "success",
            "data": [
                {"id": 1, "name": "John Doe", "active": True},
                {"id": 2, "name": "Jane Doe", "active": False},
            ],
        }

    def Post(self, endpoint: str, data: Any) -> dict[str, Any]:
        return {"status": 201, "message": "created", "id": 123}


class TestObject:
    def GetValue(self) -> str:
        return "test-value"

    def CombineStrings(self, a: Any, b: Any) -> str:
        return f"{a}-{b}"

    def JoinThree(self, a: Any, b: Any, c: Any) -> str:
        return f"{a}-{b}-{c}"


@dataclass
class Person:
    Name: str
    Age: str


class ExampleSteps(StepVocabulary):
    """Fixture-building steps for the example features."""

    @step_pattern(f"I have an API client configured in {NAME}")
    def api_client(self, world: World, name: str) -> None:
        world.set_value(name, APIClient("https://api.example.com"))

    @step_pattern(f"I have test data in {NAME}")
    def test_data(self, world: World, name: str) -> None:
        world.set_value(name, user_records())

    @step_pattern(f"{NAME} is a function which throws an error")
    def failing_function(self, world: World, name: str) -> None:
        def fail() -> None:
            raise RuntimeError("something went wrong")

        world.set_value(name, fail)

    @step_pattern(f"{NAME} is a function which sleeps for {quoted('period')} ms")
    def sleeping_function(self, world: World, name: str, period: str) -> None:
        seconds = parse_milliseconds(period) / 1000

        def sleep() -> str:
            time.sleep(seconds)
            return "awake"

        world.set_value(name, sleep)

    @step_pattern(f"{NAME} is a string array with colors")
    def colors(self, world: World, name: str) -> None:
        world.set_value(name, ["red", "blue", "green"])

    @step_pattern(f"{NAME} is an empty array")
    def empty_array(self, world: World, name: str) -> None:
        world.set_value(name, [])

    @step_pattern(f"{NAME} is an empty string")
    def empty_string(self, world: World, name: str) -> None:
        world.set_value(name, "")

    @step_pattern(
        f"{NAME} is a struct with Name {quoted('person')} and Age {quoted('age')}"
    )
    def person(self, world: World, name: str, person: str, age: str) -> None:
        world.set_value(name, Person(Name=person, Age=age))

    @step_pattern(f"{NAME} is a test function with no parameters")
    def no_parameters(self, world: World, name: str) -> None:
        world.set_value(name, lambda: "no-params-result")

    @step_pattern(f"{NAME} is a test function with one parameter")
    def one_parameter(self, world: World, name: str) -> None:
        world.set_value(name, lambda a: f"one-param:{a}")

    @step_pattern(f"{NAME} is a test function with two parameters")
    def two_parameters(self, world: World, name: str) -> None:
        world.set_value(name, lambda a, b: f"two-params:{a},{b}")

    @step_pattern(f"{NAME} is a test function with three parameters")
    def three_parameters(self, world: World, name: str) -> None:
        world.set_value(name, lambda a, b, c: f"three-params:{a},{b},{c}")

    @step_pattern(f"I have a test object in {NAME}")
    def test_object(self, world: World, name: str) -> None:
        world.set_value(name, TestObject())


EXAMPLE_STEPS = bind_steps(StepCatalogue([ExampleSteps()]))


@pytest.fixture
def harness_scenario_params() -> dict[str, Any]:
    """Values every example scenario starts with."""
    return {
        "apiClient": APIClient("https://api.example.com"),
        "testData": {"name": "Test User", "email": "test@example.com"},
        "users": user_records(),
    }
