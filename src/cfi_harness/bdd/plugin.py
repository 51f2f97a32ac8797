"""pytest plugin wiring the harness into pytest-bdd.

Enable it from a conftest with::

    pytest_plugins = ["cfi_harness.bdd.plugin"]

Every generic step is then available to feature files, and each scenario
gets a fresh ``World`` through the ``harness_world`` fixture.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from typing import Any

import pytest

from cfi_harness.bdd.binding import WORLD_FIXTURE, bind_steps
from cfi_harness.bdd.outcomes import StepOutcomeRecorder, StepStatus
from cfi_harness.core.config.harness_config import load_harness_config
from cfi_harness.core.context import HarnessContext
from cfi_harness.core.world.world import World
from cfi_harness.steps.generic_steps import generic_catalogue

logger = logging.getLogger(__name__)

CONTEXT_KEY = pytest.StashKey[HarnessContext]()
OUTCOMES_KEY = pytest.StashKey[StepOutcomeRecorder]()

CONFIG_INI = "cfi_harness_config"
ECHO_INI = "cfi_harness_echo"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini(
        CONFIG_INI,
        help="Path to the harness YAML configuration file",
        default="",
    )
    parser.addini(
        ECHO_INI,
        help="Print EXPECTED/ACTUAL diagnostics while steps run (true/false)",
        default="",
    )


def pytest_configure(config: pytest.Config) -> None:
    config_path = str(config.getini(CONFIG_INI) or "").strip() or None
    try:
        harness_config = load_harness_config(config_path)
    except (ValueError, FileNotFoundError) as e:
        raise pytest.UsageError(f"cfi-harness: {e}") from e

    echo = str(config.getini(ECHO_INI) or "").strip().lower()
    if echo:
        harness_config = harness_config.model_copy(
            update={"echo_diagnostics": echo in _TRUE_VALUES}
        )

    logging.getLogger("cfi_harness").setLevel(harness_config.log_level)
    config.stash[CONTEXT_KEY] = HarnessContext.from_config(harness_config)
    config.stash[OUTCOMES_KEY] = StepOutcomeRecorder()


def _context(config: pytest.Config) -> HarnessContext:
    context = config.stash.get(CONTEXT_KEY, None)
    if context is None:
        context = HarnessContext()
        config.stash[CONTEXT_KEY] = context
    return context


def _recorder(config: pytest.Config) -> StepOutcomeRecorder:
    recorder = config.stash.get(OUTCOMES_KEY, None)
    if recorder is None:
        recorder = StepOutcomeRecorder()
        config.stash[OUTCOMES_KEY] = recorder
    return recorder


@pytest.fixture
def harness_context(request: pytest.FixtureRequest) -> HarnessContext:
    """Session-wide configuration and diagnostics printer."""
    return _context(request.config)


@pytest.fixture
def harness_outcomes(request: pytest.FixtureRequest) -> StepOutcomeRecorder:
    """Step outcomes recorded so far in this session."""
    return _recorder(request.config)


@pytest.fixture
def harness_scenario_params() -> dict[str, Any]:
    """Values seeded into each scenario's world; override to provide some."""
    return {}


@pytest.fixture
def harness_world(
    harness_context: HarnessContext, harness_scenario_params: dict[str, Any]
) -> Generator[World, None, None]:
    """A fresh world for the current scenario."""
    world = World(harness_context, harness_scenario_params)
    yield world
    world.close()


def pytest_bdd_before_scenario(
    request: pytest.FixtureRequest, feature: Any, scenario: Any
) -> None:
    # Build the world before the first step runs
    request.getfixturevalue(WORLD_FIXTURE)
    logger.debug("Starting scenario %s", scenario.name)


def _record(
    request: pytest.FixtureRequest,
    feature: Any,
    scenario: Any,
    step: Any,
    status: StepStatus,
    error: BaseException | None = None,
) -> None:
    _recorder(request.config).record(
        feature=feature.name,
        scenario=scenario.name,
        keyword=step.keyword,
        step=step.name,
        status=status,
        error=error,
    )


def pytest_bdd_after_step(
    request: pytest.FixtureRequest,
    feature: Any,
    scenario: Any,
    step: Any,
    step_func: Callable[..., Any],
    step_func_args: dict[str, Any],
) -> None:
    _record(request, feature, scenario, step, "passed")


def pytest_bdd_step_error(
    request: pytest.FixtureRequest,
    feature: Any,
    scenario: Any,
    step: Any,
    step_func: Callable[..., Any],
    step_func_args: dict[str, Any],
    exception: Exception,
) -> None:
    status: StepStatus = (
        "skipped" if isinstance(exception, pytest.skip.Exception) else "failed"
    )
    _record(request, feature, scenario, step, status, exception)


def pytest_bdd_step_func_lookup_error(
    request: pytest.FixtureRequest,
    feature: Any,
    scenario: Any,
    step: Any,
    exception: Exception,
) -> None:
    _record(request, feature, scenario, step, "undefined", exception)


GENERIC_STEPS = bind_steps(generic_catalogue())
