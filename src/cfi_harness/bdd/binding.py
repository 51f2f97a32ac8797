"""Registration of catalogue bindings as pytest-bdd steps."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from pytest_bdd import parsers, step

from cfi_harness.steps.catalogue import StepBinding, StepCatalogue

WORLD_FIXTURE = "harness_world"
TABLE_ARGUMENT = "datatable"


def make_step_function(binding: StepBinding) -> Callable[..., Any]:
    """Wrap ``binding`` as a pytest-bdd step function.

    pytest-bdd passes arguments by the names in the function signature, so
    the wrapper advertises the world fixture, every named group of the
    pattern and, for table steps, the step's data table.
    """

    def step_function(**kwargs: Any) -> Any:
        world = kwargs.pop(WORLD_FIXTURE)
        table = kwargs.pop(TABLE_ARGUMENT, None)
        return binding.invoke(world, kwargs, table)

    names = [WORLD_FIXTURE, *binding.group_names]
    if binding.table:
        names.append(TABLE_ARGUMENT)
    step_function.__signature__ = inspect.Signature(  # type: ignore[attr-defined]
        [
            inspect.Parameter(name, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            for name in names
        ]
    )
    step_function.__name__ = binding.name
    step_function.__qualname__ = binding.name
    step_function.__doc__ = inspect.getdoc(binding.handler)
    return step_function


def bind_steps(
    catalogue: StepCatalogue, stacklevel: int = 1
) -> list[Callable[..., Any]]:
    """Register every binding of ``catalogue`` for any step keyword.

    pytest-bdd defines step fixtures in the calling module, so call this at
    module level in a conftest or test module. Pass a larger ``stacklevel``
    when calling through a helper.

    Returns:
        The registered step functions
    """
    functions = []
    for binding in catalogue:
        function = make_step_function(binding)
        step(parsers.re(binding.pattern), stacklevel=stacklevel + 1)(function)
        functions.append(function)
    return functions
