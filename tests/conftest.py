"""Shared test fixtures and configuration."""

import io
from collections.abc import Generator
from typing import Any

import pytest
from rich.console import Console

from cfi_harness.core.config.harness_config import CONFIG_ENV_VAR, HarnessConfig
from cfi_harness.core.context import HarnessContext
from cfi_harness.core.diagnostics import DiagnosticPrinter
from cfi_harness.core.world.world import World

pytest_plugins = ["pytester", "cfi_harness.bdd.plugin"]


@pytest.fixture(autouse=True)
def isolate_harness_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's CFI_HARNESS_CONFIG out of the tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def console_buffer() -> io.StringIO:
    """Buffer receiving diagnostics printed during a test."""
    return io.StringIO()


@pytest.fixture
def printer(console_buffer: io.StringIO) -> DiagnosticPrinter:
    """Printer writing plain text into ``console_buffer``."""
    console = Console(file=console_buffer, width=200, color_system=None)
    return DiagnosticPrinter(console)


@pytest.fixture
def context(printer: DiagnosticPrinter) -> HarnessContext:
    """Context with short timeouts and captured diagnostics."""
    return HarnessContext(
        config=HarnessConfig(default_task_timeout_seconds=2.0), printer=printer
    )


@pytest.fixture
def world(context: HarnessContext) -> Generator[World, None, None]:
    """A fresh world, closed after the test."""
    instance = World(context)
    yield instance
    instance.close()


@pytest.fixture
def make_world(context: HarnessContext) -> Generator[Any, None, None]:
    """Factory for worlds seeded with scenario parameters."""
    created: list[World] = []

    def factory(params: dict[str, Any] | None = None) -> World:
        instance = World(context, params)
        created.append(instance)
        return instance

    yield factory
    for instance in created:
        instance.close()
