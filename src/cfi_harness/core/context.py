"""Session-wide context shared by every world."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from cfi_harness.core.config.harness_config import HarnessConfig
from cfi_harness.core.diagnostics import DiagnosticPrinter


@dataclass
class HarnessContext:
    """Configuration and output channel, built once per test session."""

    config: HarnessConfig = field(default_factory=HarnessConfig)
    printer: DiagnosticPrinter = field(default_factory=DiagnosticPrinter)

    @classmethod
    def from_config(
        cls, config: HarnessConfig, console: Console | None = None
    ) -> HarnessContext:
        """Build a context whose printer honours ``echo_diagnostics``."""
        printer = DiagnosticPrinter(console, enabled=config.echo_diagnostics)
        return cls(config=config, printer=printer)

    @property
    def result_key(self) -> str:
        """Name under which invocation and task outcomes are stored."""
        return self.config.result_key

    @property
    def default_timeout(self) -> float:
        """Default bound, in seconds, for composite wait steps."""
        return self.config.default_task_timeout_seconds
