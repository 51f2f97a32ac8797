"""Console diagnostics printed while steps run."""

from __future__ import annotations

from rich.console import Console


class DiagnosticPrinter:
    """Writes EXPECTED/ACTUAL pairs and step markers to a rich console.

    Step output is meant to be self-diagnosing: a failing assertion prints
    what it compared before its error reaches the scenario runner.
    """

    def __init__(self, console: Console | None = None, enabled: bool = True) -> None:
        """Initialize the printer.

        Args:
            console: Console to write to; a plain stdout console by default
            enabled: When False nothing is printed
        """
        self.console = console or Console(soft_wrap=True, highlight=False)
        self.enabled = enabled

    def line(self, message: str) -> None:
        """Print ``message`` verbatim."""
        if self.enabled:
            self.console.print(message, markup=False, highlight=False)

    def expected_actual(self, expected: str, actual: str, label: str = "") -> None:
        """Print an EXPECTED/ACTUAL pair, optionally indexed by ``label``."""
        suffix = f"[{label}]" if label else ""
        self.line(f"EXPECTED{suffix}: {expected}")
        self.line(f"ACTUAL{suffix}:   {actual}")

    def success(self, message: str) -> None:
        """Print a passed check."""
        self.line(f"✓ {message}")

    def failure(self, message: str) -> None:
        """Print a failed check."""
        self.line(f"✗ {message}")

    def error(self, message: str) -> None:
        """Print an invocation fault."""
        self.line(f"\n❌ {message}")

    def info(self, message: str) -> None:
        """Print an informational message."""
        self.line(f"ℹ️  {message}")
