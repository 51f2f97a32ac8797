"""Outcome types for data comparisons."""

from __future__ import annotations

from dataclasses import dataclass, field

from cfi_harness.core.errors import MatchError


@dataclass
class RowComparison:
    """Whether one actual element satisfied one expected row, with a trace."""

    matched: bool
    trace: list[str] = field(default_factory=list)

    def describe(self) -> str:
        return "\n".join(self.trace)


@dataclass
class MatchResult:
    """Outcome of a matcher or scalar assertion."""

    passed: bool
    message: str = ""
    trace: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, message: str = "") -> MatchResult:
        return cls(passed=True, message=message)

    @classmethod
    def failed(cls, message: str, trace: list[str] | None = None) -> MatchResult:
        return cls(passed=False, message=message, trace=list(trace or []))

    def raise_for_failure(self) -> None:
        """Raise ``MatchError`` when the comparison failed."""
        if not self.passed:
            raise MatchError(self.message, self.trace)
