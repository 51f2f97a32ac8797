"""Scalar predicates over resolved values."""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from typing import Any

from cfi_harness.core.diagnostics import DiagnosticPrinter
from cfi_harness.core.matching.data_matcher import values_match
from cfi_harness.core.matching.formatting import format_value_for_comparison, stringify
from cfi_harness.core.matching.results import MatchResult


class ScalarAssertions:
    """Predicates used by the value assertion steps.

    Each check prints an EXPECTED/ACTUAL pair and returns a ``MatchResult``;
    ``label`` is the step token, used only in failure messages.
    """

    def __init__(self, printer: DiagnosticPrinter | None = None) -> None:
        self._printer = printer or DiagnosticPrinter(enabled=False)

    def _show(self, expected: str, actual: Any) -> None:
        self._printer.expected_actual(expected, format_value_for_comparison(actual))

    def is_nil(self, actual: Any, label: str) -> MatchResult:
        self._show("null", actual)
        if actual is not None:
            return MatchResult.failed(
                f"expected {label} to be nil, got {stringify(actual)}"
            )
        self._printer.success("Value is nil")
        return MatchResult.ok()

    def is_not_nil(self, actual: Any, label: str) -> MatchResult:
        self._show("not null", actual)
        if actual is None:
            return MatchResult.failed(f"expected {label} to not be nil")
        self._printer.success("Value is not nil")
        return MatchResult.ok()

    def is_true(self, actual: Any, label: str) -> MatchResult:
        self._show("true (type: bool)", actual)
        if actual is not True:
            return MatchResult.failed(
                f"expected {label} to be true, got {stringify(actual)}"
            )
        self._printer.success("Value is true")
        return MatchResult.ok()

    def is_false(self, actual: Any, label: str) -> MatchResult:
        self._show("false (type: bool)", actual)
        if actual is not False:
            return MatchResult.failed(
                f"expected {label} to be false, got {stringify(actual)}"
            )
        self._printer.success("Value is false")
        return MatchResult.ok()

    def is_empty(self, actual: Any, label: str) -> MatchResult:
        """Strings and collections must have length zero.

        Anything else cannot be empty and fails.
        """
        self._show("empty", actual)
        if isinstance(actual, str):
            kind = "String"
        elif isinstance(actual, Sequence | Mapping | Set):
            kind = "Collection"
        else:
            return MatchResult.failed(
                f"cannot check if {label} is empty: unsupported type "
                f"{type(actual).__name__}"
            )

        if len(actual) != 0:
            return MatchResult.failed(
                f"expected {label} to be empty, got length {len(actual)}"
            )
        self._printer.success(f"{kind} is empty")
        return MatchResult.ok()

    def equals(self, actual: Any, expected: Any, label: str) -> MatchResult:
        """Equal directly, by boolean spelling, or by string form."""
        self._printer.expected_actual(
            format_value_for_comparison(expected), format_value_for_comparison(actual)
        )
        matched, how = values_match(actual, expected)
        if not matched:
            return MatchResult.failed(
                f"expected {label} to equal {stringify(expected)}, "
                f"got {stringify(actual)}"
            )
        if how == "equal":
            self._printer.success("Values match")
        else:
            self._printer.success(f"Values match (after {how} comparison)")
        return MatchResult.ok()

    def is_error(self, actual: Any, label: str) -> MatchResult:
        if not isinstance(actual, BaseException):
            self._show("error", actual)
            return MatchResult.failed(
                f"expected {label} to be an error, got {type(actual).__name__}"
            )
        self._printer.expected_actual("error", f"error: {actual}")
        self._printer.success("Value is an error")
        return MatchResult.ok()

    def is_error_with_message(
        self, actual: Any, message: str, label: str
    ) -> MatchResult:
        expected = f'error with message "{message}"'
        if not isinstance(actual, BaseException):
            self._show(expected, actual)
            return MatchResult.failed(f"expected {label} to be an error")

        self._printer.expected_actual(expected, f'error with message "{actual}"')
        if str(actual) != message:
            return MatchResult.failed(
                f"expected error message {message}, got {actual}"
            )
        self._printer.success("Error message matches")
        return MatchResult.ok()
