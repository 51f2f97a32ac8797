"""Structural comparison of live values against expectation tables."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from cfi_harness.core.diagnostics import DiagnosticPrinter
from cfi_harness.core.matching.formatting import (
    format_value_for_comparison,
    stringify,
)
from cfi_harness.core.matching.results import MatchResult, RowComparison
from cfi_harness.core.resolution.normalize import is_sequence, to_plain
from cfi_harness.core.resolution.path_query import find_first
from cfi_harness.core.resolution.reference_resolver import (
    ReferenceResolver,
    parse_number,
)

logger = logging.getLogger(__name__)

SCHEMA_MARKER = "matches_type"


def values_match(actual: Any, expected: Any) -> tuple[bool, str]:
    """Compare two values the way table cells are compared.

    Direct equality first (a bool only equals a bool), then the
    ``"true"``/``"false"`` cell spelling against a real boolean, then the
    string forms of both sides.

    Returns:
        ``(matched, how)`` where ``how`` names the rule that decided
    """
    if isinstance(actual, bool) == isinstance(expected, bool):
        if actual == expected:
            return True, "equal"

    if actual is True and expected == "true":
        return True, "true == 'true'"
    if actual is False and expected == "false":
        return True, "false == 'false'"

    if stringify(actual) == stringify(expected):
        return True, "string form"
    return False, "mismatch"


def lookup_field(plain: Any, field_path: str) -> tuple[bool, Any]:
    """Find ``field_path`` in normalised data.

    A literal mapping key wins, so headers such as ``first name`` work even
    though they are not valid paths; otherwise the header is a JSONPath
    fragment.
    """
    if isinstance(plain, Mapping) and field_path in plain:
        return True, plain[field_path]
    return find_first(plain, field_path)


def _render(value: Any) -> str:
    try:
        return json.dumps(value, default=repr)
    except (TypeError, ValueError):
        return repr(value)


class DataMatcher:
    """Compares actual data against expected rows.

    Expected cells are resolved through the world's resolver, so a cell may
    itself be a reference such as ``{expected_name}``. Expected field names
    are JSONPath fragments evaluated against the normalised actual element,
    which lets a column address nested data like ``profile.email``.
    """

    def __init__(
        self, resolver: ReferenceResolver, printer: DiagnosticPrinter | None = None
    ) -> None:
        """Initialize the matcher."""
        self._resolver = resolver
        self._printer = printer or DiagnosticPrinter(enabled=False)

    def row_matches(self, expected: Mapping[str, str], actual: Any) -> RowComparison:
        """Check every field of ``expected`` against ``actual``.

        Stops at the first mismatching field. Fields whose name ends in
        ``matches_type`` are skipped.
        """
        plain = to_plain(actual)
        trace = [f"Actual object: {_render(plain)}", "Field comparisons:"]

        for field_path, cell in expected.items():
            if field_path.endswith(SCHEMA_MARKER):
                trace.append(f"  {field_path}: SKIPPED (schema validation)")
                continue

            found, value = lookup_field(plain, field_path)
            resolved = self._resolver.resolve(cell)
            if not found:
                # An absent field only matches an explicit {nil}
                if resolved is None:
                    trace.append(f"  {field_path}: NOT FOUND, MATCH (nil)")
                    continue
                trace.append(
                    f"  {field_path}: NOT FOUND - expected: "
                    f"'{stringify(resolved)}' (type: {type(resolved).__name__})"
                )
                logger.debug("Field %s not found", field_path)
                return RowComparison(matched=False, trace=trace)

            matched, how = values_match(value, resolved)
            if not matched:
                trace.append(
                    f"  {field_path}: MISMATCH - found: '{stringify(value)}' "
                    f"(type: {type(value).__name__}), expected: "
                    f"'{stringify(resolved)}' (type: {type(resolved).__name__})"
                )
                logger.debug("Field %s did not match", field_path)
                return RowComparison(matched=False, trace=trace)
            trace.append(f"  {field_path}: MATCH ({how}) - '{stringify(value)}'")

        return RowComparison(matched=True, trace=trace)

    def _require_sequence(self, actual: Any, label: str) -> MatchResult | None:
        if is_sequence(actual):
            return None
        self._printer.expected_actual("slice", format_value_for_comparison(actual))
        return MatchResult.failed(f"field {label} is not a slice")

    def match_exact(
        self, actual: Any, rows: Sequence[Mapping[str, str]], label: str = "value"
    ) -> MatchResult:
        """Every row must match the element at the same index; lengths equal."""
        not_sequence = self._require_sequence(actual, label)
        if not_sequence is not None:
            return not_sequence

        if len(actual) != len(rows):
            message = f"length mismatch: expected {len(rows)}, got {len(actual)}"
            self._printer.failure(message)
            return MatchResult.failed(message)

        for index, (expected_row, element) in enumerate(zip(rows, actual)):
            comparison = self.row_matches(expected_row, element)
            if not comparison.matched:
                message = (
                    f"row {index} does not match expected values:\n"
                    f"{comparison.describe()}"
                )
                self._printer.failure(message)
                return MatchResult.failed(message, comparison.trace)

        self._printer.success("All rows match")
        return MatchResult.ok()

    def match_at_least(
        self, actual: Any, rows: Sequence[Mapping[str, str]], label: str = "value"
    ) -> MatchResult:
        """Every row must match some element; order and extras are ignored."""
        not_sequence = self._require_sequence(actual, label)
        if not_sequence is not None:
            return not_sequence

        for expected_row in rows:
            if not any(
                self.row_matches(expected_row, item).matched for item in actual
            ):
                row = dict(expected_row)
                self._printer.failure(f"Expected row not found in slice: {row}")
                return MatchResult.failed(f"expected row not found: {row}")

        self._printer.success("All expected rows found in slice")
        return MatchResult.ok()

    def match_none_of(
        self, actual: Any, rows: Sequence[Mapping[str, str]], label: str = "value"
    ) -> MatchResult:
        """No element may match any of the unwanted rows."""
        not_sequence = self._require_sequence(actual, label)
        if not_sequence is not None:
            return not_sequence

        for unwanted_row in rows:
            for item in actual:
                comparison = self.row_matches(unwanted_row, item)
                if comparison.matched:
                    self._printer.failure(
                        f"Unwanted row found in slice: {dict(unwanted_row)}"
                    )
                    return MatchResult.failed(
                        f"unwanted row found in slice: {dict(unwanted_row)}",
                        comparison.trace,
                    )

        self._printer.success("None of the unwanted rows found in slice")
        return MatchResult.ok()

    def match_length(
        self, actual: Any, length_token: str, label: str = "value"
    ) -> MatchResult:
        """The sequence length must equal the resolved ``length_token``."""
        not_sequence = self._require_sequence(actual, label)
        if not_sequence is not None:
            return not_sequence

        resolved = self._resolver.resolve(length_token)
        expected_length = parse_number(stringify(resolved))
        if not isinstance(expected_length, int):
            return MatchResult.failed(f"invalid length: {length_token}")

        self._printer.expected_actual(
            f"slice with length {expected_length}", f"slice with length {len(actual)}"
        )
        if len(actual) != expected_length:
            return MatchResult.failed(
                f"expected length {expected_length}, got {len(actual)}"
            )

        self._printer.success("Slice length matches")
        return MatchResult.ok()

    def match_strings(
        self, actual: Any, values: Sequence[str], label: str = "value"
    ) -> MatchResult:
        """Element-wise comparison of a sequence with single-column values."""
        if not is_sequence(actual):
            self._printer.expected_actual(
                "slice of strings", format_value_for_comparison(actual)
            )
            return MatchResult.failed(f"field {label} is not a slice")

        expected = [self._resolver.resolve(value) for value in values]
        self._printer.expected_actual(
            format_value_for_comparison(expected), format_value_for_comparison(actual)
        )

        if len(actual) != len(expected):
            return MatchResult.failed(
                f"slice length mismatch: expected {len(expected)}, got {len(actual)}"
            )

        for index, (expected_value, actual_value) in enumerate(zip(expected, actual)):
            matched, _ = values_match(actual_value, expected_value)
            if not matched:
                self._printer.expected_actual(
                    stringify(expected_value), stringify(actual_value), str(index)
                )
                return MatchResult.failed(
                    f"element {index} mismatch: expected {stringify(expected_value)}, "
                    f"got {stringify(actual_value)}"
                )

        self._printer.success("All elements match")
        return MatchResult.ok()

    def match_object(
        self, actual: Any, expected: Mapping[str, str], label: str = "value"
    ) -> MatchResult:
        """Every expected field must be present in ``actual`` with an equal value."""
        self._printer.expected_actual(
            format_value_for_comparison(dict(expected)),
            format_value_for_comparison(actual),
        )

        plain = to_plain(actual)
        if not isinstance(plain, Mapping):
            return MatchResult.failed(f"field {label} is not an object/map")

        for key, cell in expected.items():
            if key.endswith(SCHEMA_MARKER):
                continue

            found, value = lookup_field(plain, key)
            if not found:
                self._printer.expected_actual(cell, "<missing>", key)
                return MatchResult.failed(f"field {key} missing in actual object")

            resolved = self._resolver.resolve(cell)
            matched, _ = values_match(value, resolved)
            if not matched:
                self._printer.expected_actual(
                    stringify(resolved), stringify(value), key
                )
                return MatchResult.failed(
                    f"field {key} mismatch: expected {stringify(resolved)}, "
                    f"got {stringify(value)}"
                )

        self._printer.success("All fields match")
        return MatchResult.ok()
