"""Data matching and scalar assertions."""

from cfi_harness.core.matching.assertions import ScalarAssertions
from cfi_harness.core.matching.data_matcher import (
    SCHEMA_MARKER,
    DataMatcher,
    values_match,
)
from cfi_harness.core.matching.expectation_table import ExpectationTable
from cfi_harness.core.matching.formatting import (
    format_value_for_comparison,
    stringify,
)
from cfi_harness.core.matching.results import MatchResult, RowComparison

__all__ = [
    "SCHEMA_MARKER",
    "DataMatcher",
    "ExpectationTable",
    "MatchResult",
    "RowComparison",
    "ScalarAssertions",
    "format_value_for_comparison",
    "stringify",
    "values_match",
]
