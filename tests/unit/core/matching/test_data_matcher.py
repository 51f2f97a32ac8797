"""Tests for structural data matching."""

import io
from dataclasses import dataclass

import pytest

from cfi_harness.core.diagnostics import DiagnosticPrinter
from cfi_harness.core.errors import MatchError, StepDefinitionError
from cfi_harness.core.matching.data_matcher import DataMatcher, values_match
from cfi_harness.core.matching.expectation_table import ExpectationTable
from cfi_harness.core.matching.formatting import (
    format_value_for_comparison,
    stringify,
)
from cfi_harness.core.matching.results import MatchResult
from cfi_harness.core.resolution.reference_resolver import ReferenceResolver
from cfi_harness.core.world.value_store import ValueStore


@dataclass
class Service:
    name: str
    status: str
    port: int
    public: bool


@pytest.fixture
def store() -> ValueStore:
    return ValueStore({"wanted": "B"})


@pytest.fixture
def matcher(store: ValueStore, printer: DiagnosticPrinter) -> DataMatcher:
    return DataMatcher(ReferenceResolver(store), printer)


NAMES = [{"name": "A"}, {"name": "B"}, {"name": "C"}]


class TestValuesMatch:
    """Test scalar comparison rules."""

    def test_direct_equality(self) -> None:
        assert values_match(3, 3) == (True, "equal")

    def test_boolean_string_coercion(self) -> None:
        assert values_match(True, "true")[0]
        assert values_match(False, "false")[0]
        assert not values_match(True, "false")[0]

    def test_bool_never_equals_int_directly(self) -> None:
        matched, how = values_match(True, 1)

        assert not matched
        assert how == "mismatch"

    def test_string_form(self) -> None:
        assert values_match(8080, "8080") == (True, "string form")
        assert values_match(2.0, "2") == (True, "string form")

    def test_none_against_nil_spelling(self) -> None:
        assert values_match(None, "nil")[0]
        assert not values_match(None, "")[0]


class TestRowMatches:
    """Test field-by-field row comparison."""

    def test_nested_fields(self, matcher: DataMatcher) -> None:
        actual = {"name": "John", "profile": {"email": "john@example.com"}}

        comparison = matcher.row_matches(
            {"name": "John", "profile.email": "john@example.com"}, actual
        )

        assert comparison.matched
        assert "profile.email: MATCH" in comparison.describe()

    def test_objects_are_normalised(self, matcher: DataMatcher) -> None:
        service = Service(name="web", status="open", port=443, public=True)

        comparison = matcher.row_matches(
            {"name": "web", "port": "443", "public": "true"}, service
        )

        assert comparison.matched

    def test_mismatch_trace(self, matcher: DataMatcher) -> None:
        comparison = matcher.row_matches(
            {"name": "A", "status": "open"}, {"name": "A", "status": "closed"}
        )

        assert not comparison.matched
        assert comparison.trace[0].startswith("Actual object:")
        assert "name: MATCH" in comparison.describe()
        assert "status: MISMATCH - found: 'closed'" in comparison.describe()

    def test_schema_marker_is_skipped(self, matcher: DataMatcher) -> None:
        comparison = matcher.row_matches(
            {"name": "A", "body matches_type": "Schema"}, {"name": "A"}
        )

        assert comparison.matched
        assert "SKIPPED (schema validation)" in comparison.describe()

    def test_missing_field(self, matcher: DataMatcher) -> None:
        comparison = matcher.row_matches({"absent": "x"}, {"name": "A"})

        assert not comparison.matched
        assert "absent: NOT FOUND" in comparison.describe()

    def test_expected_cells_are_resolved(self, matcher: DataMatcher) -> None:
        assert matcher.row_matches({"name": "{wanted}"}, {"name": "B"}).matched

    @pytest.mark.parametrize("header", ["first name", "where"])
    def test_literal_keys_that_are_not_paths(
        self, matcher: DataMatcher, header: str
    ) -> None:
        comparison = matcher.row_matches({header: "v"}, {header: "v"})

        assert comparison.matched
        assert f"{header}: MATCH" in comparison.describe()

    def test_missing_field_does_not_match_nil_text(self, matcher: DataMatcher) -> None:
        comparison = matcher.row_matches({"status": "nil"}, {"name": "A"})

        assert not comparison.matched
        assert "status: NOT FOUND - expected: 'nil' (type: str)" in (
            comparison.describe()
        )
        assert "status: MATCH" not in comparison.describe()

    def test_missing_field_matches_resolved_nil(self, matcher: DataMatcher) -> None:
        comparison = matcher.row_matches({"status": "{nil}"}, {"name": "A"})

        assert comparison.matched
        assert "status: NOT FOUND, MATCH (nil)" in comparison.describe()


class TestSequenceModes:
    """Test exact, at-least and none-of matching."""

    def test_exact_passes(self, matcher: DataMatcher) -> None:
        assert matcher.match_exact(NAMES, NAMES).passed

    def test_exact_length_mismatch(self, matcher: DataMatcher) -> None:
        result = matcher.match_exact(NAMES[:2], NAMES)

        assert not result.passed
        assert result.message == "length mismatch: expected 3, got 2"

    def test_exact_respects_order(self, matcher: DataMatcher) -> None:
        result = matcher.match_exact(list(reversed(NAMES)), NAMES)

        assert not result.passed
        assert result.message.startswith("row 0 does not match expected values:")
        assert result.trace

    def test_exact_rejects_non_sequence(self, matcher: DataMatcher) -> None:
        result = matcher.match_exact({"name": "A"}, NAMES, "{data}")

        assert result.message == "field {data} is not a slice"

    def test_at_least(self, matcher: DataMatcher) -> None:
        assert matcher.match_at_least(NAMES, [{"name": "B"}]).passed

        result = matcher.match_at_least(NAMES, [{"name": "Z"}])
        assert not result.passed
        assert "expected row not found" in result.message

    def test_headers_with_spaces_and_keywords(self, matcher: DataMatcher) -> None:
        actual = [{"first name": "Ann", "where": "home"}]
        rows = [{"first name": "Ann", "where": "home"}]

        assert matcher.match_exact(actual, rows).passed
        assert matcher.match_at_least(actual, rows).passed

    def test_nil_cell_against_absent_field(self, matcher: DataMatcher) -> None:
        rows = [{"status": "nil"}]

        assert not matcher.match_exact([{"name": "A"}], rows).passed
        assert not matcher.match_at_least([{"name": "A"}], rows).passed

    def test_none_of(self, matcher: DataMatcher) -> None:
        actual = [{"status": "open"}, {"status": "blocked"}]

        assert not matcher.match_none_of(actual, [{"status": "blocked"}]).passed
        assert matcher.match_none_of(actual[:1], [{"status": "blocked"}]).passed
        assert matcher.match_none_of(
            [{"status": "blocked"}], [{"status": "open"}]
        ).passed

    def test_success_line_printed(
        self, matcher: DataMatcher, console_buffer: io.StringIO
    ) -> None:
        matcher.match_at_least(NAMES, [{"name": "A"}])

        assert "✓ All expected rows found in slice" in console_buffer.getvalue()


class TestLengthStringsObject:
    """Test length, string list and object matching."""

    def test_length(self, matcher: DataMatcher, store: ValueStore) -> None:
        store.set("three", 3)

        assert matcher.match_length(NAMES, "3").passed
        assert matcher.match_length(NAMES, "{three}").passed
        assert not matcher.match_length(NAMES, "2").passed

    def test_invalid_length(self, matcher: DataMatcher) -> None:
        assert matcher.match_length(NAMES, "many").message == "invalid length: many"

    def test_strings(
        self, matcher: DataMatcher, console_buffer: io.StringIO
    ) -> None:
        assert matcher.match_strings(["red", "blue"], ["red", "blue"]).passed

        result = matcher.match_strings(["red", "blue"], ["red", "green"])
        assert result.message == "element 1 mismatch: expected green, got blue"
        assert "EXPECTED[1]: green" in console_buffer.getvalue()

    def test_strings_length(self, matcher: DataMatcher) -> None:
        result = matcher.match_strings(["red"], ["red", "blue"])

        assert result.message == "slice length mismatch: expected 2, got 1"

    def test_object(self, matcher: DataMatcher) -> None:
        service = Service(name="db", status="open", port=5432, public=False)

        assert matcher.match_object(
            service, {"name": "db", "port": "5432", "public": "false"}
        ).passed

    def test_object_missing_field(self, matcher: DataMatcher) -> None:
        result = matcher.match_object({"name": "db"}, {"owner": "me"})

        assert result.message == "field owner missing in actual object"

    def test_object_mismatch(self, matcher: DataMatcher) -> None:
        result = matcher.match_object({"name": "db"}, {"name": "web"})

        assert result.message == "field name mismatch: expected web, got db"

    def test_object_rejects_scalars(self, matcher: DataMatcher) -> None:
        result = matcher.match_object("text", {"name": "x"}, "{value}")

        assert result.message == "field {value} is not an object/map"


class TestExpectationTable:
    """Test conversion from cell grids."""

    def test_from_grid(self) -> None:
        table = ExpectationTable.from_grid([["name", "age"], ["A", "1"], ["B", "2"]])

        assert table.headers == ("name", "age")
        assert list(table) == [{"name": "A", "age": "1"}, {"name": "B", "age": "2"}]
        assert table.first_column() == ["A", "B"]

    def test_header_only(self) -> None:
        assert len(ExpectationTable.from_grid([["name"]])) == 0

    def test_empty_grid(self) -> None:
        with pytest.raises(StepDefinitionError):
            ExpectationTable.from_grid([])

    def test_ragged_row(self) -> None:
        with pytest.raises(StepDefinitionError, match="row 1 has 1 cells"):
            ExpectationTable.from_grid([["a", "b"], ["x"]])

    def test_single_row(self) -> None:
        table = ExpectationTable.from_grid([["a"], ["1"], ["2"]])

        with pytest.raises(StepDefinitionError, match="exactly one data row"):
            table.single_row()


class TestFormatting:
    """Test display helpers."""

    def test_stringify(self) -> None:
        assert stringify(None) == "nil"
        assert stringify(True) == "true"
        assert stringify(3.0) == "3"
        assert stringify(3.5) == "3.5"

    def test_format_value_for_comparison(self) -> None:
        assert format_value_for_comparison(None) == "null"
        assert format_value_for_comparison(5) == "5 (type: int)"
        assert format_value_for_comparison(ValueError("x")) == "x (type: ValueError)"
        assert format_value_for_comparison({"a": 1}) == '{\n  "a": 1\n}'


class TestMatchResult:
    """Test conversion of failures into exceptions."""

    def test_raise_for_failure(self) -> None:
        MatchResult.ok().raise_for_failure()

        with pytest.raises(MatchError) as raised:
            MatchResult.failed("bad", ["trace line"]).raise_for_failure()

        assert raised.value.trace == ["trace line"]
        assert isinstance(raised.value, AssertionError)
