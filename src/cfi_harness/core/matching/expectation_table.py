"""Expectation tables built from step data tables."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from cfi_harness.core.errors import StepDefinitionError


@dataclass(frozen=True)
class ExpectationTable:
    """Header row plus data rows keyed by header cell."""

    headers: tuple[str, ...]
    rows: tuple[dict[str, str], ...]

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[str]]) -> ExpectationTable:
        """Build a table from a cell grid whose first row names the fields.

        Raises:
            StepDefinitionError: The grid is empty or a row is ragged
        """
        if not grid:
            raise StepDefinitionError("expectation table needs a header row")

        headers = tuple(str(cell) for cell in grid[0])
        rows = []
        for index, raw_row in enumerate(grid[1:], start=1):
            if len(raw_row) != len(headers):
                raise StepDefinitionError(
                    f"table row {index} has {len(raw_row)} cells, "
                    f"header has {len(headers)}"
                )
            rows.append(
                {header: str(cell) for header, cell in zip(headers, raw_row)}
            )
        return cls(headers=headers, rows=tuple(rows))

    def single_row(self) -> dict[str, str]:
        """The only data row, for object expectations.

        Raises:
            StepDefinitionError: The table does not have exactly one data row
        """
        if len(self.rows) != 1:
            raise StepDefinitionError("expected exactly one data row in table")
        return self.rows[0]

    def first_column(self) -> list[str]:
        """Values of the first column, header excluded."""
        if not self.headers:
            return []
        header = self.headers[0]
        return [row[header] for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, str]]:
        return iter(self.rows)
