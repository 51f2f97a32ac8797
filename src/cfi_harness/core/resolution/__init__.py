"""Reference resolution and structured-path queries."""

from cfi_harness.core.resolution.normalize import (
    is_sequence,
    is_structured,
    to_plain,
)
from cfi_harness.core.resolution.path_query import find_all, find_first
from cfi_harness.core.resolution.reference_resolver import (
    ReferenceResolver,
    is_symbolic,
    parse_number,
    read_field,
)

__all__ = [
    "ReferenceResolver",
    "find_all",
    "find_first",
    "is_sequence",
    "is_structured",
    "is_symbolic",
    "parse_number",
    "read_field",
    "to_plain",
]
