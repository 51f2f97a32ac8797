"""String forms used when comparing and displaying values."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from cfi_harness.core.resolution.normalize import is_structured, to_plain


def stringify(value: Any) -> str:
    """Render a value the way step text would spell it.

    Booleans are lower-case, integral floats drop their fractional part and
    ``None`` becomes ``nil`` so cell text such as ``3`` or ``true`` compares
    equal to the live value.
    """
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return str(value)


def format_value_for_comparison(value: Any) -> str:
    """Format a value for EXPECTED/ACTUAL output.

    Structured values are shown as indented JSON, everything else with its
    type name.
    """
    if value is None:
        return "null"

    if isinstance(value, BaseException):
        return f"{value} (type: {type(value).__name__})"

    if is_structured(value) or isinstance(value, Mapping | list | tuple):
        try:
            return json.dumps(to_plain(value), indent=2, default=repr)
        except (TypeError, ValueError):
            return repr(value)

    return f"{stringify(value)} (type: {type(value).__name__})"
