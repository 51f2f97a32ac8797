"""Conversion of live values into plain nested data.

Path queries and row comparisons work on one uniform representation:
mappings become ``dict``, sequences become ``list`` and objects with named
fields (dataclasses, pydantic models, plain instances) become ``dict`` of
their public fields. Scalars, exceptions and callables are leaves.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

_SCALARS = (str, bytes, bytearray, int, float, complex, bool)


def is_leaf(value: Any) -> bool:
    """True for values that are never descended into."""
    return (
        value is None
        or isinstance(value, _SCALARS)
        or isinstance(value, BaseException)
        or isinstance(value, type)
        or callable(value)
    )


def is_structured(value: Any) -> bool:
    """True for values whose fields can be addressed by name."""
    if isinstance(value, Mapping):
        return True
    if is_leaf(value) or isinstance(value, list | tuple | set | frozenset):
        return False
    if isinstance(value, BaseModel) or dataclasses.is_dataclass(value):
        return True
    return hasattr(value, "__dict__")


def is_sequence(value: Any) -> bool:
    """True for list-like values; strings and mappings are not sequences."""
    return isinstance(value, list | tuple)


def to_plain(value: Any) -> Any:
    """Return ``value`` as nested dicts and lists."""
    return _to_plain(value, set())


def _to_plain(value: Any, seen: set[int]) -> Any:
    if is_leaf(value):
        return value

    marker = id(value)
    if marker in seen:
        return value
    seen = seen | {marker}

    if isinstance(value, Mapping):
        return {key: _to_plain(item, seen) for key, item in value.items()}

    if isinstance(value, list | tuple | set | frozenset):
        return [_to_plain(item, seen) for item in value]

    if isinstance(value, BaseModel):
        return {
            name: _to_plain(getattr(value, name), seen)
            for name in type(value).model_fields
        }

    if dataclasses.is_dataclass(value):
        return {
            f.name: _to_plain(getattr(value, f.name), seen)
            for f in dataclasses.fields(value)
        }

    if hasattr(value, "__dict__"):
        return {
            name: _to_plain(item, seen)
            for name, item in vars(value).items()
            if not name.startswith("_")
        }

    return value
