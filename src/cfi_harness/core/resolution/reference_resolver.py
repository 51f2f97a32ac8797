"""Resolution of symbolic step tokens into live values."""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Mapping
from typing import Any

from cfi_harness.core.resolution.normalize import is_structured, to_plain
from cfi_harness.core.resolution.path_query import find_first
from cfi_harness.core.world.value_store import ValueStore

logger = logging.getLogger(__name__)

SYMBOL_OPEN = "{"
SYMBOL_CLOSE = "}"

_INTEGER = re.compile(r"[+-]?\d+")


def is_symbolic(token: Any) -> bool:
    """Whether ``token`` is wrapped in the reference delimiters."""
    return (
        isinstance(token, str)
        and len(token) >= 2
        and token.startswith(SYMBOL_OPEN)
        and token.endswith(SYMBOL_CLOSE)
    )


def parse_number(text: str) -> int | float | None:
    """Parse a numeric literal; integers stay ``int``.

    Returns:
        The number, or None if ``text`` is not a numeric literal
    """
    if not text or text != text.strip() or "_" in text:
        return None
    if _INTEGER.fullmatch(text):
        return int(text)
    try:
        return float(text)
    except ValueError:
        return None


def read_field(obj: Any, field_name: str) -> tuple[bool, Any]:
    """Read ``field_name`` from a structured value.

    Tries the name as written, then with its first letter capitalised, then
    a zero-argument getter (``GetName`` or ``get_name``).

    Returns:
        ``(found, value)``
    """
    if not field_name:
        return False, None

    capitalized = field_name[:1].upper() + field_name[1:]
    for name in dict.fromkeys((field_name, capitalized)):
        found, value = _read_attribute(obj, name)
        if found:
            return True, value

    for getter_name in (f"Get{capitalized}", f"get_{field_name}"):
        getter = getattr(obj, getter_name, None)
        if getter is None or not callable(getter):
            continue
        try:
            result = getter()
        except Exception as e:
            logger.debug("Getter %s failed: %s", getter_name, e)
            continue
        if isinstance(result, tuple):
            result = result[0] if result else None
        return True, result

    return False, None


def _read_attribute(obj: Any, name: str) -> tuple[bool, Any]:
    if isinstance(obj, Mapping):
        if name in obj:
            return True, obj[name]
        return False, None

    try:
        value = getattr(obj, name)
    except AttributeError:
        return False, None
    except Exception as e:
        logger.debug("Reading attribute %s failed: %s", name, e)
        return False, None

    # Methods are invoked through the getter rules, not read as fields
    if inspect.ismethod(value):
        return False, None
    return True, value


class ReferenceResolver:
    """Turns step tokens such as ``{user.name}`` into values from a store.

    Resolution order for a symbolic token ``{inner}``:

    1. ``{}``/``{nil}`` is None, ``{true}``/``{false}`` are booleans
    2. numeric literals
    3. a value stored under ``inner``
    4. ``object.field`` access on a stored structured value
    5. a JSONPath query over the whole store
    6. None

    Tokens without delimiters are literals and come back unchanged.
    """

    def __init__(self, store: ValueStore) -> None:
        """Initialize the resolver over ``store``."""
        self._store = store

    def resolve(self, token: Any) -> Any:
        """Resolve ``token``; a miss yields None rather than an error."""
        if not is_symbolic(token):
            return token
        return self.resolve_inner(token[1:-1])

    def resolve_inner(self, inner: str) -> Any:
        """Resolve the text between the delimiters."""
        if inner in ("", "nil"):
            return None
        if inner == "true":
            return True
        if inner == "false":
            return False

        number = parse_number(inner)
        if number is not None:
            return number

        present, value = self._store.lookup(inner)
        if present:
            return value

        if "." in inner:
            found, value = self._resolve_dotted(inner)
            if found:
                return value

        found, value = find_first(to_plain(self._store.snapshot()), inner)
        if found:
            return value

        logger.debug("Unresolved reference {%s}", inner)
        return None

    def _resolve_dotted(self, inner: str) -> tuple[bool, Any]:
        object_name, field_name = inner.split(".", 1)
        present, obj = self._store.lookup(object_name)
        if not present or not is_structured(obj):
            return False, None
        return read_field(obj, field_name)
