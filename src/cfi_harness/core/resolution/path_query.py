"""Structured-path (JSONPath) queries over plain nested data."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse
from jsonpath_ng.jsonpath import JSONPath

logger = logging.getLogger(__name__)


@lru_cache(maxsize=512)
def compile_path(path: str) -> JSONPath | None:
    """Compile a dotted field path such as ``profile.email`` or ``users[0]``.

    Args:
        path: Path relative to the document root, without the ``$.`` prefix

    Returns:
        Compiled expression, or None if the path cannot be parsed
    """
    expression = path if path.startswith("$") else f"$.{path}"
    try:
        return parse(expression)
    except (JSONPathError, ValueError, TypeError) as e:
        logger.debug("Unparsable path %r: %s", path, e)
        return None


def find_all(document: Any, path: str) -> list[Any]:
    """Return every value the path selects in ``document``."""
    compiled = compile_path(path)
    if compiled is None:
        return []
    try:
        return [match.value for match in compiled.find(document)]
    except (JSONPathError, TypeError, AttributeError, KeyError, IndexError) as e:
        logger.debug("Path %r failed against document: %s", path, e)
        return []


def find_first(document: Any, path: str) -> tuple[bool, Any]:
    """Return ``(found, value)`` for the first match of ``path``."""
    matches = find_all(document, path)
    if not matches:
        return False, None
    return True, matches[0]
