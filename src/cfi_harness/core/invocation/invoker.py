"""Dynamic invocation of stored functions and object methods."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from cfi_harness.core.diagnostics import DiagnosticPrinter
from cfi_harness.core.errors import InvocationError

logger = logging.getLogger(__name__)

MAX_ARGUMENTS = 3

# Returned as InvocationError values; KeyboardInterrupt, GeneratorExit and
# pytest outcome exceptions still propagate.
CONVERTED_FAULTS = (Exception, SystemExit, asyncio.CancelledError)


def find_method(obj: Any, method_name: str) -> Callable[..., Any] | None:
    """Locate a callable named ``method_name`` on ``obj``.

    Mappings may hold callables under a key; any other object is searched
    by attribute.
    """
    if isinstance(obj, Mapping):
        candidate = obj.get(method_name)
        if callable(candidate):
            return candidate

    try:
        attribute = getattr(obj, method_name, None)
    except Exception as e:
        logger.debug("Looking up %s failed: %s", method_name, e)
        return None
    return attribute if callable(attribute) else None


def check_arity(
    fn: Callable[..., Any], args: Sequence[Any], label: str
) -> InvocationError | None:
    """Return an error if ``fn`` cannot accept ``args`` positionally."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures are tried as-is
        return None

    try:
        signature.bind(*args)
    except TypeError:
        count = len(args)
        noun = "parameter" if count == 1 else "parameters"
        return InvocationError(f"{label} cannot be called with {count} {noun}")
    return None


def first_value(result: Any) -> Any:
    """Reduce a multi-value (tuple) return to its first element."""
    if isinstance(result, tuple):
        return result[0] if result else None
    return result


class Invoker:
    """Calls functions and methods chosen by name in step text.

    Nothing raised by the callee escapes: lookup failures, arity mismatches
    and runtime faults are returned as ``InvocationError`` values so the
    calling step can store them as its result.
    """

    def __init__(self, printer: DiagnosticPrinter | None = None) -> None:
        """Initialize the invoker with the printer used for fault output."""
        self._printer = printer or DiagnosticPrinter(enabled=False)

    def call_function(
        self, target: Any, args: Sequence[Any] = (), label: str = "function"
    ) -> Any:
        """Call ``target`` with ``args``.

        Args:
            target: Resolved callable (or whatever the reference resolved to)
            args: Already-resolved positional arguments, at most three
            label: Name used in error messages

        Returns:
            The call's first return value, or an ``InvocationError``
        """
        if target is None:
            return InvocationError(f"function {label} not found")
        if not callable(target):
            return InvocationError(f"{label} is not a callable function")
        return self._invoke(target, args, label)

    def call_method(
        self,
        obj: Any,
        method_name: str,
        args: Sequence[Any] = (),
        object_label: str = "object",
    ) -> Any:
        """Call ``obj.<method_name>`` with ``args``.

        Returns:
            The call's first return value, or an ``InvocationError``
        """
        if obj is None:
            return InvocationError(f"object {object_label} not found")

        method = find_method(obj, method_name)
        if method is None:
            return InvocationError(f"method {method_name} not found")

        return self._invoke(method, args, f"{object_label}.{method_name}")

    def _invoke(
        self, fn: Callable[..., Any], args: Sequence[Any], label: str
    ) -> Any:
        if len(args) > MAX_ARGUMENTS:
            return InvocationError(
                f"{label} called with {len(args)} parameters, "
                f"at most {MAX_ARGUMENTS} are supported"
            )

        arity_error = check_arity(fn, args, label)
        if arity_error is not None:
            logger.warning("%s", arity_error)
            return arity_error

        logger.debug("Calling %s with %d argument(s)", label, len(args))
        try:
            result = fn(*args)
            if inspect.iscoroutine(result):
                result = asyncio.run(result)
        except CONVERTED_FAULTS as e:
            rendered = ", ".join(repr(arg) for arg in args)
            message = f"Error calling {label}({rendered}): {e}"
            logger.warning(message)
            self._printer.error(message)
            error = InvocationError(message)
            error.__cause__ = e
            return error

        return first_value(result)
