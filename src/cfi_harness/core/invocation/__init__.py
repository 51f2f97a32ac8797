"""Dynamic function and method invocation."""

from cfi_harness.core.invocation.invoker import (
    MAX_ARGUMENTS,
    Invoker,
    check_arity,
    find_method,
    first_value,
)

__all__ = ["MAX_ARGUMENTS", "Invoker", "check_arity", "find_method", "first_value"]
