"""Per-scenario value storage.

The ``World`` facade lives in ``cfi_harness.core.world.world``; it is not
re-exported here because the resolver and matcher import the store.
"""

from cfi_harness.core.world.locks import ReadWriteLock
from cfi_harness.core.world.value_store import ValueStore

__all__ = ["ReadWriteLock", "ValueStore"]
