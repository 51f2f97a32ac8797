"""Named value store backing one scenario's world."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from cfi_harness.core.world.locks import ReadWriteLock


class ValueStore:
    """Thread-safe mapping from names to arbitrary values.

    Task threads may write to the store (invocation counters do), so every
    access goes through a reader/writer lock.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        """Initialize the store, optionally seeded with scenario parameters."""
        self._values: dict[str, Any] = dict(initial or {})
        self._lock = ReadWriteLock()

    def set(self, name: str, value: Any) -> None:
        """Store ``value`` under ``name``, replacing any previous value."""
        with self._lock.write():
            self._values[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value stored under ``name`` or ``default``."""
        with self._lock.read():
            return self._values.get(name, default)

    def lookup(self, name: str) -> tuple[bool, Any]:
        """Return ``(present, value)``; distinguishes a stored None from absence."""
        with self._lock.read():
            if name in self._values:
                return True, self._values[name]
            return False, None

    def contains(self, name: str) -> bool:
        """Whether a value is stored under ``name``."""
        with self._lock.read():
            return name in self._values

    def delete(self, name: str) -> None:
        """Remove ``name`` if present."""
        with self._lock.write():
            self._values.pop(name, None)

    def update(
        self, name: str, fn: Callable[[Any], Any], default: Any = None
    ) -> Any:
        """Atomically replace the value under ``name`` with ``fn(current)``.

        ``fn`` runs while the write lock is held and must not touch the store.

        Returns:
            The new value
        """
        with self._lock.write():
            new_value = fn(self._values.get(name, default))
            self._values[name] = new_value
            return new_value

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of every stored value."""
        with self._lock.read():
            return dict(self._values)

    def names(self) -> list[str]:
        """Names currently stored, sorted."""
        with self._lock.read():
            return sorted(self._values)

    def clear(self) -> None:
        """Drop every stored value."""
        with self._lock.write():
            self._values.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
