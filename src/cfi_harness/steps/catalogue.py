"""Step bindings: text patterns mapped to handlers acting on a world."""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cfi_harness.core.errors import StepDefinitionError

if TYPE_CHECKING:
    from cfi_harness.core.world.world import World

logger = logging.getLogger(__name__)

STEP_ATTRIBUTE = "__cfi_step__"

Table = Sequence[Sequence[str]]


@dataclass(frozen=True)
class StepSpec:
    """Pattern metadata attached to a handler by ``step_pattern``."""

    pattern: str
    table: bool = False


def step_pattern(pattern: str, table: bool = False) -> Callable[[Any], Any]:
    """Mark a vocabulary method as the handler for ``pattern``.

    ``pattern`` is a regular expression matched against the whole step text.
    Its named groups are passed to the handler as keyword arguments; table
    steps also receive the cell grid as ``table``.
    """

    def decorator(fn: Any) -> Any:
        setattr(fn, STEP_ATTRIBUTE, StepSpec(pattern=pattern, table=table))
        return fn

    return decorator


@dataclass(frozen=True)
class StepBinding:
    """One pattern and the handler it dispatches to."""

    pattern: str
    handler: Callable[..., Any]
    table: bool = False
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern))

    @property
    def name(self) -> str:
        return getattr(self.handler, "__name__", repr(self.handler))

    @property
    def group_names(self) -> list[str]:
        """Named groups in pattern order."""
        ordered = sorted(self.regex.groupindex.items(), key=lambda item: item[1])
        return [name for name, _ in ordered]

    @property
    def summary(self) -> str:
        """First line of the handler docstring."""
        doc = inspect.getdoc(self.handler) or ""
        return doc.splitlines()[0] if doc else ""

    def match(self, text: str) -> dict[str, str] | None:
        """Captured groups if ``text`` is this step, else None."""
        found = self.regex.fullmatch(text)
        if found is None:
            return None
        return found.groupdict()

    def invoke(
        self, world: World, groups: dict[str, str], table: Table | None = None
    ) -> Any:
        if self.table:
            if table is None:
                raise StepDefinitionError(
                    f"step {self.name} requires a data table"
                )
            return self.handler(world, table=table, **groups)
        return self.handler(world, **groups)


class StepVocabulary:
    """Base class for a set of step handlers.

    Subclasses decorate methods with ``step_pattern``; ``bindings()`` returns
    them in definition order, base class steps first.
    """

    def bindings(self) -> list[StepBinding]:
        seen: dict[str, StepBinding] = {}
        for cls in reversed(type(self).__mro__):
            for attribute_name, attribute in vars(cls).items():
                step_spec = getattr(attribute, STEP_ATTRIBUTE, None)
                if not isinstance(step_spec, StepSpec):
                    continue
                seen.pop(attribute_name, None)
                seen[attribute_name] = StepBinding(
                    pattern=step_spec.pattern,
                    handler=getattr(self, attribute_name),
                    table=step_spec.table,
                )
        return list(seen.values())


class StepCatalogue:
    """Ordered collection of step bindings from one or more vocabularies."""

    def __init__(self, vocabularies: Iterable[StepVocabulary] = ()) -> None:
        """Initialize the catalogue with the bindings of ``vocabularies``."""
        self._bindings: list[StepBinding] = []
        for vocabulary in vocabularies:
            self.add_vocabulary(vocabulary)

    def add(self, binding: StepBinding) -> None:
        """Register a binding.

        Raises:
            StepDefinitionError: The same pattern is already registered
        """
        if any(existing.pattern == binding.pattern for existing in self._bindings):
            raise StepDefinitionError(f"duplicate step pattern: {binding.pattern}")
        self._bindings.append(binding)

    def add_vocabulary(self, vocabulary: StepVocabulary) -> None:
        for binding in vocabulary.bindings():
            self.add(binding)

    def match(self, text: str) -> tuple[StepBinding, dict[str, str]] | None:
        """Find the binding for ``text`` and its captured groups."""
        for binding in self._bindings:
            groups = binding.match(text)
            if groups is not None:
                return binding, groups
        return None

    def dispatch(self, world: World, text: str, table: Table | None = None) -> Any:
        """Run the step ``text`` against ``world``.

        Raises:
            StepDefinitionError: No binding matches ``text``
        """
        found = self.match(text)
        if found is None:
            raise StepDefinitionError(f"undefined step: {text}")
        binding, groups = found
        logger.debug("Dispatching %r to %s", text, binding.name)
        return binding.invoke(world, groups, table)

    def run(self, world: World, steps: Iterable[str | tuple[str, Table]]) -> None:
        """Dispatch a sequence of steps; a step may carry its table as a pair."""
        for entry in steps:
            if isinstance(entry, tuple):
                text, table = entry
                self.dispatch(world, text, table)
            else:
                self.dispatch(world, entry)

    def describe(self) -> list[dict[str, Any]]:
        """Plain description of every binding, for listings."""
        return [
            {
                "pattern": binding.pattern,
                "handler": binding.name,
                "table": binding.table,
                "summary": binding.summary,
            }
            for binding in self._bindings
        ]

    def __iter__(self) -> Iterator[StepBinding]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
