"""Function registry.

Maps template function names to their FunctionDefinition. Each build
variant constructs its own registry; nothing is shared between them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from tmpldeps.functions.definition import FunctionDefinition

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """Dict-like store of function definitions.

    Supports:
        - registry.register(definition)
        - definition = registry.get('getv')
        - 'getv' in registry
        - registry['getv']

    Mutations replace the underlying dict (copy-on-write), so readers
    iterating a registry during registration never see a half-built map.
    Registration is expected at start-up; extraction only reads.
    """

    __slots__ = ("_functions",)

    def __init__(self, definitions: Iterable[FunctionDefinition] = ()):
        self._functions: dict[str, FunctionDefinition] = {}
        self.update(definitions)

    def register(self, definition: FunctionDefinition) -> None:
        """Store ``definition`` under its name. Last write wins.

        Raises:
            ValueError: The definition has an empty name
        """
        if not definition.name:
            raise ValueError("Function name must be non-empty")
        if definition.name in self._functions:
            logger.debug(f"Overriding template function {definition.name!r}")
        new = self._functions.copy()
        new[definition.name] = definition
        self._functions = new

    def update(self, definitions: Iterable[FunctionDefinition]) -> None:
        """Register each definition in order; later names override earlier ones."""
        for definition in definitions:
            self.register(definition)

    def get(self, name: str) -> FunctionDefinition | None:
        return self._functions.get(name)

    def has(self, name: str) -> bool:
        return name in self._functions

    def __getitem__(self, name: str) -> FunctionDefinition:
        return self._functions[name]

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __repr__(self) -> str:
        return f"FunctionRegistry({sorted(self._functions)!r})"

    def names(self) -> frozenset[str]:
        """All registered names (diagnostics and tests, not extraction)."""
        return frozenset(self._functions)

    def definitions(self) -> tuple[FunctionDefinition, ...]:
        """Registered definitions sorted by name."""
        return tuple(self._functions[name] for name in sorted(self._functions))

    def render_functions(self, values: Mapping[str, Any]) -> dict[str, Callable[..., Any]]:
        """Build the name -> callable map bound to ``values`` for rendering."""
        return {name: definition.render(values) for name, definition in self._functions.items()}

    def copy(self) -> FunctionRegistry:
        """Independent registry with the same definitions."""
        clone = FunctionRegistry()
        clone._functions = self._functions.copy()
        return clone
