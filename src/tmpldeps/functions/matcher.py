"""Function matchers.

A matcher answers one question for the analyzer: is this identifier a
recognised function whose arguments should be read with its extraction
rule? Matchers are pure predicates and never raise, whatever the name.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from tmpldeps.functions.registry import FunctionRegistry


@runtime_checkable
class FunctionMatcher(Protocol):
    """Predicate over function names."""

    def match_custom_func(self, name: str) -> bool: ...

    def supported_functions(self) -> frozenset[str]: ...


class FixedFunctionMatcher:
    """Matches a fixed vocabulary.

    An empty vocabulary matches nothing, which is how the plain build
    treats every call as generic.
    """

    __slots__ = ("_names",)

    def __init__(self, names: Iterable[str] = ()):
        self._names = frozenset(names)

    def match_custom_func(self, name: str) -> bool:
        return name in self._names

    def supported_functions(self) -> frozenset[str]:
        return self._names

    def __repr__(self) -> str:
        return f"FixedFunctionMatcher({sorted(self._names)!r})"


class RegistryFunctionMatcher:
    """Matches whatever is registered, looked up on every call.

    Registering a function later makes it recognised immediately.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: FunctionRegistry):
        self._registry = registry

    def match_custom_func(self, name: str) -> bool:
        return name in self._registry

    def supported_functions(self) -> frozenset[str]:
        return self._registry.names()

    def __repr__(self) -> str:
        return f"RegistryFunctionMatcher({self._registry!r})"


class CompositeFunctionMatcher:
    """Matches if any of its sub-matchers matches.

    Example:
        >>> matcher = CompositeFunctionMatcher(
        ...     FixedFunctionMatcher({"getv"}),
        ...     RegistryFunctionMatcher(registry),
        ... )
    """

    __slots__ = ("_matchers",)

    def __init__(self, *matchers: FunctionMatcher):
        self._matchers = matchers

    def match_custom_func(self, name: str) -> bool:
        return any(matcher.match_custom_func(name) for matcher in self._matchers)

    def supported_functions(self) -> frozenset[str]:
        names: frozenset[str] = frozenset()
        for matcher in self._matchers:
            names |= matcher.supported_functions()
        return names

    def __repr__(self) -> str:
        return f"CompositeFunctionMatcher{self._matchers!r}"
