"""Function definitions and their extraction rules.

A FunctionDefinition ties a template function name to two things that must
agree with each other: the implementation used when rendering, and the rule
the analyzer uses to decide which of the call's arguments name an input.

Extraction Rules:
    ====================  =========  =============  ==================
    rule                  key arg    default arg    literal key arg
    ====================  =========  =============  ==================
    KEY_WITH_DEFAULT      1          2              is a key
    KEY_ONLY              1          -              is a key
    FIRST_ARG             1          -              is data
    NO_VARIABLES          -          -              -
    ====================  =========  =============  ==================

Argument positions count the function name itself as argument 0, so in
``{{getv "port" "8080"}}`` the key is argument 1 and the default argument 2.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tmpldeps.analysis.extractor import VariableExtractor
    from tmpldeps.analysis.results import VariableInfo
    from tmpldeps.nodes import Expr

    # Custom extraction hooks: (call args, current depth, walker) -> results
    NamesExtractor = Callable[[Sequence[Expr], int, VariableExtractor], list[str]]
    InfoExtractor = Callable[[Sequence[Expr], int, VariableExtractor], list[VariableInfo]]

# Builds the callable used at render time from the caller's value environment.
RenderFactory = Callable[[Mapping[str, Any]], Callable[..., Any]]


@dataclass(frozen=True, slots=True)
class ExtractionRule:
    """Where a recognised function keeps its input key and default.

    Attributes:
        key_index: Call argument holding the key, or None if the function
            never names an input
        default_index: Call argument holding a literal default, or None
        literal_is_key: Whether a string literal at ``key_index`` is the
            name of an input (accessors) or plain data (transforms)
    """

    key_index: int | None
    default_index: int | None = None
    literal_is_key: bool = True

    @property
    def contributes(self) -> bool:
        """True if calls under this rule can yield dependencies."""
        return self.key_index is not None


# Accessor with optional fallback: getv "key" "default"
KEY_WITH_DEFAULT = ExtractionRule(key_index=1, default_index=2, literal_is_key=True)

# Accessor without fallback: exists "key", get "key", json "key"
KEY_ONLY = ExtractionRule(key_index=1, default_index=None, literal_is_key=True)

# Transform over a value: toUpper .name (a literal argument is data)
FIRST_ARG = ExtractionRule(key_index=1, default_index=None, literal_is_key=False)

# Pure utility: seq 1 5, join .list ","
NO_VARIABLES = ExtractionRule(key_index=None, default_index=None, literal_is_key=False)


@dataclass(frozen=True, slots=True)
class FunctionDefinition:
    """One recognised template function.

    Immutable once registered. ``render`` is only consulted when rendering;
    extraction reads ``rule`` or, when given, the explicit extractor hooks.

    Attributes:
        name: Name used in templates
        description: One-line summary for listings
        render: Factory binding the implementation to a value environment
        rule: Argument positions for key and default
        extractor: Optional names-only hook overriding ``rule``
        extractor_with_defaults: Optional names-with-defaults hook;
            required whenever ``extractor`` is given

    Example:
        >>> FunctionDefinition(
        ...     name="getenv",
        ...     description="Read an environment value",
        ...     render=lambda values: values.get,
        ...     rule=KEY_WITH_DEFAULT,
        ... )
    """

    name: str
    description: str
    render: RenderFactory
    rule: ExtractionRule = KEY_ONLY
    extractor: NamesExtractor | None = None
    extractor_with_defaults: InfoExtractor | None = None

    def __post_init__(self) -> None:
        if (self.extractor is None) != (self.extractor_with_defaults is None):
            raise ValueError(
                f"Function {self.name!r} must define both extraction hooks or neither"
            )

    @property
    def has_custom_extractor(self) -> bool:
        return self.extractor is not None
