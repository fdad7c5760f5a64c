"""Template function vocabularies.

Definitions, registries and matchers for the functions a template may call
beyond the builtins, grouped into build variants.

Example:
    >>> from tmpldeps.functions import BuildVariant, create_registry
    >>> registry = create_registry(BuildVariant.ACCESSOR)
    >>> sorted(registry.names())
    ['exists', 'get', 'getv', 'json', 'jsonArray']
"""

from tmpldeps.functions.accessors import ACCESSOR_FUNCTIONS, ACCESSOR_NAMES
from tmpldeps.functions.definition import (
    FIRST_ARG,
    KEY_ONLY,
    KEY_WITH_DEFAULT,
    NO_VARIABLES,
    ExtractionRule,
    FunctionDefinition,
)
from tmpldeps.functions.matcher import (
    CompositeFunctionMatcher,
    FixedFunctionMatcher,
    FunctionMatcher,
    RegistryFunctionMatcher,
)
from tmpldeps.functions.registry import FunctionRegistry
from tmpldeps.functions.utilities import UTILITY_FUNCTIONS
from tmpldeps.functions.variants import (
    DEFAULT_VARIANT,
    BuildVariant,
    build_render_functions,
    create_matcher,
    create_registry,
    variant_from_env,
)

__all__ = [
    "ACCESSOR_FUNCTIONS",
    "ACCESSOR_NAMES",
    "DEFAULT_VARIANT",
    "FIRST_ARG",
    "KEY_ONLY",
    "KEY_WITH_DEFAULT",
    "NO_VARIABLES",
    "UTILITY_FUNCTIONS",
    "BuildVariant",
    "CompositeFunctionMatcher",
    "ExtractionRule",
    "FixedFunctionMatcher",
    "FunctionDefinition",
    "FunctionMatcher",
    "FunctionRegistry",
    "RegistryFunctionMatcher",
    "build_render_functions",
    "create_matcher",
    "create_registry",
    "variant_from_env",
]
