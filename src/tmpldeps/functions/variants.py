"""Build variants: which function vocabulary a deployment recognises.

Each variant is a plain registration list selected at start-up. The
extractor and the renderer of one variant always agree on the names.

    NONE      no extra functions; every call is searched generically
    ACCESSOR  getv, exists, get, json, jsonArray
    UTILITY   string/path/arithmetic helpers plus json and jsonArray
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from tmpldeps.functions.accessors import ACCESSOR_FUNCTIONS, ACCESSOR_NAMES
from tmpldeps.functions.definition import FunctionDefinition
from tmpldeps.functions.matcher import (
    FixedFunctionMatcher,
    FunctionMatcher,
    RegistryFunctionMatcher,
)
from tmpldeps.functions.registry import FunctionRegistry
from tmpldeps.functions.utilities import UTILITY_FUNCTIONS

logger = logging.getLogger(__name__)

VARIANT_ENV_VAR = "TMPLDEPS_VARIANT"


class BuildVariant(Enum):
    """Named function vocabulary."""

    NONE = "none"
    ACCESSOR = "accessor"
    UTILITY = "utility"

    @classmethod
    def from_name(cls, name: str) -> BuildVariant:
        """Look up a variant by value or alias (case-insensitive).

        Raises:
            ValueError: Unknown variant name
        """
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(v.value for v in cls)
            raise ValueError(f"Unknown build variant {name!r} (choose from {choices})") from None


_ALIASES = {
    "official": "none",
    "plain": "none",
    "custom": "accessor",
    "confd": "utility",
}

DEFAULT_VARIANT = BuildVariant.ACCESSOR

_VOCABULARIES: dict[BuildVariant, tuple[FunctionDefinition, ...]] = {
    BuildVariant.NONE: (),
    BuildVariant.ACCESSOR: ACCESSOR_FUNCTIONS,
    BuildVariant.UTILITY: UTILITY_FUNCTIONS,
}


def create_registry(variant: BuildVariant) -> FunctionRegistry:
    """Fresh registry populated with the variant's vocabulary."""
    return FunctionRegistry(_VOCABULARIES[variant])


def create_matcher(
    variant: BuildVariant, registry: FunctionRegistry | None = None
) -> FunctionMatcher:
    """Matcher paired with ``variant``.

    NONE and ACCESSOR use fixed vocabularies. UTILITY follows ``registry``
    (a fresh one if omitted), so functions registered later are recognised.
    """
    if variant is BuildVariant.NONE:
        return FixedFunctionMatcher()
    if variant is BuildVariant.ACCESSOR:
        return FixedFunctionMatcher(ACCESSOR_NAMES)
    return RegistryFunctionMatcher(registry if registry is not None else create_registry(variant))


def build_render_functions(
    variant: BuildVariant, values: Mapping[str, Any]
) -> dict[str, Callable[..., Any]]:
    """Render-time implementations of the variant's functions bound to ``values``."""
    return create_registry(variant).render_functions(values)


def variant_from_env(
    environ: Mapping[str, str] | None = None,
    default: BuildVariant = DEFAULT_VARIANT,
) -> BuildVariant:
    """Variant named by ``TMPLDEPS_VARIANT``, or ``default`` when unset."""
    environ = os.environ if environ is None else environ
    name = environ.get(VARIANT_ENV_VAR, "").strip()
    if not name:
        return default
    variant = BuildVariant.from_name(name)
    logger.debug(f"Build variant {variant.value!r} selected from {VARIANT_ENV_VAR}")
    return variant
