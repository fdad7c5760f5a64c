"""Environment: the entry point tying parser, extractor and renderer together.

An Environment owns one FunctionRegistry (populated from its build
variant), the matching FunctionMatcher and a VariableExtractor over both.
Separate environments never share registry state.

Example:
    >>> env = Environment(variant=BuildVariant.UTILITY)
    >>> env.extract_names('{{.a}}{{getv "b" "x"}}{{toUpper .c}}')
    ['a', 'b', 'c']
    >>> env.extract_with_defaults('{{getv "b" "x"}}')
    [VariableInfo(name='b', default_value='x')]

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tmpldeps.analysis.extractor import VariableExtractor
from tmpldeps.analysis.results import VariableInfo
from tmpldeps.config import DEFAULT_CONFIG, ExtractionConfig
from tmpldeps.environment.exceptions import TemplateSyntaxError
from tmpldeps.functions.definition import FunctionDefinition
from tmpldeps.functions.matcher import FunctionMatcher
from tmpldeps.functions.registry import FunctionRegistry
from tmpldeps.functions.variants import BuildVariant, create_matcher, create_registry
from tmpldeps.nodes import Template as TemplateNode
from tmpldeps.parser import parse as parse_source
from tmpldeps.template.core import Template
from tmpldeps.utils.constants import BUILTIN_FUNCTIONS

logger = logging.getLogger(__name__)


class Environment:
    """Per-configuration home for parsing, extraction and rendering.

    Args:
        config: Settings; defaults to DEFAULT_CONFIG
        variant: Overrides ``config.variant`` (enum or name such as "utility")
        registry: Use this registry instead of the variant's fresh one
        matcher: Use this matcher instead of the variant's default

    Thread-Safety:
        Parsing, extraction and rendering only read environment state.
        register_function() swaps the registry's dict (copy-on-write), so
        concurrent readers see either the old or the new vocabulary.
    """

    __slots__ = (
        "__weakref__",
        "_config",
        "_extractor",
        "_known_functions",
        "_matcher",
        "_registry",
    )

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        *,
        variant: BuildVariant | str | None = None,
        registry: FunctionRegistry | None = None,
        matcher: FunctionMatcher | None = None,
    ) -> None:
        config = config if config is not None else DEFAULT_CONFIG
        if variant is not None:
            if isinstance(variant, str):
                variant = BuildVariant.from_name(variant)
            config = config.with_variant(variant)
        self._config = config
        self._registry = registry if registry is not None else create_registry(config.variant)
        self._matcher = (
            matcher if matcher is not None else create_matcher(config.variant, self._registry)
        )
        self._extractor = VariableExtractor(
            self._registry, self._matcher, max_depth=config.max_depth
        )
        self._known_functions: frozenset[str] | None = None

    # ─────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────

    @property
    def config(self) -> ExtractionConfig:
        return self._config

    @property
    def variant(self) -> BuildVariant:
        return self._config.variant

    @property
    def registry(self) -> FunctionRegistry:
        return self._registry

    @property
    def matcher(self) -> FunctionMatcher:
        return self._matcher

    @property
    def extractor(self) -> VariableExtractor:
        return self._extractor

    # ─────────────────────────────────────────────────────────────────────
    # Functions
    # ─────────────────────────────────────────────────────────────────────

    def register_function(self, definition: FunctionDefinition) -> None:
        """Add or replace a function in this environment only.

        Registry-backed matchers recognise it on the next extraction.
        """
        self._registry.register(definition)
        self._known_functions = None

    def function_names(self) -> frozenset[str]:
        """Every name templates may call: builtins plus registered functions."""
        known = self._known_functions
        if known is None:
            known = BUILTIN_FUNCTIONS | self._registry.names()
            self._known_functions = known
        return known

    # ─────────────────────────────────────────────────────────────────────
    # Parsing
    # ─────────────────────────────────────────────────────────────────────

    def parse(self, source: str, name: str | None = None) -> TemplateNode:
        """Parse ``source`` into an AST.

        Raises:
            TemplateSyntaxError: The source is not a valid template
        """
        name = name or self._config.template_name
        try:
            return parse_source(
                source,
                name=name,
                functions=self.function_names(),
                config=self._config.lexer_config,
            )
        except TemplateSyntaxError as exc:
            logger.debug(f"Parse failed for {name}: {exc.message}")
            raise

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Parse ``source`` and wrap it in a Template bound to this environment."""
        ast = self.parse(source, name)
        return Template(self, ast, source, ast.name)

    # ─────────────────────────────────────────────────────────────────────
    # Extraction and rendering
    # ─────────────────────────────────────────────────────────────────────

    def extract_names(self, source: str) -> list[str]:
        """Names ``source`` depends on, in source order with duplicates.

        Raises:
            TemplateSyntaxError: The source does not parse
            ExcessiveNestingError: The tree is nested past the depth ceiling
        """
        return self._extractor.extract_names(self.parse(source))

    def extract_with_defaults(self, source: str) -> list[VariableInfo]:
        """Same names as extract_names(), each with its literal default if any."""
        return self._extractor.extract_with_defaults(self.parse(source))

    def render(self, source: str, values: Mapping[str, Any] | None = None) -> str:
        """Parse and render ``source`` in one step."""
        return self.from_string(source).render(values or {})

    def __repr__(self) -> str:
        return f"<Environment variant={self._config.variant.value!r} functions={len(self._registry)}>"
