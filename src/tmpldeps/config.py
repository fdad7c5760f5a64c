"""Configuration for template parsing, extraction and rendering.

Example:
    >>> from tmpldeps.config import ExtractionConfig
    >>> config = ExtractionConfig(variant=BuildVariant.UTILITY, max_depth=20)
    >>> env = Environment(config)

Environment variables (read by ``ExtractionConfig.from_env``):
    TMPLDEPS_VARIANT: ``none``, ``accessor`` or ``utility``
    TMPLDEPS_MAX_DEPTH: extraction depth ceiling (positive integer)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from tmpldeps.functions.variants import DEFAULT_VARIANT, BuildVariant, variant_from_env
from tmpldeps.lexer import LexerConfig
from tmpldeps.utils.constants import DEFAULT_TEMPLATE_NAME, MAX_DEPTH, MAX_TEMPLATE_DEPTH

logger = logging.getLogger(__name__)

MAX_DEPTH_ENV_VAR = "TMPLDEPS_MAX_DEPTH"


@dataclass(frozen=True, slots=True)
class ExtractionConfig:
    """Immutable settings shared by an Environment and its templates.

    Attributes:
        variant: Function vocabulary the environment starts with
        max_depth: Extraction walk ceiling
        left_delim: Action opening delimiter
        right_delim: Action closing delimiter
        template_name: Name used in diagnostics when none is given
        max_template_depth: Ceiling for nested ``{{template}}`` calls when rendering
    """

    variant: BuildVariant = DEFAULT_VARIANT
    max_depth: int = MAX_DEPTH
    left_delim: str = "{{"
    right_delim: str = "}}"
    template_name: str = DEFAULT_TEMPLATE_NAME
    max_template_depth: int = MAX_TEMPLATE_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.max_template_depth < 1:
            raise ValueError(
                f"max_template_depth must be positive, got {self.max_template_depth}"
            )
        if not self.left_delim or not self.right_delim:
            raise ValueError("Template delimiters must be non-empty")

    @property
    def lexer_config(self) -> LexerConfig:
        return LexerConfig(left_delim=self.left_delim, right_delim=self.right_delim)

    def with_variant(self, variant: BuildVariant) -> ExtractionConfig:
        """Copy of this config using ``variant``."""
        return replace(self, variant=variant)

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: object
    ) -> ExtractionConfig:
        """Build a config from ``TMPLDEPS_*`` environment variables.

        Keyword overrides win over the environment.

        Raises:
            ValueError: A variable holds an unknown variant or a non-integer depth
        """
        environ = os.environ if environ is None else environ
        settings: dict[str, object] = {"variant": variant_from_env(environ)}
        raw_depth = environ.get(MAX_DEPTH_ENV_VAR, "").strip()
        if raw_depth:
            try:
                settings["max_depth"] = int(raw_depth)
            except ValueError:
                raise ValueError(
                    f"{MAX_DEPTH_ENV_VAR} must be an integer, got {raw_depth!r}"
                ) from None
            logger.debug(f"Extraction depth ceiling {raw_depth} from {MAX_DEPTH_ENV_VAR}")
        settings.update(overrides)
        return cls(**settings)  # type: ignore[arg-type]


DEFAULT_CONFIG = ExtractionConfig()
