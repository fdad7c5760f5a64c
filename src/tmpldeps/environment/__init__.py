"""Environment, configuration surface and error types.

The exception classes load eagerly because the lexer and parser raise
them. Environment itself loads on first access, since it pulls in the
parser, extractor and renderer.
"""

from tmpldeps.environment.exceptions import (
    ErrorCode,
    ExcessiveNestingError,
    KeyNotFoundError,
    MalformedDataError,
    SourceSnippet,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    ValueTypeError,
    build_source_snippet,
)

__all__ = [
    "Environment",
    "ErrorCode",
    "ExcessiveNestingError",
    "KeyNotFoundError",
    "MalformedDataError",
    "SourceSnippet",
    "TemplateError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "ValueTypeError",
    "build_source_snippet",
]


def __getattr__(name: str) -> object:
    """Load Environment lazily to keep the exception module import-light."""
    if name == "Environment":
        from tmpldeps.environment.core import Environment

        globals()["Environment"] = Environment
        return Environment
    raise AttributeError(f"module 'tmpldeps.environment' has no attribute {name!r}")
