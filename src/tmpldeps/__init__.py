"""tmpldeps: static variable dependency extraction for text templates.

Parses Go-style text templates (``{{ }}`` actions, pipelines, if/range/with)
and reports which external inputs a template reads, without executing it.
Templates can also be rendered against a flat value environment using the
same function vocabulary.

Quickstart:
    >>> from tmpldeps import Environment
    >>> env = Environment()
    >>> env.extract_names('host={{.host}} port={{getv "port" "8080"}}')
    ['host', 'port']
    >>> env.extract_with_defaults('{{getv "port" "8080"}}')
    [VariableInfo(name='port', default_value='8080')]

Rendering:
    >>> t = env.from_string('port={{getv "port" "8080"}}')
    >>> t.render({"port": "9090"})
    'port=9090'

Architecture:
Template Source → Lexer → Parser → AST → VariableExtractor → names
                                      └→ Executor → output

Pipeline stages:
1. **Lexer**: Tokenizes template source into a token stream
2. **Parser**: Builds an immutable AST, rejecting unknown functions
3. **VariableExtractor**: Depth-bounded walk collecting dependencies
4. **Executor**: Renders the AST with builtins plus variant functions

Build Variants:
- ``none``: Field paths only; no accessor functions are callable
- ``accessor``: ``getv``, ``exists``, ``get``, ``json``, ``jsonArray``
- ``utility``: Accessors plus string, path, arithmetic and encoding helpers

Thread-Safety:
Extraction and rendering only read shared state. Each Environment owns its
function registry; registry updates are copy-on-write.

"""

from tmpldeps._types import Token, TokenType
from tmpldeps.analysis import VariableExtractor, VariableInfo
from tmpldeps.config import DEFAULT_CONFIG, ExtractionConfig
from tmpldeps.environment import (
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
from tmpldeps.environment.core import Environment
from tmpldeps.functions import (
    BuildVariant,
    CompositeFunctionMatcher,
    ExtractionRule,
    FixedFunctionMatcher,
    FunctionDefinition,
    FunctionMatcher,
    FunctionRegistry,
    RegistryFunctionMatcher,
    build_render_functions,
    create_matcher,
    create_registry,
)
from tmpldeps.template import Template

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "BuildVariant",
    "CompositeFunctionMatcher",
    "Environment",
    "ErrorCode",
    "ExcessiveNestingError",
    "ExtractionConfig",
    "ExtractionRule",
    "FixedFunctionMatcher",
    "FunctionDefinition",
    "FunctionMatcher",
    "FunctionRegistry",
    "KeyNotFoundError",
    "MalformedDataError",
    "RegistryFunctionMatcher",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "ValueTypeError",
    "VariableExtractor",
    "VariableInfo",
    "__version__",
    "build_render_functions",
    "build_source_snippet",
    "create_matcher",
    "create_registry",
]
