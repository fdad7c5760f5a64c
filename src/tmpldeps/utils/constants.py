"""Shared constants for tmpldeps.

Kept in one place so the parser, analyzer and renderer agree on them.
"""

from __future__ import annotations

# Functions every template can call regardless of build variant.
# The parser accepts these names; the renderer implements them.
BUILTIN_FUNCTIONS: frozenset[str] = frozenset(
    {
        # Boolean logic
        "and",
        "or",
        "not",
        # Comparison
        "eq",
        "ne",
        "lt",
        "le",
        "gt",
        "ge",
        # Collections
        "len",
        "index",
        "slice",
        # Formatting
        "print",
        "printf",
        "println",
        # Escaping
        "html",
        "js",
        "urlquery",
        # Indirect call
        "call",
    }
)

# Extraction walk ceiling. Every recursive descent counts one level.
MAX_DEPTH = 40

# Parser ceiling on open blocks plus open parentheses.
MAX_PARSE_DEPTH = 100

# Ceiling for nested {{template}} invocations at render time.
MAX_TEMPLATE_DEPTH = 100

DEFAULT_TEMPLATE_NAME = "template.tmpl"

# Printed for a missing value, matching the reference engine.
NO_VALUE = "<no value>"
