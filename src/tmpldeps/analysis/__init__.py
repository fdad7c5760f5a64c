"""Static dependency analysis for templates.

Lists the external inputs a template reads without executing it.

Example:
    >>> from tmpldeps.analysis import VariableExtractor
    >>> extractor = VariableExtractor(registry)
    >>> extractor.extract_with_defaults(ast)
    [VariableInfo(name='username', default_value='guest')]
"""

from tmpldeps.analysis.arguments import (
    extract_arg_variable,
    extract_arg_variable_with_defaults,
)
from tmpldeps.analysis.extractor import GENERIC, Accessor, GenericCall, VariableExtractor
from tmpldeps.analysis.results import VariableInfo, unique_names

__all__ = [
    "GENERIC",
    "Accessor",
    "GenericCall",
    "VariableExtractor",
    "VariableInfo",
    "extract_arg_variable",
    "extract_arg_variable_with_defaults",
    "unique_names",
]
