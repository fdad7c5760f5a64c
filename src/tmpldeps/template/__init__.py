"""Template rendering and introspection.

Template wraps a parsed tree; Executor walks it against a value
environment using the builtins plus the variant's render functions.
"""

from tmpldeps.template.builtins import BUILTINS
from tmpldeps.template.core import Template
from tmpldeps.template.executor import Executor
from tmpldeps.template.formatting import format_value, sprint, sprintf, sprintln

__all__ = [
    "BUILTINS",
    "Executor",
    "Template",
    "format_value",
    "sprint",
    "sprintf",
    "sprintln",
]
