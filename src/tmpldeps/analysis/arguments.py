"""Argument extraction helpers shared by function extraction rules.

Both helpers look at a single call argument. A string literal there is
either the name of an input (``literal_is_key=True``, accessor functions)
or opaque data that yields nothing (transform functions). Anything else is
an expression and is searched for field paths with the names-only walk;
defaults are never attached to names found that way.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from tmpldeps.analysis.results import VariableInfo
from tmpldeps.nodes import String

if TYPE_CHECKING:
    from tmpldeps.analysis.extractor import VariableExtractor
    from tmpldeps.nodes import Expr


def extract_arg_variable(
    walker: VariableExtractor,
    args: Sequence[Expr],
    depth: int,
    index: int,
    literal_is_key: bool,
) -> list[str]:
    """Names referenced by ``args[index]``.

    Args:
        walker: Extractor used to search non-literal arguments
        args: Command arguments, function name first
        depth: Depth of the command node
        index: Argument to inspect
        literal_is_key: Whether a string literal is an input name
    """
    if len(args) <= index:
        return []
    arg = args[index]
    if isinstance(arg, String):
        return [arg.value] if literal_is_key else []
    return walker.walk_names(arg, depth)


def extract_arg_variable_with_defaults(
    walker: VariableExtractor,
    args: Sequence[Expr],
    depth: int,
    index: int,
    default_index: int | None,
    literal_is_key: bool,
) -> list[VariableInfo]:
    """Like extract_arg_variable, attaching a literal default when present.

    The default is read from ``args[default_index]`` only when the key
    itself is a literal and the default argument is a string literal.
    """
    if len(args) <= index:
        return []
    arg = args[index]
    if isinstance(arg, String):
        if not literal_is_key:
            return []
        default: str | None = None
        if default_index is not None and len(args) > default_index:
            candidate = args[default_index]
            if isinstance(candidate, String):
                default = candidate.value
        return [VariableInfo(arg.value, default)]
    return [VariableInfo(name) for name in walker.walk_names(arg, depth)]
