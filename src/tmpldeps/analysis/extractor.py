"""Variable dependency extraction.

Walks a template AST and lists the external inputs it reads, in source
order and without deduplication:

- every field path (``.a.b``) is one dependency named ``a.b``
- a call to a recognised function reads its key argument according to the
  function's ExtractionRule, optionally with a literal default
- every other call is searched argument by argument

Control blocks are searched guard first, then body, then else body. Text,
literals and ``$variables`` contribute nothing.

Known limitations: a chain such as ``(.user).name`` and the argument of a
``{{template "t" .arg}}`` call are leaves, so ``user`` and ``arg`` are not
reported even though rendering reads them. Named templates from
``{{define}}`` are not walked. Transform functions are searched through
their first argument only.

The walk is depth-bounded. Every descent counts one level and passing the
ceiling aborts the whole call with ExcessiveNestingError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tmpldeps.analysis.arguments import (
    extract_arg_variable,
    extract_arg_variable_with_defaults,
)
from tmpldeps.analysis.results import VariableInfo
from tmpldeps.environment.exceptions import ExcessiveNestingError
from tmpldeps.functions.definition import KEY_WITH_DEFAULT, ExtractionRule, FunctionDefinition
from tmpldeps.functions.matcher import FunctionMatcher, RegistryFunctionMatcher
from tmpldeps.nodes import Identifier, Template
from tmpldeps.utils.constants import MAX_DEPTH

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tmpldeps.functions.registry import FunctionRegistry
    from tmpldeps.nodes import (
        Action,
        BranchNode,
        Command,
        Expr,
        Field,
        If,
        ListNode,
        Node,
        Pipe,
        Range,
        With,
    )

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Accessor:
    """Classification of a recognised function call.

    ``definition`` is None when the matcher recognises a name the registry
    does not define; such calls use KEY_WITH_DEFAULT.
    """

    name: str
    rule: ExtractionRule
    definition: FunctionDefinition | None = None


@dataclass(frozen=True, slots=True)
class GenericCall:
    """Classification of any call that is not a recognised function."""


GENERIC = GenericCall()


class VariableExtractor:
    """Extract dependency names from template ASTs.

    Configured once with a registry and matcher, then reusable. All walk
    state (the depth counter) travels in arguments, so one extractor can
    serve concurrent calls as long as its registry is not being mutated.

    Args:
        registry: Function definitions supplying extraction rules
        matcher: Decides which calls are recognised; defaults to a
            matcher backed by ``registry``
        max_depth: Walk ceiling

    Example:
        >>> extractor = VariableExtractor(create_registry(BuildVariant.ACCESSOR))
        >>> extractor.extract_names(parse('{{getv "port"}}:{{.host}}', functions={"getv"}))
        ['port', 'host']
    """

    def __init__(
        self,
        registry: FunctionRegistry,
        matcher: FunctionMatcher | None = None,
        *,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self._registry = registry
        self._matcher = matcher if matcher is not None else RegistryFunctionMatcher(registry)
        self._max_depth = max_depth
        self._dispatch: dict[str, Callable[[Node, int, bool], list[VariableInfo]]] = {}
        for name in dir(self):
            if name.startswith("_visit_"):
                method = getattr(self, name)
                if callable(method):
                    self._dispatch[name[7:]] = method

    @property
    def registry(self) -> FunctionRegistry:
        return self._registry

    @property
    def matcher(self) -> FunctionMatcher:
        return self._matcher

    @property
    def max_depth(self) -> int:
        return self._max_depth

    # ─────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────

    def extract_names(self, node: Node) -> list[str]:
        """Dependency names in traversal order.

        Args:
            node: A parsed Template (its main tree is walked) or any node

        Raises:
            ExcessiveNestingError: The tree is nested past ``max_depth``
        """
        return [info.name for info in self._extract(node, with_defaults=False)]

    def extract_with_defaults(self, node: Node) -> list[VariableInfo]:
        """Dependencies with literal defaults, in traversal order.

        Yields the same names in the same order as extract_names().

        Raises:
            ExcessiveNestingError: The tree is nested past ``max_depth``
        """
        return self._extract(node, with_defaults=True)

    def classify(self, name: str) -> Accessor | GenericCall:
        """Decide how a call to ``name`` is searched."""
        if not self._matcher.match_custom_func(name):
            return GENERIC
        definition = self._registry.get(name)
        rule = definition.rule if definition is not None else KEY_WITH_DEFAULT
        return Accessor(name, rule, definition)

    def walk_names(self, node: Node, depth: int) -> list[str]:
        """Names-only walk of ``node`` from a caller at ``depth``.

        Used by extraction hooks to search an argument expression.
        """
        return [info.name for info in self._walk(node, depth, False)]

    def walk_with_defaults(self, node: Node, depth: int) -> list[VariableInfo]:
        """Like walk_names, keeping literal defaults found under ``node``."""
        return self._walk(node, depth, True)

    # ─────────────────────────────────────────────────────────────────────
    # Walk
    # ─────────────────────────────────────────────────────────────────────

    def _extract(self, node: Node, with_defaults: bool) -> list[VariableInfo]:
        name = None
        if isinstance(node, Template):
            name = node.name
            node = node.body
        try:
            return self._walk(node, 0, with_defaults)
        except ExcessiveNestingError as exc:
            logger.debug(f"Extraction aborted at depth {exc.max_depth}: {name or '<node>'}")
            if name and exc.name is None:
                raise ExcessiveNestingError(exc.max_depth, name) from None
            raise

    def _walk(self, node: Node, depth: int, with_defaults: bool) -> list[VariableInfo]:
        depth += 1
        if depth > self._max_depth:
            raise ExcessiveNestingError(self._max_depth)
        handler = self._dispatch.get(type(node).__name__.lower())
        if handler is None:
            return []
        return handler(node, depth, with_defaults)

    def _walk_all(
        self, nodes: Sequence[Node], depth: int, with_defaults: bool
    ) -> list[VariableInfo]:
        result: list[VariableInfo] = []
        for child in nodes:
            result.extend(self._walk(child, depth, with_defaults))
        return result

    def _visit_field(self, node: Field, depth: int, with_defaults: bool) -> list[VariableInfo]:
        return [VariableInfo(node.path)]

    def _visit_command(
        self, node: Command, depth: int, with_defaults: bool
    ) -> list[VariableInfo]:
        args = node.args
        first = args[0]
        if isinstance(first, Identifier):
            call = self.classify(first.name)
            if isinstance(call, Accessor):
                return self._extract_call(call, args, depth, with_defaults)
        return self._walk_all(args, depth, with_defaults)

    def _visit_action(self, node: Action, depth: int, with_defaults: bool) -> list[VariableInfo]:
        return self._walk(node.pipe, depth, with_defaults)

    def _visit_pipe(self, node: Pipe, depth: int, with_defaults: bool) -> list[VariableInfo]:
        return self._walk_all(node.cmds, depth, with_defaults)

    def _visit_listnode(
        self, node: ListNode, depth: int, with_defaults: bool
    ) -> list[VariableInfo]:
        return self._walk_all(node.nodes, depth, with_defaults)

    def _visit_if(self, node: If, depth: int, with_defaults: bool) -> list[VariableInfo]:
        return self._visit_branch(node, depth, with_defaults)

    def _visit_range(self, node: Range, depth: int, with_defaults: bool) -> list[VariableInfo]:
        return self._visit_branch(node, depth, with_defaults)

    def _visit_with(self, node: With, depth: int, with_defaults: bool) -> list[VariableInfo]:
        return self._visit_branch(node, depth, with_defaults)

    def _visit_branch(
        self, node: BranchNode, depth: int, with_defaults: bool
    ) -> list[VariableInfo]:
        """Guard pipeline, then body, then else body."""
        result = self._walk(node.pipe, depth, with_defaults)
        result.extend(self._walk(node.body, depth, with_defaults))
        if node.else_ is not None:
            result.extend(self._walk(node.else_, depth, with_defaults))
        return result

    def _extract_call(
        self,
        call: Accessor,
        args: Sequence[Expr],
        depth: int,
        with_defaults: bool,
    ) -> list[VariableInfo]:
        definition = call.definition
        if definition is not None and definition.has_custom_extractor:
            if with_defaults:
                return list(definition.extractor_with_defaults(args, depth, self))
            return [VariableInfo(name) for name in definition.extractor(args, depth, self)]

        rule = call.rule
        if not rule.contributes:
            return []
        if with_defaults:
            return extract_arg_variable_with_defaults(
                self, args, depth, rule.key_index, rule.default_index, rule.literal_is_key
            )
        names = extract_arg_variable(self, args, depth, rule.key_index, rule.literal_is_key)
        return [VariableInfo(name) for name in names]
