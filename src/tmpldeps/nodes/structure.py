"""Template structure nodes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from tmpldeps.nodes.base import Node
from tmpldeps.nodes.expressions import Pipe


@dataclass(frozen=True, slots=True)
class ListNode(Node):
    """Sequence of sibling nodes (text, actions, blocks)."""

    nodes: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Plain text between actions."""

    data: str


@dataclass(frozen=True, slots=True)
class Action(Node):
    """Output action wrapping one pipeline: {{ .name }}"""

    pipe: Pipe


@dataclass(frozen=True, slots=True)
class TemplateCall(Node):
    """Invoke a named template: {{ template "header" . }}"""

    name: str
    pipe: Pipe | None = None


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root of a parsed template.

    Attributes:
        name: Template name used in diagnostics
        body: Main tree
        defines: Named trees from {{ define }} and {{ block }}
    """

    name: str
    body: ListNode
    defines: dict[str, ListNode] = field(default_factory=dict)
