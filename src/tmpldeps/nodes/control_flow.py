"""Control flow nodes: conditional, iteration and scoping blocks."""

from __future__ import annotations

from dataclasses import dataclass

from tmpldeps.nodes.base import Node
from tmpldeps.nodes.expressions import Pipe
from tmpldeps.nodes.structure import ListNode


@dataclass(frozen=True, slots=True)
class BranchNode(Node):
    """Shared shape of if/range/with: guard pipeline, body, optional else."""

    pipe: Pipe
    body: ListNode
    else_: ListNode | None = None


@dataclass(frozen=True, slots=True)
class If(BranchNode):
    """Conditional: {{ if .a }}...{{ else if .b }}...{{ else }}...{{ end }}"""


@dataclass(frozen=True, slots=True)
class Range(BranchNode):
    """Iteration: {{ range $i, $e := .items }}...{{ else }}...{{ end }}"""


@dataclass(frozen=True, slots=True)
class With(BranchNode):
    """Scoping: {{ with .user }}{{ .name }}{{ else }}...{{ end }}"""


@dataclass(frozen=True, slots=True)
class Break(Node):
    """Leave the innermost range: {{ break }}"""


@dataclass(frozen=True, slots=True)
class Continue(Node):
    """Skip to the next range iteration: {{ continue }}"""
