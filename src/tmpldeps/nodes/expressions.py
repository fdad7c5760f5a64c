"""Expression nodes: operands, commands and pipelines."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tmpldeps.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions."""


@dataclass(frozen=True, slots=True)
class Field(Expr):
    """Field path on dot: {{ .user.name }}"""

    ident: tuple[str, ...]

    @property
    def path(self) -> str:
        """Dotted path without the leading dot: ``user.name``."""
        return ".".join(self.ident)

    def __str__(self) -> str:
        return "." + self.path


@dataclass(frozen=True, slots=True)
class Variable(Expr):
    """Variable reference, optionally with fields: {{ $user.name }}

    ``ident[0]`` is the variable name including the ``$``.
    """

    ident: tuple[str, ...]

    @property
    def name(self) -> str:
        return self.ident[0]

    def __str__(self) -> str:
        return ".".join(self.ident)


@dataclass(frozen=True, slots=True)
class Identifier(Expr):
    """Function name: the ``printf`` in {{ printf "%d" 1 }}"""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Dot(Expr):
    """The cursor: {{ . }}"""

    def __str__(self) -> str:
        return "."


@dataclass(frozen=True, slots=True)
class Nil(Expr):
    """Untyped nil constant."""

    def __str__(self) -> str:
        return "nil"


@dataclass(frozen=True, slots=True)
class Bool(Expr):
    """Boolean constant: true / false"""

    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True, slots=True)
class Number(Expr):
    """Numeric constant. ``text`` keeps the original spelling."""

    value: int | float | complex
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class String(Expr):
    """String constant. ``value`` is unquoted, ``quoted`` is the source form."""

    value: str
    quoted: str

    def __str__(self) -> str:
        return self.quoted


@dataclass(frozen=True, slots=True)
class Chain(Expr):
    """Field access on a non-field operand: {{ (index .items 0).name }}"""

    node: Expr
    fields: tuple[str, ...]

    def __str__(self) -> str:
        base = str(self.node)
        if isinstance(self.node, Pipe):
            base = f"({base})"
        return base + "".join(f".{f}" for f in self.fields)


@dataclass(frozen=True, slots=True)
class Command(Expr):
    """One element of a pipeline: an operand followed by arguments."""

    args: Sequence[Expr]

    def __str__(self) -> str:
        return " ".join(f"({arg})" if isinstance(arg, Pipe) else str(arg) for arg in self.args)


@dataclass(frozen=True, slots=True)
class Pipe(Expr):
    """Pipeline with optional declarations: {{ $x := .a | printf "%s" }}

    Attributes:
        decl: Variables declared (or assigned) by this pipeline
        cmds: Commands in left-to-right data-flow order
        is_assign: True for ``=``, False for ``:=`` or no declaration
    """

    decl: Sequence[Variable]
    cmds: Sequence[Command]
    is_assign: bool = False

    def __str__(self) -> str:
        text = " | ".join(str(cmd) for cmd in self.cmds)
        if self.decl:
            op = "=" if self.is_assign else ":="
            text = f"{', '.join(str(v) for v in self.decl)} {op} {text}"
        return text
