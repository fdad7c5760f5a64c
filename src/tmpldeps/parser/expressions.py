"""Pipeline and operand parsing.

Provides the mixin that turns the inside of an action into a Pipe:
declarations, ``|``-separated commands, operands with field chains, and
literal terms.

Whitespace is significant here. ``.a.b`` is one field path while
``.a .b`` is two arguments, so only explicit SPACE tokens separate
operands.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tmpldeps._types import Token, TokenType
from tmpldeps.environment.exceptions import ErrorCode
from tmpldeps.nodes import (
    Bool,
    Chain,
    Command,
    Dot,
    Expr,
    Field,
    Identifier,
    Nil,
    Number,
    Pipe,
    String,
    Variable,
)
from tmpldeps.parser.blocks.core import BlockStackMixin

_OPERAND_START = frozenset(
    {
        TokenType.BOOL,
        TokenType.CHAR,
        TokenType.DOT,
        TokenType.FIELD,
        TokenType.IDENTIFIER,
        TokenType.NUMBER,
        TokenType.RAW_STRING,
        TokenType.STRING,
        TokenType.VARIABLE,
        TokenType.LEFT_PAREN,
    }
)

# Operand kinds that cannot start a later pipeline stage.
_NON_EXECUTABLE = (Bool, Dot, Nil, Number, String)

_ESCAPE_RE = re.compile(
    r"""\\(?:
        (?P<simple>[abfnrtv\\'"])
      | x(?P<hex>[0-9a-fA-F]{2})
      | u(?P<u4>[0-9a-fA-F]{4})
      | U(?P<u8>[0-9a-fA-F]{8})
      | (?P<oct>[0-7]{3})
      | (?P<bad>.?)
    )""",
    re.VERBOSE | re.DOTALL,
)

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_LEGACY_OCTAL_RE = re.compile(r"[+-]?0[0-7_]+")


def _replace_escape(match: re.Match[str]) -> str:
    if match.group("simple") is not None:
        return _SIMPLE_ESCAPES[match.group("simple")]
    for group in ("hex", "u4", "u8"):
        if match.group(group) is not None:
            return chr(int(match.group(group), 16))
    if match.group("oct") is not None:
        return chr(int(match.group("oct"), 8))
    raise ValueError(f"invalid escape sequence \\{match.group('bad')}")


def unquote(text: str) -> str:
    """Decode a quoted literal: ``"..."``, ``'...'`` or a raw ```...```.

    Raises:
        ValueError: Malformed quoting or an invalid escape sequence.
    """
    if len(text) < 2 or text[0] != text[-1] or text[0] not in "\"'`":
        raise ValueError(f"invalid quoted literal {text}")
    body = text[1:-1]
    if text[0] == "`":
        return body
    return _ESCAPE_RE.sub(_replace_escape, body)


def parse_number(text: str) -> int | float | complex:
    """Parse a numeric literal the way the template language spells them.

    Accepts decimal, ``0x``/``0o``/``0b`` and legacy ``0755`` octal integers,
    decimal and hexadecimal floats, digit separators and an ``i`` suffix for
    imaginary constants.

    Raises:
        ValueError: Not a valid number.
    """
    clean = text.replace("_", "")
    if clean.endswith("i"):
        return complex(0, float(parse_number(clean[:-1])))
    if _LEGACY_OCTAL_RE.fullmatch(clean):
        return int(clean, 8)
    try:
        return int(clean, 0)
    except ValueError:
        pass
    unsigned = clean.lstrip("+-")
    if unsigned[:2] in ("0x", "0X"):
        value = float.fromhex(unsigned)
        return -value if clean.startswith("-") else value
    return float(clean)


class ExpressionParsingMixin(BlockStackMixin):
    """Mixin for parsing pipelines, commands and operands.

    Required Host Attributes:
        - All from BlockStackMixin
        - _functions: names callable in addition to the builtins
    """

    if TYPE_CHECKING:

        def _is_function(self, name: str) -> bool: ...

    def _parse_pipeline(self, context: str, end: TokenType) -> Pipe:
        """Parse ``[decl :=] command {| command}`` up to and including ``end``."""
        first = self._peek_non_space()
        decl, is_assign = self._parse_declarations(context)

        cmds: list[Command] = []
        while True:
            token = self._peek_non_space()
            if token.type == end:
                self._advance()
                break
            if token.type not in _OPERAND_START and not (
                token.type == TokenType.KEYWORD and token.value == "nil"
            ):
                raise self._unexpected(self._advance(), context)
            cmds.append(self._parse_command(context, end))

        if not cmds:
            raise self._error(
                f"missing command in {context}",
                first,
                code=ErrorCode.INVALID_PIPELINE,
            )
        for stage, cmd in enumerate(cmds[1:], start=2):
            if isinstance(cmd.args[0], _NON_EXECUTABLE):
                raise self._error(
                    f"non executable command in pipeline stage {stage}",
                    first,
                    suggestion="Only functions, fields and variables can receive piped values",
                    code=ErrorCode.INVALID_PIPELINE,
                )
        return Pipe(first.lineno, first.col_offset, decl=tuple(decl), cmds=tuple(cmds),
                    is_assign=is_assign)

    def _parse_declarations(self, context: str) -> tuple[list[Variable], bool]:
        """Parse ``$x :=``, ``$x =`` or ``$i, $e :=`` (range only)."""
        decl: list[Variable] = []
        while True:
            mark = self._pos
            token = self._peek_non_space()
            if token.type != TokenType.VARIABLE:
                self._pos = mark
                return decl, False
            self._advance()
            following = self._peek_non_space()

            if following.type in (TokenType.DECLARE, TokenType.ASSIGN):
                self._advance()
                is_assign = following.type == TokenType.ASSIGN
                if is_assign and not self._is_declared(token.value):
                    raise self._error(
                        f'undefined variable "{token.value}"',
                        token,
                        suggestion=f"Declare it first with {{{{{token.value} := ...}}}}",
                        code=ErrorCode.UNDEFINED_VARIABLE,
                    )
                decl.append(Variable(token.lineno, token.col_offset, ident=(token.value,)))
                self._declare(token.value)
                return decl, is_assign

            if following.type == TokenType.COMMA:
                self._advance()
                decl.append(Variable(token.lineno, token.col_offset, ident=(token.value,)))
                self._declare(token.value)
                if context == "range" and len(decl) < 2:
                    if self._peek_non_space().type in (
                        TokenType.VARIABLE,
                        TokenType.RIGHT_DELIM,
                        TokenType.RIGHT_PAREN,
                    ):
                        continue
                    raise self._error("range can only initialize variables", token)
                raise self._error(f"too many declarations in {context}", token)

            # Not a declaration: rewind so the variable is parsed as an operand
            self._pos = mark
            return decl, False

    def _parse_command(self, context: str, end: TokenType) -> Command:
        """Parse space-separated operands up to ``|`` or the pipeline end."""
        first = self._peek_non_space()
        args: list[Expr] = []
        while True:
            self._skip_space()
            operand = self._parse_operand()
            if operand is not None:
                args.append(operand)
            token = self._current
            if token.type == TokenType.SPACE:
                self._advance()
                continue
            if token.type in (TokenType.RIGHT_DELIM, TokenType.RIGHT_PAREN):
                break
            if token.type == TokenType.PIPE:
                self._advance()
                if self._peek_non_space().type == end:
                    raise self._error(
                        f"missing command after '|' in {context}",
                        token,
                        code=ErrorCode.INVALID_PIPELINE,
                    )
                break
            raise self._unexpected(token, "operand")
        if not args:
            raise self._error("empty command", first, code=ErrorCode.INVALID_PIPELINE)
        if isinstance(args[0], Nil):
            raise self._error("nil is not a command", first, code=ErrorCode.INVALID_PIPELINE)
        return Command(first.lineno, first.col_offset, args=tuple(args))

    def _parse_operand(self) -> Expr | None:
        """Parse a term plus any directly attached ``.field`` chain."""
        node = self._parse_term()
        if node is None or self._current.type != TokenType.FIELD:
            return node

        fields: list[str] = []
        while self._current.type == TokenType.FIELD:
            fields.append(self._advance().value[1:])

        if isinstance(node, Field):
            return Field(node.lineno, node.col_offset, ident=node.ident + tuple(fields))
        if isinstance(node, Variable):
            return Variable(node.lineno, node.col_offset, ident=node.ident + tuple(fields))
        if isinstance(node, _NON_EXECUTABLE):
            raise self._error(f"unexpected . after term {str(node)!r}")
        return Chain(node.lineno, node.col_offset, node=node, fields=tuple(fields))

    def _parse_term(self) -> Expr | None:
        token = self._current
        kind = token.type

        if kind == TokenType.IDENTIFIER:
            if not self._is_function(token.value):
                raise self._error(
                    f'function "{token.value}" not defined',
                    token,
                    code=ErrorCode.UNDEFINED_FUNCTION,
                )
            self._advance()
            return Identifier(token.lineno, token.col_offset, name=token.value)
        if kind == TokenType.DOT:
            self._advance()
            return Dot(token.lineno, token.col_offset)
        if kind == TokenType.KEYWORD and token.value == "nil":
            self._advance()
            return Nil(token.lineno, token.col_offset)
        if kind == TokenType.VARIABLE:
            if not self._is_declared(token.value):
                raise self._error(
                    f'undefined variable "{token.value}"',
                    token,
                    code=ErrorCode.UNDEFINED_VARIABLE,
                )
            self._advance()
            return Variable(token.lineno, token.col_offset, ident=(token.value,))
        if kind == TokenType.FIELD:
            self._advance()
            return Field(token.lineno, token.col_offset, ident=(token.value[1:],))
        if kind == TokenType.BOOL:
            self._advance()
            return Bool(token.lineno, token.col_offset, value=token.value == "true")
        if kind == TokenType.NUMBER:
            self._advance()
            return self._number(token)
        if kind == TokenType.CHAR:
            self._advance()
            char = self._unquote_token(token)
            if len(char) != 1:
                raise self._error(f"malformed character constant: {token.value}", token)
            return Number(token.lineno, token.col_offset, value=ord(char), text=token.value)
        if kind in (TokenType.STRING, TokenType.RAW_STRING):
            self._advance()
            return String(
                token.lineno,
                token.col_offset,
                value=self._unquote_token(token),
                quoted=token.value,
            )
        if kind == TokenType.LEFT_PAREN:
            self._advance()
            with self._paren_scope(token):
                return self._parse_pipeline("parenthesized pipeline", TokenType.RIGHT_PAREN)
        return None

    def _number(self, token: Token) -> Number:
        try:
            value = parse_number(token.value)
        except ValueError:
            raise self._error(f"illegal number syntax: {token.value!r}", token) from None
        return Number(token.lineno, token.col_offset, value=value, text=token.value)

    def _unquote_token(self, token: Token) -> str:
        try:
            return unquote(token.value)
        except ValueError as exc:
            raise self._error(str(exc), token) from None
