"""Control flow block parsing.

Provides the mixin for ``if``, ``range`` and ``with`` blocks, their
``else`` / ``else if`` / ``else with`` branches, and ``break`` / ``continue``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tmpldeps._types import TokenType
from tmpldeps.environment.exceptions import ErrorCode
from tmpldeps.nodes import BranchNode, Break, Continue, If, ListNode, Range, With
from tmpldeps.parser.blocks.core import BlockStackMixin

if TYPE_CHECKING:
    from tmpldeps._types import Token
    from tmpldeps.nodes import Pipe

_BRANCH_TYPES: dict[str, type[BranchNode]] = {"if": If, "range": Range, "with": With}


class ControlFlowBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing control flow blocks.

    Required Host Attributes:
        - All from BlockStackMixin
        - _parse_body: method returning (ListNode, stop keyword)
        - _parse_pipeline: method
    """

    if TYPE_CHECKING:

        def _parse_body(self) -> tuple[ListNode, str]: ...

        def _parse_pipeline(self, context: str, end: TokenType) -> Pipe: ...

    def _parse_branch(self, kind: str, start: Token) -> BranchNode:
        """Parse {{if|range|with pipeline}} body [{{else}} body] {{end}}.

        ``start`` is the already-consumed keyword token.
        """
        self._push_block(kind, start)
        with self._variable_scope():
            pipe = self._parse_pipeline(kind, TokenType.RIGHT_DELIM)

            if kind == "range":
                self._range_depth += 1
            try:
                body, stop = self._parse_body()
            finally:
                if kind == "range":
                    self._range_depth -= 1

            else_: ListNode | None = None
            if stop == "eof":
                raise self._unclosed_block_error()
            if stop == "else":
                self._next_non_space()  # consume 'else'
                chained = self._peek_non_space()
                if kind != "range" and chained.type == TokenType.KEYWORD and chained.value == kind:
                    # {{else if ...}} owns the closing {{end}}
                    self._advance()  # consume 'if' / 'with'
                    nested = self._parse_branch(kind, chained)
                    else_ = ListNode(nested.lineno, nested.col_offset, (nested,))
                else:
                    self._expect(TokenType.RIGHT_DELIM, "else")
                    else_, stop = self._parse_body()
                    if stop == "eof":
                        raise self._unclosed_block_error()
                    if stop != "end":
                        raise self._error(
                            f"expected end; found {{{{{stop}}}}}",
                            self._peek_non_space(),
                            suggestion=f"A '{kind}' block takes at most one plain {{{{else}}}}",
                        )
                    self._consume_end(kind)
            else:
                self._consume_end(kind)
        self._pop_block()
        return _BRANCH_TYPES[kind](
            start.lineno, start.col_offset, pipe=pipe, body=body, else_=else_
        )

    def _consume_end(self, context: str) -> None:
        self._next_non_space()  # consume 'end'
        self._expect(TokenType.RIGHT_DELIM, f"{context} end")

    def _parse_break(self, start: Token) -> Break:
        token = self._next_non_space()
        if token.type != TokenType.RIGHT_DELIM:
            raise self._unexpected(token, "{{break}}")
        if self._range_depth == 0:
            raise self._error(
                "{{break}} outside {{range}}", start, code=ErrorCode.UNEXPECTED_TOKEN
            )
        return Break(start.lineno, start.col_offset)

    def _parse_continue(self, start: Token) -> Continue:
        token = self._next_non_space()
        if token.type != TokenType.RIGHT_DELIM:
            raise self._unexpected(token, "{{continue}}")
        if self._range_depth == 0:
            raise self._error(
                "{{continue}} outside {{range}}", start, code=ErrorCode.UNEXPECTED_TOKEN
            )
        return Continue(start.lineno, start.col_offset)
