"""Block stack and variable scope management.

Tracks the control blocks that are currently open so an unclosed block can
be reported against the line that opened it, and tracks the ``$variables``
visible at the current position.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from tmpldeps.environment.exceptions import ErrorCode
from tmpldeps.parser.tokens import TokenNavigationMixin
from tmpldeps.utils.constants import MAX_PARSE_DEPTH

if TYPE_CHECKING:
    from tmpldeps._types import Token
    from tmpldeps.parser.errors import ParseError


class BlockStackMixin(TokenNavigationMixin):
    """Open-block stack, variable scopes and ``range`` nesting.

    Required Host Attributes:
        - _block_stack: list of (kind, token) for open blocks
        - _vars: names of visible variables, innermost last
        - _range_depth: number of enclosing ``range`` bodies
        - _paren_depth: number of open parenthesized pipelines
        - _outer_depth: blocks still open around an isolated named body
    """

    if TYPE_CHECKING:
        _block_stack: list[tuple[str, Token]]
        _vars: list[str]
        _range_depth: int
        _paren_depth: int
        _outer_depth: int

    def _push_block(self, kind: str, token: Token) -> None:
        self._block_stack.append((kind, token))
        self._check_nesting(token)

    def _pop_block(self) -> None:
        self._block_stack.pop()

    @contextmanager
    def _paren_scope(self, token: Token) -> Iterator[None]:
        self._paren_depth += 1
        try:
            self._check_nesting(token)
            yield
        finally:
            self._paren_depth -= 1

    def _check_nesting(self, token: Token) -> None:
        """Bound recursion on open blocks plus open parentheses."""
        depth = self._outer_depth + len(self._block_stack) + self._paren_depth
        if depth > MAX_PARSE_DEPTH:
            raise self._error(
                f"max expression depth exceeded (limit {MAX_PARSE_DEPTH})",
                token,
                suggestion="Flatten the template or split it into named templates",
                code=ErrorCode.NESTING_TOO_DEEP,
            )

    def _unclosed_block_error(self) -> ParseError:
        """Error for EOF reached while blocks are still open."""
        if not self._block_stack:
            return self._error("unexpected EOF", code=ErrorCode.UNCLOSED_BLOCK)
        kind, opener = self._block_stack[-1]
        return self._error(
            f"unexpected EOF: '{kind}' block opened at line {opener.lineno} was never closed",
            opener,
            suggestion="Add {{end}} to close the block",
            code=ErrorCode.UNCLOSED_BLOCK,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Variables
    # ─────────────────────────────────────────────────────────────────────

    def _declare(self, name: str) -> None:
        self._vars.append(name)

    def _is_declared(self, name: str) -> bool:
        return name in self._vars

    @contextmanager
    def _variable_scope(self) -> Iterator[None]:
        """Drop every variable declared inside the ``with`` body on exit."""
        mark = len(self._vars)
        try:
            yield
        finally:
            del self._vars[mark:]

    @contextmanager
    def _isolated_scope(self) -> Iterator[None]:
        """Fresh state for a named template body: only ``$`` is visible."""
        saved = (self._vars, self._range_depth, self._block_stack, self._outer_depth)
        self._outer_depth += len(self._block_stack)
        self._vars = ["$"]
        self._range_depth = 0
        self._block_stack = []
        try:
            yield
        finally:
            self._vars, self._range_depth, self._block_stack, self._outer_depth = saved
