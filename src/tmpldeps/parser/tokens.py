"""Token navigation for the template parser.

Provides the cursor primitives every parsing mixin builds on.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from tmpldeps._types import Token, TokenType
from tmpldeps.environment.exceptions import ErrorCode
from tmpldeps.parser.errors import ParseError


def describe(token: Token) -> str:
    """Human-readable token description for error messages."""
    if token.type == TokenType.EOF:
        return "EOF"
    if token.type == TokenType.SPACE:
        return "space"
    return f"{token.value!r}"


class TokenNavigationMixin:
    """Cursor over a token list.

    Host attributes are declared via inline TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _tokens: Sequence[Token]
        _pos: int
        _name: str
        _source: str | None

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        return self._current.type in types

    def _skip_space(self) -> None:
        while self._current.type == TokenType.SPACE:
            self._pos += 1

    def _peek_non_space(self) -> Token:
        self._skip_space()
        return self._current

    def _next_non_space(self) -> Token:
        self._skip_space()
        return self._advance()

    def _at_keyword(self, *words: str) -> bool:
        token = self._peek_non_space()
        return token.type == TokenType.KEYWORD and token.value in words

    def _expect(self, token_type: TokenType, context: str) -> Token:
        token = self._next_non_space()
        if token.type != token_type:
            raise self._unexpected(token, context)
        return token

    def _unexpected(self, token: Token, context: str) -> ParseError:
        if token.type == TokenType.EOF:
            return self._error(f"unexpected EOF in {context}", token, code=ErrorCode.UNCLOSED_BLOCK)
        return self._error(f"unexpected {describe(token)} in {context}", token)

    def _error(
        self,
        message: str,
        token: Token | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ) -> ParseError:
        return ParseError(
            message,
            token or self._current,
            source=self._source,
            name=self._name,
            suggestion=suggestion,
            code=code,
        )
