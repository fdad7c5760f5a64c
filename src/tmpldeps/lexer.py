"""Lexer for dot-path/pipeline templates.

Turns template source into a token stream. Outside of actions everything is
TEXT; inside ``{{ ... }}`` the lexer recognises fields (``.a``), variables
(``$x``), identifiers, keywords, literals and pipeline punctuation.

Whitespace inside an action is emitted as SPACE tokens because the parser
needs it to tell ``.a.b`` (one path) from ``.a .b`` (two arguments).

Trim markers follow the usual convention: ``{{- `` strips whitespace before
the action, `` -}}`` strips whitespace after it. Comments ``{{/* */}}`` are
dropped entirely.

Example:
    >>> [t.type.name for t in Lexer("Hi {{.Name}}").tokenize()]
    ['TEXT', 'LEFT_DELIM', 'FIELD', 'RIGHT_DELIM', 'EOF']
"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator
from dataclasses import dataclass

from tmpldeps._types import KEYWORDS, Token, TokenType
from tmpldeps.environment.exceptions import ErrorCode, TemplateSyntaxError

_SPACE_CHARS = " \t\r\n"
_TRIM_MARKER = "-"
_COMMENT_OPEN = "/*"
_COMMENT_CLOSE = "*/"

# Signed decimal/hex/octal/binary integers, floats with optional exponent,
# digit separators and the imaginary suffix.
_NUMBER_RE = re.compile(
    r"""
    [+-]?
    (?:
        0[xX][0-9a-fA-F_]*(?:\.[0-9a-fA-F_]*)?(?:[pP][+-]?[0-9_]+)?
      | 0[oO][0-7_]+
      | 0[bB][01_]+
      | (?:[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*)(?:[eE][+-]?[0-9_]+)?
    )
    i?
    """,
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class LexerConfig:
    """Delimiter configuration for the lexer."""

    left_delim: str = "{{"
    right_delim: str = "}}"

    def __post_init__(self) -> None:
        if not self.left_delim or not self.right_delim:
            raise ValueError("Template delimiters must be non-empty")


def _is_alnum(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


class Lexer:
    """Single-pass template tokenizer.

    Thread-safe: all state lives on the instance, one instance per source.
    """

    def __init__(
        self,
        source: str,
        config: LexerConfig | None = None,
        name: str | None = None,
    ) -> None:
        self._source = source
        self._config = config or LexerConfig()
        self._name = name
        self._pos = 0
        self._paren_depth = 0
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]

    # ─────────────────────────────────────────────────────────────────────
    # Position helpers
    # ─────────────────────────────────────────────────────────────────────

    def _location(self, pos: int) -> tuple[int, int]:
        line_index = bisect_right(self._line_starts, pos) - 1
        return line_index + 1, pos - self._line_starts[line_index]

    def _token(self, token_type: TokenType, start: int, end: int) -> Token:
        lineno, col = self._location(start)
        return Token(token_type, self._source[start:end], lineno, col)

    def _error(self, message: str, pos: int, code: ErrorCode) -> TemplateSyntaxError:
        lineno, col = self._location(pos)
        return TemplateSyntaxError(
            message,
            lineno=lineno,
            name=self._name,
            source=self._source,
            col_offset=col,
            code=code,
        )

    def _at_right_delim(self, pos: int) -> tuple[bool, bool]:
        """Return (at delimiter, has trim marker) for position ``pos``."""
        source = self._source
        right = self._config.right_delim
        if (
            pos + 1 < len(source)
            and source[pos] in _SPACE_CHARS
            and source[pos + 1] == _TRIM_MARKER
            and source.startswith(right, pos + 2)
        ):
            return True, True
        return source.startswith(right, pos), False

    # ─────────────────────────────────────────────────────────────────────
    # Main loop
    # ─────────────────────────────────────────────────────────────────────

    def tokenize(self) -> Iterator[Token]:
        """Yield tokens until EOF.

        Raises:
            TemplateSyntaxError: Unclosed action or comment, bad literal,
                or an unexpected character inside an action.
        """
        source = self._source
        left = self._config.left_delim
        trim_next_text = False

        while self._pos < len(source):
            start = self._pos
            delim_at = source.find(left, start)
            text_end = len(source) if delim_at < 0 else delim_at

            # Left trim marker: "{{- " strips whitespace before the action
            trim_before = (
                delim_at >= 0
                and source.startswith(_TRIM_MARKER, delim_at + len(left))
                and delim_at + len(left) + 1 < len(source)
                and source[delim_at + len(left) + 1] in _SPACE_CHARS
            )

            text_start = start
            if trim_next_text:
                while text_start < text_end and source[text_start] in _SPACE_CHARS:
                    text_start += 1
            stop = text_end
            if trim_before:
                while stop > text_start and source[stop - 1] in _SPACE_CHARS:
                    stop -= 1
            if stop > text_start:
                yield self._token(TokenType.TEXT, text_start, stop)

            if delim_at < 0:
                self._pos = len(source)
                break

            self._pos = delim_at + len(left)
            if trim_before:
                self._pos += 2  # marker and the space after it

            if self._at_comment():
                trim_next_text = self._skip_comment(delim_at)
                continue

            yield self._token(TokenType.LEFT_DELIM, delim_at, delim_at + len(left))
            trim_next_text = yield from self._lex_action(delim_at)

        yield Token(TokenType.EOF, "", *self._location(len(source)))

    def _at_comment(self) -> bool:
        pos = self._pos
        while pos < len(self._source) and self._source[pos] in _SPACE_CHARS:
            pos += 1
        return self._source.startswith(_COMMENT_OPEN, pos)

    def _skip_comment(self, delim_at: int) -> bool:
        """Skip ``/* ... */`` plus the right delimiter; return the trim flag."""
        source = self._source
        open_at = source.index(_COMMENT_OPEN, self._pos)
        close_at = source.find(_COMMENT_CLOSE, open_at + len(_COMMENT_OPEN))
        if close_at < 0:
            raise self._error("unclosed comment", delim_at, ErrorCode.UNCLOSED_COMMENT)
        pos = close_at + len(_COMMENT_CLOSE)
        at_delim, trim = self._at_right_delim(pos)
        if not at_delim:
            raise self._error(
                "comment ends before closing delimiter", pos, ErrorCode.UNCLOSED_COMMENT
            )
        self._pos = pos + (2 if trim else 0) + len(self._config.right_delim)
        return trim

    def _lex_action(self, delim_at: int) -> Iterator[Token]:
        """Lex the inside of one action; returns whether to trim following text."""
        source = self._source
        right = self._config.right_delim
        self._paren_depth = 0

        while True:
            pos = self._pos
            if pos >= len(source):
                raise self._error("unclosed action", delim_at, ErrorCode.UNCLOSED_ACTION)

            at_delim, trim = self._at_right_delim(pos)
            if at_delim:
                if self._paren_depth:
                    raise self._error(
                        "unclosed left paren", pos, ErrorCode.UNCLOSED_ACTION
                    )
                delim_start = pos + (2 if trim else 0)
                self._pos = delim_start + len(right)
                yield self._token(TokenType.RIGHT_DELIM, delim_start, self._pos)
                return trim

            ch = source[pos]
            if ch in _SPACE_CHARS:
                yield self._lex_space()
            elif ch == "|":
                self._pos += 1
                yield self._token(TokenType.PIPE, pos, self._pos)
            elif ch == "(":
                self._paren_depth += 1
                self._pos += 1
                yield self._token(TokenType.LEFT_PAREN, pos, self._pos)
            elif ch == ")":
                self._paren_depth -= 1
                if self._paren_depth < 0:
                    raise self._error(
                        "unexpected right paren", pos, ErrorCode.UNEXPECTED_CHARACTER
                    )
                self._pos += 1
                yield self._token(TokenType.RIGHT_PAREN, pos, self._pos)
            elif ch == ",":
                self._pos += 1
                yield self._token(TokenType.COMMA, pos, self._pos)
            elif ch == ":":
                if not source.startswith(":=", pos):
                    raise self._error("expected :=", pos, ErrorCode.UNEXPECTED_CHARACTER)
                self._pos += 2
                yield self._token(TokenType.DECLARE, pos, self._pos)
            elif ch == "=":
                self._pos += 1
                yield self._token(TokenType.ASSIGN, pos, self._pos)
            elif ch == '"':
                yield self._lex_quote()
            elif ch == "`":
                yield self._lex_raw_quote()
            elif ch == "'":
                yield self._lex_char()
            elif ch == "$":
                yield self._lex_word(TokenType.VARIABLE, pos + 1)
            elif ch == ".":
                nxt = source[pos + 1] if pos + 1 < len(source) else ""
                if nxt.isdigit():
                    yield self._lex_number()
                elif _is_alnum(nxt):
                    yield self._lex_word(TokenType.FIELD, pos + 1)
                else:
                    self._pos += 1
                    yield self._token(TokenType.DOT, pos, self._pos)
            elif ch.isdigit() or (ch in "+-" and pos + 1 < len(source) and
                                  (source[pos + 1].isdigit() or source[pos + 1] == ".")):
                yield self._lex_number()
            elif _is_alnum(ch):
                yield self._lex_identifier()
            else:
                raise self._error(
                    f"unexpected {ch!r} in action", pos, ErrorCode.UNEXPECTED_CHARACTER
                )

    # ─────────────────────────────────────────────────────────────────────
    # Token scanners
    # ─────────────────────────────────────────────────────────────────────

    def _lex_space(self) -> Token:
        start = self._pos
        source = self._source
        while self._pos < len(source) and source[self._pos] in _SPACE_CHARS:
            # Leave " -}}" for the delimiter check
            if self._at_right_delim(self._pos)[1]:
                break
            self._pos += 1
        return self._token(TokenType.SPACE, start, self._pos)

    def _lex_word(self, token_type: TokenType, pos: int) -> Token:
        start = self._pos
        source = self._source
        while pos < len(source) and _is_alnum(source[pos]):
            pos += 1
        self._pos = pos
        return self._token(token_type, start, pos)

    def _lex_identifier(self) -> Token:
        token = self._lex_word(TokenType.IDENTIFIER, self._pos)
        if token.value in ("true", "false"):
            return token._replace(type=TokenType.BOOL)
        if token.value in KEYWORDS:
            return token._replace(type=TokenType.KEYWORD)
        return token

    def _lex_number(self) -> Token:
        match = _NUMBER_RE.match(self._source, self._pos)
        if match is None or match.end() == self._pos:
            raise self._error("bad number syntax", self._pos, ErrorCode.UNEXPECTED_CHARACTER)
        start = self._pos
        end = match.end()
        if end < len(self._source) and _is_alnum(self._source[end]):
            raise self._error(
                f"bad number syntax: {self._source[start:end + 1]!r}",
                start,
                ErrorCode.UNEXPECTED_CHARACTER,
            )
        self._pos = end
        return self._token(TokenType.NUMBER, start, end)

    def _lex_quote(self) -> Token:
        start = self._pos
        source = self._source
        pos = start + 1
        while True:
            if pos >= len(source) or source[pos] == "\n":
                raise self._error(
                    "unterminated quoted string", start, ErrorCode.UNTERMINATED_STRING
                )
            ch = source[pos]
            if ch == "\\":
                pos += 2
                continue
            pos += 1
            if ch == '"':
                break
        self._pos = pos
        return self._token(TokenType.STRING, start, pos)

    def _lex_raw_quote(self) -> Token:
        start = self._pos
        end = self._source.find("`", start + 1)
        if end < 0:
            raise self._error(
                "unterminated raw quoted string", start, ErrorCode.UNTERMINATED_STRING
            )
        self._pos = end + 1
        return self._token(TokenType.RAW_STRING, start, self._pos)

    def _lex_char(self) -> Token:
        start = self._pos
        source = self._source
        pos = start + 1
        while True:
            if pos >= len(source) or source[pos] == "\n":
                raise self._error(
                    "unterminated character constant", start, ErrorCode.UNTERMINATED_STRING
                )
            ch = source[pos]
            if ch == "\\":
                pos += 2
                continue
            pos += 1
            if ch == "'":
                break
        self._pos = pos
        return self._token(TokenType.CHAR, start, pos)


def tokenize(source: str, config: LexerConfig | None = None) -> list[Token]:
    """Tokenize ``source`` into a list (convenience wrapper)."""
    return list(Lexer(source, config).tokenize())
