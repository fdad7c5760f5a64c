"""Token types shared by the lexer and parser."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class TokenType(Enum):
    """Kinds of tokens produced by the lexer."""

    TEXT = "text"
    LEFT_DELIM = "left_delim"
    RIGHT_DELIM = "right_delim"
    SPACE = "space"

    FIELD = "field"
    DOT = "dot"
    VARIABLE = "variable"
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"

    BOOL = "bool"
    NUMBER = "number"
    CHAR = "char"
    STRING = "string"
    RAW_STRING = "raw_string"

    PIPE = "pipe"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"
    DECLARE = "declare"
    ASSIGN = "assign"
    COMMA = "comma"

    EOF = "eof"


# Words with statement meaning inside an action.
KEYWORDS: frozenset[str] = frozenset(
    {
        "block",
        "break",
        "continue",
        "define",
        "else",
        "end",
        "if",
        "nil",
        "range",
        "template",
        "with",
    }
)


class Token(NamedTuple):
    """A lexed token with its source position.

    Attributes:
        type: Token kind
        value: Raw source text of the token
        lineno: 1-based line number
        col_offset: 0-based column of the first character
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
