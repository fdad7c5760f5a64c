"""Template parser.

Turns template source into an immutable AST.

Example:
    >>> from tmpldeps.parser import parse
    >>> ast = parse('{{getv "/app/port" "8080"}}', functions={"getv"})
    >>> ast.body.nodes[0]
    Action(...)
"""

from __future__ import annotations

from collections.abc import Iterable

from tmpldeps.lexer import Lexer, LexerConfig
from tmpldeps.nodes import Template
from tmpldeps.parser.core import Parser
from tmpldeps.parser.errors import ParseError
from tmpldeps.parser.expressions import parse_number, unquote


def parse(
    source: str,
    *,
    name: str | None = None,
    functions: Iterable[str] = (),
    config: LexerConfig | None = None,
) -> Template:
    """Tokenize and parse ``source``.

    Raises:
        TemplateSyntaxError: Lexer or parser failure
    """
    tokens = list(Lexer(source, config, name=name).tokenize())
    return Parser(tokens, name=name, source=source, functions=functions).parse()


__all__ = ["ParseError", "Parser", "parse", "parse_number", "unquote"]
