"""Recursive descent parser for dot-path/pipeline templates.

Consumes the token stream from the lexer and builds an immutable AST.
The checks it performs are the ones the template language itself makes at
parse time: unknown functions, undefined variables, misplaced ``break`` /
``continue``, malformed pipelines and unbalanced blocks.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from tmpldeps._types import Token, TokenType
from tmpldeps.nodes import Action, ListNode, Node, Template, Text
from tmpldeps.parser.blocks.control_flow import ControlFlowBlockParsingMixin
from tmpldeps.parser.blocks.template_structure import TemplateStructureBlockParsingMixin
from tmpldeps.parser.expressions import ExpressionParsingMixin
from tmpldeps.utils.constants import BUILTIN_FUNCTIONS, DEFAULT_TEMPLATE_NAME


class Parser(
    ControlFlowBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
    ExpressionParsingMixin,
):
    """Build a Template AST from tokens.

    Args:
        tokens: Complete token sequence ending in EOF
        name: Template name for diagnostics
        source: Original source, used for error snippets
        functions: Function names callable besides the builtins

    Example:
        >>> tokens = tokenize('{{getv "port" "80"}}')
        >>> Parser(tokens, functions={"getv"}).parse()
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        name: str | None = None,
        source: str | None = None,
        functions: Iterable[str] = (),
    ) -> None:
        self._tokens = tokens
        self._pos = 0
        self._name = name or DEFAULT_TEMPLATE_NAME
        self._source = source
        self._functions = frozenset(functions)
        self._block_stack: list[tuple[str, Token]] = []
        self._vars: list[str] = ["$"]
        self._range_depth = 0
        self._paren_depth = 0
        self._outer_depth = 0
        self._defines: dict[str, ListNode] = {}

    def _is_function(self, name: str) -> bool:
        return name in BUILTIN_FUNCTIONS or name in self._functions

    def parse(self) -> Template:
        """Parse the whole token stream.

        Raises:
            ParseError: On any syntax error
        """
        body, stop = self._parse_body()
        if stop != "eof":
            raise self._error(
                f"unexpected {{{{{stop}}}}}",
                self._peek_non_space(),
                suggestion=f"Remove the {{{{{stop}}}}} or open a block before it",
            )
        return Template(1, 0, name=self._name, body=body, defines=self._defines)

    def _parse_body(self) -> tuple[ListNode, str]:
        """Parse nodes until ``{{end}}``, ``{{else}}`` or EOF.

        Returns the list and the stop word: ``"end"``, ``"else"`` or ``"eof"``.
        On ``end``/``else`` the left delimiter is consumed and the keyword is
        left for the caller.
        """
        start = self._current
        nodes: list[Node] = []
        while True:
            token = self._current
            if token.type == TokenType.EOF:
                return ListNode(start.lineno, start.col_offset, tuple(nodes)), "eof"
            if token.type == TokenType.TEXT:
                self._advance()
                nodes.append(Text(token.lineno, token.col_offset, data=token.value))
                continue
            if token.type != TokenType.LEFT_DELIM:
                raise self._unexpected(token, "template body")

            self._advance()  # consume left delimiter
            if self._at_keyword("end", "else"):
                return (
                    ListNode(start.lineno, start.col_offset, tuple(nodes)),
                    self._peek_non_space().value,
                )
            node = self._parse_action()
            if node is not None:
                nodes.append(node)

    def _parse_action(self) -> Node | None:
        """Parse one action after its left delimiter.

        ``{{define}}`` yields no node; its body goes to the defines table.
        """
        token = self._peek_non_space()
        if token.type == TokenType.KEYWORD:
            keyword = token.value
            if keyword in ("if", "range", "with"):
                self._advance()
                return self._parse_branch(keyword, token)
            if keyword == "template":
                self._advance()
                return self._parse_template_call(token)
            if keyword == "block":
                self._advance()
                return self._parse_block_tag(token)
            if keyword == "define":
                self._advance()
                self._parse_define(token)
                return None
            if keyword == "break":
                self._advance()
                return self._parse_break(token)
            if keyword == "continue":
                self._advance()
                return self._parse_continue(token)
        pipe = self._parse_pipeline("command", TokenType.RIGHT_DELIM)
        return Action(token.lineno, token.col_offset, pipe=pipe)
