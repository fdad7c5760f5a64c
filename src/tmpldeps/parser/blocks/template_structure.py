"""Template structure block parsing.

Provides the mixin for named templates: ``define``, ``template`` and
``block``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tmpldeps._types import TokenType
from tmpldeps.nodes import ListNode, TemplateCall, Text
from tmpldeps.parser.blocks.core import BlockStackMixin

if TYPE_CHECKING:
    from tmpldeps._types import Token
    from tmpldeps.nodes import Pipe


def is_empty_tree(body: ListNode) -> bool:
    """True if ``body`` holds nothing but whitespace text."""
    return all(isinstance(node, Text) and not node.data.strip() for node in body.nodes)


class TemplateStructureBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing named template definitions and calls.

    Required Host Attributes:
        - All from BlockStackMixin
        - _defines: dict of template name to body
        - _parse_body: method
        - _parse_pipeline: method
        - _unquote_token: method
    """

    if TYPE_CHECKING:
        _defines: dict[str, ListNode]

        def _parse_body(self) -> tuple[ListNode, str]: ...

        def _parse_pipeline(self, context: str, end: TokenType) -> Pipe: ...

        def _unquote_token(self, token: Token) -> str: ...

    def _parse_template_name(self, context: str) -> str:
        token = self._next_non_space()
        if token.type not in (TokenType.STRING, TokenType.RAW_STRING):
            raise self._unexpected(token, context)
        return self._unquote_token(token)

    def _parse_define(self, start: Token) -> None:
        """Parse {{define "name"}}...{{end}} into the defines table."""
        context = "define clause"
        if self._block_stack:
            raise self._error(
                "{{define}} is only allowed at the top level",
                start,
                suggestion="Move the define out of the enclosing block",
            )
        name = self._parse_template_name(context)
        self._expect(TokenType.RIGHT_DELIM, context)
        self._add_definition(name, self._parse_named_body("define", start, context), start)

    def _parse_template_call(self, start: Token) -> TemplateCall:
        """Parse {{template "name"}} or {{template "name" pipeline}}."""
        context = "template clause"
        name = self._parse_template_name(context)
        pipe: Pipe | None = None
        if self._peek_non_space().type == TokenType.RIGHT_DELIM:
            self._advance()
        else:
            pipe = self._parse_pipeline(context, TokenType.RIGHT_DELIM)
        return TemplateCall(start.lineno, start.col_offset, name=name, pipe=pipe)

    def _parse_block_tag(self, start: Token) -> TemplateCall:
        """Parse {{block "name" pipeline}}...{{end}}.

        Shorthand for defining ``name`` and invoking it in place.
        """
        context = "block clause"
        name = self._parse_template_name(context)
        pipe = self._parse_pipeline(context, TokenType.RIGHT_DELIM)
        self._add_definition(name, self._parse_named_body("block", start, context), start)
        return TemplateCall(start.lineno, start.col_offset, name=name, pipe=pipe)

    def _parse_named_body(self, kind: str, start: Token, context: str) -> ListNode:
        with self._isolated_scope():
            self._push_block(kind, start)
            body, stop = self._parse_body()
            if stop == "eof":
                raise self._unclosed_block_error()
            if stop != "end":
                raise self._error(
                    f"unexpected {{{{{stop}}}}} in {context}", self._peek_non_space()
                )
            self._next_non_space()  # consume 'end'
            self._expect(TokenType.RIGHT_DELIM, context)
        return body

    def _add_definition(self, name: str, body: ListNode, start: Token) -> None:
        existing = self._defines.get(name)
        if existing is not None and not is_empty_tree(existing) and not is_empty_tree(body):
            raise self._error(f"template: multiple definition of template {name!r}", start)
        if existing is None or is_empty_tree(existing):
            self._defines[name] = body
