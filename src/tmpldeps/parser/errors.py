"""Parser error handling.

Provides ParseError: a TemplateSyntaxError that knows the offending token
and can carry a fix suggestion.
"""

from __future__ import annotations

from tmpldeps._types import Token
from tmpldeps.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Parser error with source context.

    Displays errors with source code snippets and visual pointers,
    matching the format used by the lexer for consistency.
    """

    def __init__(
        self,
        message: str,
        token: Token,
        source: str | None = None,
        name: str | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.token = token
        self.suggestion = suggestion
        super().__init__(
            message,
            lineno=token.lineno,
            name=name,
            source=source,
            col_offset=token.col_offset,
            code=code,
        )

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg
