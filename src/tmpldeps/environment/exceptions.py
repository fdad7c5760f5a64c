"""Exceptions for the tmpldeps template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateSyntaxError       # Lexer/parser failure (upstream syntax error)
├── ExcessiveNestingError     # Extraction depth ceiling exceeded
└── TemplateRuntimeError      # Render-time error with context
    ├── KeyNotFoundError      # Accessor asked for a key that is absent
    ├── ValueTypeError        # Value present but of the wrong type
    └── MalformedDataError    # Structured data could not be decoded

Extraction only ever raises the first two. Everything under
TemplateRuntimeError belongs to the render step.

Example:
    ```
    T-PAR-003: function "getvv" not defined
      --> config.tmpl:2:8
       |
      2 | port = {{getvv "port"}}
       |         ^
       |
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from tmpldeps.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for template errors.

    Format: T-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), ANA (analysis), RUN (runtime)
    """

    # Lexer errors (T-LEX-xxx)
    UNCLOSED_ACTION = "T-LEX-001"
    UNCLOSED_COMMENT = "T-LEX-002"
    UNTERMINATED_STRING = "T-LEX-003"
    UNEXPECTED_CHARACTER = "T-LEX-004"

    # Parser errors (T-PAR-xxx)
    UNEXPECTED_TOKEN = "T-PAR-001"
    UNCLOSED_BLOCK = "T-PAR-002"
    UNDEFINED_FUNCTION = "T-PAR-003"
    UNDEFINED_VARIABLE = "T-PAR-004"
    INVALID_PIPELINE = "T-PAR-005"
    NESTING_TOO_DEEP = "T-PAR-006"

    # Analysis errors (T-ANA-xxx)
    EXCESSIVE_NESTING = "T-ANA-001"

    # Runtime errors (T-RUN-xxx)
    KEY_NOT_FOUND = "T-RUN-001"
    VALUE_TYPE = "T-RUN-002"
    MALFORMED_DATA = "T-RUN-003"
    FUNCTION_ERROR = "T-RUN-004"
    EXECUTION_ERROR = "T-RUN-005"
    TEMPLATE_DEPTH = "T-RUN-006"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser', 'analysis')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "ANA": "analysis",
            "RUN": "runtime",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet with line numbers and the error line highlighted."""
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            is_error = lineno == self.error_line
            parts.append(terminal.format_source_line(lineno, content, is_error=is_error))
            if is_error and self.column is not None:
                caret = " " * self.column + "^"
                parts.append(f"{terminal.dim_text('   |')}  {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 1,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all template errors.

        >>> try:
        ...     env.extract_names(source)
        ... except TemplateError as e:
        ...     log.error(e.format_compact())

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a structured, human-readable summary."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = terminal.format_error_header(self.code.value, header)
        return header


class TemplateSyntaxError(TemplateError):
    """Template source could not be turned into an AST.

    Raised by the lexer and parser. Extraction propagates it unchanged.

    When ``source`` and ``lineno`` are provided, the message includes a
    source snippet with the offending line. If ``col_offset`` is also
    given, a caret (``^``) points at the exact column.
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def location(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self.location}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                snippet = f"\n   |\n{self.lineno:>3} | {lines[self.lineno - 1]}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header

    def format_compact(self) -> str:
        """Format syntax error as structured terminal diagnostic."""
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  --> {terminal.location(self.location)}",
        ]
        if self.source and self.lineno:
            snippet = build_source_snippet(self.source, self.lineno, column=self.col_offset)
            parts.append(snippet.format())
        return "\n".join(parts)


class ExcessiveNestingError(TemplateError):
    """The extraction walk went deeper than the configured ceiling.

    Bounds pathological or adversarial templates. Terminal for the
    extraction call: no partial result is returned.
    """

    code: ErrorCode | None = ErrorCode.EXCESSIVE_NESTING

    def __init__(self, max_depth: int, name: str | None = None):
        self.max_depth = max_depth
        self.name = name
        location = f" in {name}" if name else ""
        super().__init__(
            f"Template is too deeply nested{location}: "
            f"exceeded maximum depth of {max_depth}"
        )


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Output Format:
            ```
            Runtime Error: error calling div: integer division by zero
              Location: stats.tmpl:4
              Expression: {{div .total .count}}
              Suggestion: Check that 'count' is non-zero
            ```

    Attributes:
        message: Error description
        expression: Template expression that failed
        values: Dict of variable names → values for context
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.EXECUTION_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.expression = expression
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {terminal.location(loc)}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type(value).__name__})")

        if self.suggestion:
            parts.append(f"  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format runtime error as structured terminal diagnostic."""
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message)
        ]
        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {terminal.location(loc)}")
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class KeyNotFoundError(TemplateRuntimeError):
    """An accessor function asked for a key missing from the value environment.

    Example:
            >>> {{get "db_host"}}
        KeyNotFoundError: key db_host not found
          Suggestion: Provide a value for 'db_host', or use getv with a default
    """

    code: ErrorCode | None = ErrorCode.KEY_NOT_FOUND

    def __init__(self, key: str, **kwargs: Any):
        self.key = key
        kwargs.setdefault(
            "suggestion", f"Provide a value for '{key}', or use getv with a default"
        )
        super().__init__(f"key {key} not found", **kwargs)


class ValueTypeError(TemplateRuntimeError):
    """A value exists but has the wrong type for the function reading it."""

    code: ErrorCode | None = ErrorCode.VALUE_TYPE

    def __init__(self, key: str, value: Any, expected: str, **kwargs: Any):
        self.key = key
        self.expected = expected
        super().__init__(
            f"value of {key} must be {expected}, got {type(value).__name__}",
            values={key: value},
            **kwargs,
        )


class MalformedDataError(TemplateRuntimeError):
    """Structured data behind a key could not be decoded into the expected shape."""

    code: ErrorCode | None = ErrorCode.MALFORMED_DATA

    def __init__(self, key: str, expected: str, detail: str, **kwargs: Any):
        self.key = key
        self.expected = expected
        self.detail = detail
        super().__init__(f"value of {key} is not a valid JSON {expected}: {detail}", **kwargs)
