"""Tests for error types, source snippets and terminal colors."""

from __future__ import annotations

import pytest

from tmpldeps import (
    ErrorCode,
    ExcessiveNestingError,
    KeyNotFoundError,
    MalformedDataError,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    ValueTypeError,
    build_source_snippet,
)
from tmpldeps.environment import terminal


@pytest.fixture
def no_colors(monkeypatch):
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


class TestErrorCodes:
    def test_categories(self) -> None:
        assert ErrorCode.UNCLOSED_ACTION.category == "lexer"
        assert ErrorCode.UNDEFINED_FUNCTION.category == "parser"
        assert ErrorCode.EXCESSIVE_NESTING.category == "analysis"
        assert ErrorCode.KEY_NOT_FOUND.category == "runtime"

    def test_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_hierarchy(self) -> None:
        for cls in (TemplateSyntaxError, ExcessiveNestingError, TemplateRuntimeError):
            assert issubclass(cls, TemplateError)
        for cls in (KeyNotFoundError, ValueTypeError, MalformedDataError):
            assert issubclass(cls, TemplateRuntimeError)


class TestTemplateSyntaxError:
    """Syntax errors point at the offending source."""

    def test_message_with_snippet(self) -> None:
        source = "line one\nport = {{getvv \"port\"}}\n"
        exc = TemplateSyntaxError(
            'function "getvv" not defined',
            lineno=2,
            name="config.tmpl",
            source=source,
            col_offset=9,
            code=ErrorCode.UNDEFINED_FUNCTION,
        )
        text = str(exc)
        assert text.startswith('Syntax Error: function "getvv" not defined')
        assert "--> config.tmpl:2:9" in text
        assert '  2 | port = {{getvv "port"}}' in text
        assert text.endswith(" " * 9 + "^")

    def test_location_without_line(self) -> None:
        assert TemplateSyntaxError("bad").location == "<template>"

    def test_format_compact(self, no_colors) -> None:
        exc = TemplateSyntaxError(
            "unexpected EOF", lineno=1, name="t", source="{{if .a}}", code=ErrorCode.UNCLOSED_BLOCK
        )
        compact = exc.format_compact()
        assert compact.splitlines()[0] == "T-PAR-002: unexpected EOF"
        assert ">  1 | {{if .a}}" in compact

    def test_raised_by_environment(self, env) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.extract_names("ok\n{{getvv \"port\"}}")
        exc = exc_info.value
        assert exc.code is ErrorCode.UNDEFINED_FUNCTION
        assert exc.lineno == 2
        assert exc.name == "template.tmpl"


class TestExcessiveNestingError:
    def test_message(self) -> None:
        exc = ExcessiveNestingError(40, "deep.tmpl")
        assert str(exc) == (
            "Template is too deeply nested in deep.tmpl: exceeded maximum depth of 40"
        )
        assert exc.code is ErrorCode.EXCESSIVE_NESTING

    def test_format_compact_adds_code(self, no_colors) -> None:
        assert ExcessiveNestingError(3).format_compact().startswith("T-ANA-001: ")


class TestRuntimeErrors:
    """Runtime errors carry context."""

    def test_full_message(self, no_colors) -> None:
        exc = TemplateRuntimeError(
            "error calling div: integer divide by zero",
            expression="{{div .total .count}}",
            values={"count": 0},
            template_name="stats.tmpl",
            lineno=4,
            suggestion="Check that 'count' is non-zero",
        )
        lines = str(exc).splitlines()
        assert lines[0] == "Runtime Error: error calling div: integer divide by zero"
        assert "  Location: stats.tmpl:4" in lines
        assert "  Expression: {{div .total .count}}" in lines
        assert "    count = 0 (int)" in lines
        assert "  Suggestion: Check that 'count' is non-zero" in lines

    def test_long_values_truncated(self) -> None:
        exc = TemplateRuntimeError("boom", values={"v": "x" * 200})
        line = next(line for line in str(exc).splitlines() if line.startswith("    v = "))
        assert "..." in line
        assert len(line) < 120

    def test_compact_with_snippet(self, no_colors) -> None:
        snippet = build_source_snippet("a\nb\nc", 2)
        exc = TemplateRuntimeError("boom", template_name="t", lineno=2, source_snippet=snippet)
        compact = exc.format_compact()
        assert compact.splitlines()[0] == "T-RUN-005: boom"
        assert ">  2 | b" in compact

    def test_key_not_found(self) -> None:
        exc = KeyNotFoundError("db_host")
        assert exc.message == "key db_host not found"
        assert exc.suggestion == "Provide a value for 'db_host', or use getv with a default"

    def test_value_type(self) -> None:
        exc = ValueTypeError("port", [1], "a string")
        assert exc.message == "value of port must be a string, got list"
        assert exc.values == {"port": [1]}

    def test_malformed_data(self) -> None:
        exc = MalformedDataError("cfg", "object", "found array")
        assert exc.message == "value of cfg is not a valid JSON object: found array"
        assert exc.code is ErrorCode.MALFORMED_DATA


class TestSourceSnippet:
    def test_context_lines(self) -> None:
        snippet = build_source_snippet("1\n2\n3\n4\n5", 3, context_lines=1)
        assert snippet.lines == ((2, "2"), (3, "3"), (4, "4"))
        assert snippet.error_line == 3

    def test_clamped_at_edges(self) -> None:
        snippet = build_source_snippet("only", 1, context_lines=3)
        assert snippet.lines == ((1, "only"),)

    def test_caret(self, no_colors) -> None:
        text = build_source_snippet("abcdef", 1, column=3).format()
        assert "   |  " + " " * 3 + "^" in text


class TestTerminal:
    """ANSI helpers honour the cached color decision."""

    def test_plain_when_disabled(self, no_colors) -> None:
        assert terminal.colorize("Error", "red", "bold") == "Error"
        assert not terminal.supports_color()

    def test_codes_when_enabled(self, monkeypatch) -> None:
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.error_code("T-RUN-001")
        assert result == "\033[91m\033[1mT-RUN-001\033[0m"
        assert terminal.strip_colors(result) == "T-RUN-001"

    def test_no_colors_given(self, monkeypatch) -> None:
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert terminal.colorize("x") == "x"

    def test_env_detection(self, monkeypatch) -> None:
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert terminal._should_use_colors() is True
        monkeypatch.delenv("FORCE_COLOR")
        monkeypatch.setenv("NO_COLOR", "1")
        assert terminal._should_use_colors() is False

    def test_header_and_source_line(self, no_colors) -> None:
        assert terminal.format_error_header(None, "msg") == "msg"
        assert terminal.format_error_header("T-LEX-001", "msg") == "T-LEX-001: msg"
        assert terminal.format_source_line(7, "x", is_error=False) == "   7 | x"
