"""Tests for the template lexer."""

from __future__ import annotations

import pytest

from tmpldeps._types import TokenType
from tmpldeps.environment.exceptions import ErrorCode, TemplateSyntaxError
from tmpldeps.lexer import Lexer, LexerConfig, tokenize


def _types(source: str, config: LexerConfig | None = None) -> list[TokenType]:
    return [t.type for t in tokenize(source, config)]


def _values(source: str) -> list[str]:
    return [t.value for t in tokenize(source) if t.type != TokenType.EOF]


class TestTextAndDelimiters:
    """Text outside actions and the delimiters themselves."""

    def test_plain_text(self) -> None:
        tokens = tokenize("just text")
        assert [t.type for t in tokens] == [TokenType.TEXT, TokenType.EOF]
        assert tokens[0].value == "just text"

    def test_empty_source(self) -> None:
        assert _types("") == [TokenType.EOF]

    def test_field_action(self) -> None:
        assert _types("Hello {{.name}}!") == [
            TokenType.TEXT,
            TokenType.LEFT_DELIM,
            TokenType.FIELD,
            TokenType.RIGHT_DELIM,
            TokenType.TEXT,
            TokenType.EOF,
        ]
        assert _values("Hello {{.name}}!") == ["Hello ", "{{", ".name", "}}", "!"]

    def test_spaces_are_tokens(self) -> None:
        """Whitespace inside an action separates operands, so it is kept."""
        assert _types("{{ .a .b }}") == [
            TokenType.LEFT_DELIM,
            TokenType.SPACE,
            TokenType.FIELD,
            TokenType.SPACE,
            TokenType.FIELD,
            TokenType.SPACE,
            TokenType.RIGHT_DELIM,
            TokenType.EOF,
        ]

    def test_dotted_path_is_one_field_token_per_segment(self) -> None:
        assert _values("{{.a.b}}") == ["{{", ".a", ".b", "}}"]

    def test_custom_delimiters(self) -> None:
        config = LexerConfig(left_delim="[[", right_delim="]]")
        assert _types("a [[.x]] {{.y}}", config) == [
            TokenType.TEXT,
            TokenType.LEFT_DELIM,
            TokenType.FIELD,
            TokenType.RIGHT_DELIM,
            TokenType.TEXT,
            TokenType.EOF,
        ]

    def test_empty_delimiter_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            LexerConfig(left_delim="")

    def test_line_and_column(self) -> None:
        tokens = tokenize("line one\n  {{.b}}")
        delim = tokens[1]
        assert delim.type == TokenType.LEFT_DELIM
        assert (delim.lineno, delim.col_offset) == (2, 2)


class TestTrimAndComments:
    """Trim markers and comments."""

    def test_trim_markers_strip_surrounding_space(self) -> None:
        values = _values("a  \n {{- .x -}} \n  b")
        assert values[0] == "a"
        assert values[-1] == "b"

    def test_dash_without_space_is_a_number(self) -> None:
        assert _values("{{-3}}") == ["{{", "-3", "}}"]

    def test_comment_dropped(self) -> None:
        assert _values("a{{/* note */}}b") == ["a", "b"]

    def test_trimmed_comment(self) -> None:
        assert _values("a {{- /* note */ -}} b") == ["a", "b"]

    def test_unclosed_comment(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tokenize("{{/* never closed }}")
        assert exc_info.value.code == ErrorCode.UNCLOSED_COMMENT


class TestActionTokens:
    """Tokens recognised inside an action."""

    def test_keywords_and_bools(self) -> None:
        tokens = [t for t in tokenize("{{if true}}") if t.type != TokenType.SPACE]
        assert tokens[1].type == TokenType.KEYWORD
        assert tokens[1].value == "if"
        assert tokens[2].type == TokenType.BOOL

    def test_identifier(self) -> None:
        tokens = tokenize("{{getv}}")
        assert tokens[1].type == TokenType.IDENTIFIER
        assert tokens[1].value == "getv"

    def test_declaration(self) -> None:
        kinds = [t.type for t in tokenize("{{$x := .a}}") if t.type != TokenType.SPACE]
        assert kinds == [
            TokenType.LEFT_DELIM,
            TokenType.VARIABLE,
            TokenType.DECLARE,
            TokenType.FIELD,
            TokenType.RIGHT_DELIM,
            TokenType.EOF,
        ]

    def test_range_declaration_punctuation(self) -> None:
        kinds = {t.type for t in tokenize("{{range $i, $e := .xs}}{{end}}")}
        assert TokenType.COMMA in kinds
        assert TokenType.DECLARE in kinds

    def test_pipe_and_parens(self) -> None:
        kinds = [t.type for t in tokenize("{{(.a) | len}}")]
        assert TokenType.LEFT_PAREN in kinds
        assert TokenType.RIGHT_PAREN in kinds
        assert TokenType.PIPE in kinds

    def test_bare_dot(self) -> None:
        assert tokenize("{{.}}")[1].type == TokenType.DOT

    @pytest.mark.parametrize("number", ["42", "1.5e3", "0x1F", "-7", ".5", "1_000", "3i"])
    def test_numbers(self, number: str) -> None:
        token = tokenize("{{" + number + "}}")[1]
        assert token.type == TokenType.NUMBER
        assert token.value == number

    def test_quoted_string_keeps_escapes(self) -> None:
        token = tokenize(r'{{"a\"b"}}')[1]
        assert token.type == TokenType.STRING
        assert token.value == r'"a\"b"'

    def test_raw_string_spans_lines(self) -> None:
        token = tokenize("{{`a\nb`}}")[1]
        assert token.type == TokenType.RAW_STRING

    def test_char_constant(self) -> None:
        assert tokenize("{{'x'}}")[1].type == TokenType.CHAR


class TestLexerErrors:
    """Malformed actions raise TemplateSyntaxError with a code."""

    @pytest.mark.parametrize(
        ("source", "code"),
        [
            ("{{.a", ErrorCode.UNCLOSED_ACTION),
            ("{{(.a}}", ErrorCode.UNCLOSED_ACTION),
            ('{{"abc}}', ErrorCode.UNTERMINATED_STRING),
            ("{{`abc}}", ErrorCode.UNTERMINATED_STRING),
            ("{{.a ; .b}}", ErrorCode.UNEXPECTED_CHARACTER),
            ("{{.a)}}", ErrorCode.UNEXPECTED_CHARACTER),
            ("{{.a : .b}}", ErrorCode.UNEXPECTED_CHARACTER),
            ("{{12abc}}", ErrorCode.UNEXPECTED_CHARACTER),
        ],
    )
    def test_error_codes(self, source: str, code: ErrorCode) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tokenize(source)
        assert exc_info.value.code == code

    def test_error_location(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            list(Lexer("ok\n{{.a", name="x.tmpl").tokenize())
        err = exc_info.value
        assert err.lineno == 2
        assert err.name == "x.tmpl"
        assert "x.tmpl:2" in str(err)
