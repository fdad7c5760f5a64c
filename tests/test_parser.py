"""Tests for the template parser."""

from __future__ import annotations

import pytest

from tmpldeps.environment.exceptions import ErrorCode, TemplateSyntaxError
from tmpldeps.nodes import (
    Action,
    Chain,
    Field,
    Identifier,
    If,
    ListNode,
    Number,
    Range,
    String,
    TemplateCall,
    Text,
    Variable,
    With,
)
from tmpldeps.parser import ParseError, parse, parse_number, unquote

ACCESSORS = {"getv", "exists", "get", "json", "jsonArray"}


def _first_action(source: str) -> Action:
    node = parse(source, functions=ACCESSORS).body.nodes[0]
    assert isinstance(node, Action)
    return node


class TestExpressions:
    """Operands, commands and pipelines."""

    def test_field_path(self) -> None:
        arg = _first_action("{{.a.b}}").pipe.cmds[0].args[0]
        assert isinstance(arg, Field)
        assert arg.ident == ("a", "b")
        assert arg.path == "a.b"

    def test_space_separates_arguments(self) -> None:
        args = _first_action("{{print .a .b}}").pipe.cmds[0].args
        assert isinstance(args[0], Identifier)
        assert [str(a) for a in args[1:]] == [".a", ".b"]

    def test_pipeline_stages(self) -> None:
        pipe = _first_action('{{.a | printf "%s"}}').pipe
        assert len(pipe.cmds) == 2
        assert str(pipe) == '.a | printf "%s"'

    def test_parenthesized_argument(self) -> None:
        args = _first_action('{{getv (print "a" "b")}}').pipe.cmds[0].args
        assert str(args[1]) == 'print "a" "b"'

    def test_chain_on_parenthesized_pipeline(self) -> None:
        arg = _first_action('{{(index .m "k").name}}').pipe.cmds[0].args[0]
        assert isinstance(arg, Chain)
        assert arg.fields == ("name",)

    def test_variable_with_fields(self) -> None:
        ast = parse("{{$x := .a}}{{$x.b.c}}")
        arg = ast.body.nodes[1].pipe.cmds[0].args[0]
        assert isinstance(arg, Variable)
        assert arg.ident == ("$x", "b", "c")

    def test_root_variable_is_always_declared(self) -> None:
        arg = _first_action("{{$.a}}").pipe.cmds[0].args[0]
        assert isinstance(arg, Variable)
        assert arg.name == "$"

    def test_literals(self) -> None:
        args = _first_action("{{print 0x10 1.5 'a' `raw` \"q\\t\"}}").pipe.cmds[0].args
        assert [a.value for a in args[1:4]] == [16, 1.5, 97]
        assert isinstance(args[4], String)
        assert args[4].value == "raw"
        assert args[5].value == "q\t"

    def test_number_keeps_spelling(self) -> None:
        arg = _first_action("{{print 1_000}}").pipe.cmds[0].args[1]
        assert isinstance(arg, Number)
        assert arg.value == 1000
        assert str(arg) == "1_000"

    def test_declaration(self) -> None:
        pipe = _first_action("{{$x := .a}}").pipe
        assert [v.name for v in pipe.decl] == ["$x"]
        assert pipe.is_assign is False

    def test_assignment(self) -> None:
        pipe = parse("{{$x := 1}}{{$x = 2}}").body.nodes[1].pipe
        assert pipe.is_assign is True


class TestControlFlow:
    """if / range / with and named templates."""

    def test_if_else_if_chain(self) -> None:
        node = parse("{{if .a}}A{{else if .b}}B{{else}}C{{end}}").body.nodes[0]
        assert isinstance(node, If)
        nested = node.else_.nodes[0]
        assert isinstance(nested, If)
        assert isinstance(nested.else_, ListNode)
        assert isinstance(nested.else_.nodes[0], Text)
        assert nested.else_.nodes[0].data == "C"

    def test_range_declarations(self) -> None:
        node = parse("{{range $i, $e := .xs}}{{$i}}{{$e}}{{end}}").body.nodes[0]
        assert isinstance(node, Range)
        assert [v.name for v in node.pipe.decl] == ["$i", "$e"]
        assert len(node.body.nodes) == 2

    def test_range_else(self) -> None:
        node = parse("{{range .xs}}x{{else}}none{{end}}").body.nodes[0]
        assert node.else_ is not None

    def test_with_else_with(self) -> None:
        node = parse("{{with .a}}A{{else with .b}}B{{end}}").body.nodes[0]
        assert isinstance(node, With)
        assert isinstance(node.else_.nodes[0], With)

    def test_break_and_continue_inside_range(self) -> None:
        ast = parse("{{range .xs}}{{if .}}{{break}}{{end}}{{continue}}{{end}}")
        assert isinstance(ast.body.nodes[0], Range)

    def test_define_and_template(self) -> None:
        ast = parse('{{define "x"}}hi {{.name}}{{end}}{{template "x" .}}')
        assert set(ast.defines) == {"x"}
        call = ast.body.nodes[0]
        assert isinstance(call, TemplateCall)
        assert call.name == "x"
        assert call.pipe is not None

    def test_template_without_pipeline(self) -> None:
        call = parse('{{template "x"}}').body.nodes[0]
        assert call.pipe is None

    def test_block_defines_and_calls(self) -> None:
        ast = parse('{{block "b" .}}default{{end}}')
        assert "b" in ast.defines
        assert isinstance(ast.body.nodes[0], TemplateCall)

    def test_empty_redefinition_allowed(self) -> None:
        ast = parse('{{define "x"}}{{end}}{{define "x"}}body{{end}}')
        assert ast.defines["x"].nodes[0].data == "body"

    def test_control_scope_ends_with_block(self) -> None:
        parse("{{with $x := .a}}{{$x}}{{end}}")
        with pytest.raises(ParseError, match='undefined variable "\\$x"'):
            parse("{{if .a}}{{$x := 1}}{{end}}{{$x}}")

    def test_template_name(self) -> None:
        assert parse("{{.a}}", name="app.tmpl").name == "app.tmpl"
        assert parse("{{.a}}").name == "template.tmpl"


class TestParseErrors:
    """Errors the template language reports at parse time."""

    @pytest.mark.parametrize(
        ("source", "message"),
        [
            ("{{nope .a}}", 'function "nope" not defined'),
            ("{{$x}}", 'undefined variable "$x"'),
            ("{{$x = 1}}", 'undefined variable "$x"'),
            ("{{break}}", "{{break}} outside {{range}}"),
            ("{{continue}}", "{{continue}} outside {{range}}"),
            ("{{if .a}}x", "'if' block opened at line 1 was never closed"),
            ("{{end}}", "unexpected {{end}}"),
            ("{{else}}", "unexpected {{else}}"),
            ("{{.a | 1}}", "non executable command in pipeline stage 2"),
            ("{{}}", "missing command in command"),
            ("{{.a | }}", "missing command after '|'"),
            ("{{if}}{{end}}", "missing command in if"),
            ("{{$a, $b := .x}}", "too many declarations in command"),
            ("{{range $a, $b, $c := .x}}{{end}}", "too many declarations in range"),
            ("{{if .a}}{{else}}{{else}}{{end}}", "expected end; found {{else}}"),
            ('{{"s".x}}', "unexpected . after term"),
            ('{{if .a}}{{define "x"}}{{end}}{{end}}', "only allowed at the top level"),
            (
                '{{define "x"}}a{{end}}{{define "x"}}b{{end}}',
                "multiple definition of template 'x'",
            ),
            ('{{template .name}}', "unexpected '.name' in template clause"),
            ("{{nil}}", "nil is not a command"),
            ("{{if nil}}{{end}}", "nil is not a command"),
            ("{{(nil)}}", "nil is not a command"),
        ],
    )
    def test_messages(self, source: str, message: str) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse(source, functions=ACCESSORS)
        assert message in exc_info.value.message

    @pytest.mark.parametrize(
        ("source", "code"),
        [
            ("{{nope}}", ErrorCode.UNDEFINED_FUNCTION),
            ("{{$nope}}", ErrorCode.UNDEFINED_VARIABLE),
            ("{{range .x}}", ErrorCode.UNCLOSED_BLOCK),
            ("{{.a | 1}}", ErrorCode.INVALID_PIPELINE),
            ("{{nil}}", ErrorCode.INVALID_PIPELINE),
            ("{{" + "(" * 101 + ".a" + ")" * 101 + "}}", ErrorCode.NESTING_TOO_DEEP),
        ],
    )
    def test_codes(self, source: str, code: ErrorCode) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse(source)
        assert exc_info.value.code == code

    def test_defines_do_not_see_outer_variables(self) -> None:
        with pytest.raises(ParseError, match="undefined variable"):
            parse('{{$x := 1}}{{define "t"}}{{$x}}{{end}}')

    def test_break_not_allowed_in_define_inside_range(self) -> None:
        with pytest.raises(ParseError, match="outside"):
            parse('{{range .xs}}{{block "b" .}}{{break}}{{end}}{{end}}')

    def test_function_vocabulary_controls_parsing(self) -> None:
        parse('{{getv "k"}}', functions={"getv"})
        with pytest.raises(ParseError, match='function "getv" not defined'):
            parse('{{getv "k"}}')

    def test_error_carries_location_and_suggestion(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("ok\n{{if .a}}", name="cfg.tmpl")
        err = exc_info.value
        assert err.lineno == 2
        assert err.suggestion == "Add {{end}} to close the block"
        assert "cfg.tmpl:2" in str(err)


class TestLiteralDecoding:
    """unquote and parse_number helpers."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ('"plain"', "plain"),
            (r'"tab\there"', "tab\there"),
            (r'"\x41é\101"', "Aé" + "A"),
            ("`raw\\n`", "raw\\n"),
            ("'x'", "x"),
        ],
    )
    def test_unquote(self, text: str, expected: str) -> None:
        assert unquote(text) == expected

    def test_unquote_rejects_bad_escape(self) -> None:
        with pytest.raises(ValueError, match="invalid escape"):
            unquote(r'"\q"')

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("42", 42),
            ("-7", -7),
            ("0x1f", 31),
            ("0o17", 15),
            ("0755", 493),
            ("0b101", 5),
            ("1_000", 1000),
            ("1.5", 1.5),
            ("1e3", 1000.0),
            ("0x1p-2", 0.25),
            ("2i", 2j),
        ],
    )
    def test_parse_number(self, text: str, expected: object) -> None:
        assert parse_number(text) == expected
