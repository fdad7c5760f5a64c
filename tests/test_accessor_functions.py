"""Tests for the accessor vocabulary: getv, exists, get, json, jsonArray."""

from __future__ import annotations

import pytest

from tmpldeps import (
    ErrorCode,
    KeyNotFoundError,
    MalformedDataError,
    TemplateRuntimeError,
    ValueTypeError,
)
from tmpldeps.functions.accessors import render_get, render_getv


class TestGetv:
    """getv returns a non-empty string value, else the default, else ""."""

    def test_present(self, env) -> None:
        assert env.render('{{getv "user" "guest"}}', {"user": "alice"}) == "alice"

    def test_missing_uses_default(self, env) -> None:
        assert env.render('{{getv "user" "guest"}}', {}) == "guest"

    def test_empty_uses_default(self, env) -> None:
        assert env.render('{{getv "user" "guest"}}', {"user": ""}) == "guest"

    def test_missing_without_default_is_empty(self, env) -> None:
        assert env.render('[{{getv "user"}}]', {}) == "[]"

    def test_non_string_value_falls_back(self, env) -> None:
        assert env.render('{{getv "port" "80"}}', {"port": 8080}) == "80"

    def test_key_from_expression(self, env) -> None:
        source = '{{getv .which "none"}}'
        assert env.render(source, {"which": "region", "region": "eu"}) == "eu"

    def test_non_string_key_is_call_error(self, env) -> None:
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render("{{getv 1}}")
        assert exc_info.value.code is ErrorCode.FUNCTION_ERROR
        assert "error calling getv: getv: expected string; got int" in str(exc_info.value)

    def test_direct_call(self) -> None:
        getv = render_getv({"a": "1"})
        assert getv("a") == "1"
        assert getv("b", "2") == "2"


class TestExistsAndGet:
    """exists tests presence, get fails on absence."""

    def test_exists(self, env) -> None:
        source = '{{if exists "tls"}}on{{else}}off{{end}}'
        assert env.render(source, {"tls": ""}) == "on"
        assert env.render(source, {}) == "off"

    def test_get_returns_raw_value(self, env) -> None:
        assert env.render('{{get "port"}}', {"port": 8080}) == "8080"

    def test_get_missing_key(self, env) -> None:
        with pytest.raises(KeyNotFoundError) as exc_info:
            env.render('{{get "db_host"}}')
        assert exc_info.value.key == "db_host"
        assert exc_info.value.code is ErrorCode.KEY_NOT_FOUND
        assert "key db_host not found" in str(exc_info.value)
        assert "use getv with a default" in str(exc_info.value)

    def test_get_direct(self) -> None:
        with pytest.raises(KeyNotFoundError):
            render_get({})("missing")


class TestJson:
    """json and jsonArray decode string values."""

    def test_object_fields(self, env) -> None:
        source = '{{$c := json "config"}}{{$c.host}}:{{$c.port}}'
        values = {"config": '{"host": "db", "port": 5432}'}
        assert env.render(source, values) == "db:5432"

    def test_nested_object(self, env) -> None:
        source = '{{with json "config"}}{{.db.user}}{{end}}'
        assert env.render(source, {"config": '{"db": {"user": "app"}}'}) == "app"

    def test_array(self, env) -> None:
        source = '{{range jsonArray "hosts"}}{{.}};{{end}}'
        assert env.render(source, {"hosts": '["a", "b"]'}) == "a;b;"

    def test_array_of_objects(self, env) -> None:
        source = '{{range $i, $s := jsonArray "servers"}}{{$i}}={{$s.name}} {{end}}'
        values = {"servers": '[{"name": "x"}, {"name": "y"}]'}
        assert env.render(source, values) == "0=x 1=y "

    def test_float_formatting(self, env) -> None:
        source = '{{$c := json "c"}}{{$c.ratio}} {{$c.big}}'
        assert env.render(source, {"c": '{"ratio": 0.5, "big": 1e21}'}) == "0.5 1e+21"

    def test_missing_key(self, env) -> None:
        with pytest.raises(KeyNotFoundError):
            env.render('{{json "config"}}')

    def test_invalid_json(self, env) -> None:
        with pytest.raises(MalformedDataError) as exc_info:
            env.render('{{json "config"}}', {"config": "{not json"})
        assert exc_info.value.key == "config"
        assert exc_info.value.code is ErrorCode.MALFORMED_DATA

    @pytest.mark.parametrize(
        ("source", "raw", "found"),
        [
            ('{{json "v"}}', "[1, 2]", "found array"),
            ('{{json "v"}}', "null", "found null"),
            ('{{jsonArray "v"}}', '{"a": 1}', "found object"),
            ('{{jsonArray "v"}}', '"text"', "found string"),
        ],
    )
    def test_wrong_shape(self, env, source: str, raw: str, found: str) -> None:
        with pytest.raises(MalformedDataError, match=found):
            env.render(source, {"v": raw})

    def test_non_string_value(self, env) -> None:
        with pytest.raises(ValueTypeError) as exc_info:
            env.render('{{json "v"}}', {"v": 5})
        assert exc_info.value.code is ErrorCode.VALUE_TYPE
        assert "value of v must be a string holding JSON, got int" in str(exc_info.value)

    def test_utility_variant_has_json(self, env_utility) -> None:
        assert env_utility.render('{{(json "c").name}}', {"c": '{"name": "n"}'}) == "n"


class TestUnavailableFunctions:
    """A variant only parses the functions it defines."""

    def test_getv_unknown_in_none_variant(self, env_none) -> None:
        from tmpldeps import TemplateSyntaxError

        with pytest.raises(TemplateSyntaxError, match='function "getv" not defined'):
            env_none.render('{{getv "a"}}')
