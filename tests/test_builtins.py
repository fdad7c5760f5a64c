"""Tests for the builtin template functions."""

from __future__ import annotations

import pytest

from tmpldeps.template import builtins


class TestTruth:
    """Template truthiness."""

    @pytest.mark.parametrize("value", [None, False, 0, 0.0, "", b"", [], (), {}, set()])
    def test_false_values(self, value) -> None:
        assert builtins.truth(value) is False

    @pytest.mark.parametrize("value", [True, 1, -1, 0.1, "0", [0], {"": None}, object()])
    def test_true_values(self, value) -> None:
        assert builtins.truth(value) is True


class TestLogic:
    def test_and_returns_first_falsy(self) -> None:
        assert builtins.and_(1, 0, 2) == 0
        assert builtins.and_(1, 2) == 2

    def test_or_returns_first_truthy(self) -> None:
        assert builtins.or_(0, "", "x") == "x"
        assert builtins.or_(0, "") == ""

    def test_not(self) -> None:
        assert builtins.not_([]) is True
        assert builtins.not_("a") is False


class TestComparison:
    """eq and friends compare basic kinds only."""

    def test_eq_any_of(self) -> None:
        assert builtins.eq(2, 1, 2, 3) is True
        assert builtins.eq("a", "b") is False

    def test_numbers_compare_across_int_and_float(self) -> None:
        assert builtins.eq(1, 1.0) is True
        assert builtins.lt(1, 1.5) is True

    def test_nil_compares_with_anything(self) -> None:
        assert builtins.eq(None, None) is True
        assert builtins.eq("a", None) is False

    @pytest.mark.parametrize(("a", "b"), [(1, "1"), (True, 1), ("a", 1.0)])
    def test_incompatible_kinds(self, a, b) -> None:
        with pytest.raises(TypeError, match="incompatible types for comparison"):
            builtins.eq(a, b)

    def test_eq_needs_an_operand(self) -> None:
        with pytest.raises(TypeError, match="missing argument"):
            builtins.eq(1)

    def test_ordering(self) -> None:
        assert builtins.lt("a", "b")
        assert builtins.le(2, 2)
        assert builtins.gt(3, 2)
        assert builtins.ge(2, 2)
        assert builtins.ne(1, 2)

    def test_ordering_rejects_non_basic(self) -> None:
        with pytest.raises(TypeError, match="invalid type for comparison"):
            builtins.lt([1], [2])


class TestCollections:
    """len, index and slice."""

    def test_len(self) -> None:
        assert builtins.length("hello") == 5
        assert builtins.length({"a": 1}) == 1
        with pytest.raises(TypeError, match="len of type int"):
            builtins.length(3)

    def test_index_nested(self) -> None:
        data = {"a": [[1, 2], [3, 4]]}
        assert builtins.index(data, "a", 1, 0) == 3
        assert builtins.index(data, "missing") is None

    def test_index_string_by_byte(self) -> None:
        assert builtins.index("abc", 1) == ord("b")

    def test_index_errors(self) -> None:
        with pytest.raises(IndexError, match="index out of range: 3"):
            builtins.index([1, 2, 3], 3)
        with pytest.raises(TypeError, match="untyped nil"):
            builtins.index(None, 0)
        with pytest.raises(TypeError, match="cannot index slice/array with type str"):
            builtins.index([1], "0")

    def test_slice(self) -> None:
        assert builtins.slice_([1, 2, 3, 4], 1, 3) == [2, 3]
        assert builtins.slice_("hello", 1) == "ello"
        assert builtins.slice_([1, 2]) == [1, 2]

    def test_slice_errors(self) -> None:
        with pytest.raises(IndexError, match="invalid slice index: 2 > 1"):
            builtins.slice_([1, 2, 3], 2, 1)
        with pytest.raises(TypeError, match="too many slice indexes"):
            builtins.slice_("abc", 0, 1, 2)
        with pytest.raises(TypeError, match="can't slice item of type dict"):
            builtins.slice_({}, 0)


class TestEscaping:
    def test_html(self) -> None:
        assert builtins.html_escape("<a href='x'>\"&\"</a>") == (
            "&lt;a href=&#39;x&#39;&gt;&#34;&amp;&#34;&lt;/a&gt;"
        )

    def test_js(self) -> None:
        assert builtins.js_escape("a'b\"<c>\n") == "a\\'b\\\"\\u003Cc\\u003E\\u000A"

    def test_urlquery(self) -> None:
        assert builtins.urlquery("a b&c/d") == "a+b%26c%2Fd"

    def test_multiple_operands_are_printed(self) -> None:
        assert builtins.html_escape(1, 2) == "1 2"


class TestCall:
    def test_call(self) -> None:
        assert builtins.call(lambda a, b: a + b, 1, 2) == 3

    def test_call_errors(self) -> None:
        with pytest.raises(TypeError, match="call of nil"):
            builtins.call(None)
        with pytest.raises(TypeError, match="non-function of type int"):
            builtins.call(5)

    def test_registry_covers_parser_names(self) -> None:
        from tmpldeps.utils.constants import BUILTIN_FUNCTIONS

        assert set(builtins.BUILTINS) == BUILTIN_FUNCTIONS
