"""Tests for value printing and printf formatting."""

from __future__ import annotations

import math

import pytest

from tmpldeps.template import format_value, sprint, sprintf, sprintln
from tmpldeps.template.formatting import format_float, sort_key


class TestFormatValue:
    """How ``{{ }}`` prints values."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "<no value>"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            ("text", "text"),
            ([1, "a", None], "[1 a <nil>]"),
            ((), "[]"),
            ({"b": 1, "a": [2]}, "map[a:[2] b:1]"),
            ({2: "x", 10: "y"}, "map[2:x 10:y]"),
            (b"hi", "[104 105]"),
            (complex(1, -2), "(1-2i)"),
        ],
    )
    def test_values(self, value, expected: str) -> None:
        assert format_value(value) == expected

    def test_nested_nil(self) -> None:
        assert format_value(None, nested=True) == "<nil>"


class TestFormatFloat:
    """Shortest float form with exponent outside [1e-4, 1e6)."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (3.0, "3"),
            (0.5, "0.5"),
            (100.0, "100"),
            (123456.7, "123456.7"),
            (1e6, "1e+06"),
            (1.5e6, "1.5e+06"),
            (1e21, "1e+21"),
            (0.0001, "0.0001"),
            (0.00001, "1e-05"),
            (-2.25, "-2.25"),
            (0.0, "0"),
            (-0.0, "-0"),
        ],
    )
    def test_values(self, value: float, expected: str) -> None:
        assert format_float(value) == expected

    def test_special_values(self) -> None:
        assert format_float(math.inf) == "+Inf"
        assert format_float(-math.inf) == "-Inf"
        assert format_float(math.nan) == "NaN"


class TestSprint:
    def test_spaces_between_non_strings(self) -> None:
        assert sprint(1, 2, "a", 3, "b", "c") == "1 2a3bc"

    def test_nil_operand(self) -> None:
        assert sprint(None) == "<nil>"

    def test_sprintln(self) -> None:
        assert sprintln("a", 1) == "a 1\n"


class TestSprintf:
    """printf verbs."""

    @pytest.mark.parametrize(
        ("template", "args", "expected"),
        [
            ("%s=%d", ("a", 1), "a=1"),
            ("%v", ([1, 2],), "[1 2]"),
            ("%q", ("x\"y",), '"x\\"y"'),
            ("%t", (True,), "true"),
            ("%5d|%-5d|%05d", (42, 42, 42), "   42|42   |00042"),
            ("%x %X %o %b", (255, 255, 8, 5), "ff FF 10 101"),
            ("%x", ("hi",), "6869"),
            ("%c", (65,), "A"),
            ("%.2f", (3.14159,), "3.14"),
            ("%e", (1234.5,), "1.234500e+03"),
            ("%g", (1e6,), "1e+06"),
            ("%.3s", ("abcdef",), "abc"),
            ("%8s|%-8s|", ("ab", "ab"), "      ab|ab      |"),
            ("100%%", (), "100%"),
        ],
    )
    def test_verbs(self, template: str, args: tuple, expected: str) -> None:
        assert sprintf(template, *args) == expected

    def test_missing_operand(self) -> None:
        assert sprintf("%s %s", "a") == "a %!s(MISSING)"

    def test_extra_operands(self) -> None:
        assert sprintf("%s", "a", 1, "b") == "a%!(EXTRA int=1, string=b)"

    def test_wrong_type(self) -> None:
        assert sprintf("%d", "x") == "%!d(string=x)"
        assert sprintf("%t", None) == "%!t(<nil>)"

    def test_bad_verb(self) -> None:
        assert sprintf("%z", 1) == "%!z(BADVERB)"


class TestSortKey:
    def test_numbers_before_strings(self) -> None:
        assert sorted(["b", 10, "a", 2], key=sort_key) == [2, 10, "a", "b"]
