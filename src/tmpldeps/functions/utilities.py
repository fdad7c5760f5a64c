"""Utility functions: string, path, encoding and arithmetic helpers.

Transform functions (FIRST_ARG) operate on a value. A literal argument is
data, so ``{{base "/etc/app.conf"}}`` reads no input while
``{{base .config_path}}`` reads ``config_path``. Only the first argument is
searched; ``{{replace .s .old .new -1}}`` reports ``s`` alone.

Pure helpers (NO_VARIABLES) never report inputs, whatever their arguments.

Semantics follow the Go standard library functions these are named after.
"""

from __future__ import annotations

import base64
import binascii
import posixpath
import re
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from tmpldeps.functions.accessors import JSON_FUNCTIONS
from tmpldeps.functions.coerce import as_int, as_str, as_str_list
from tmpldeps.functions.definition import (
    FIRST_ARG,
    NO_VARIABLES,
    ExtractionRule,
    FunctionDefinition,
)

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_ATOI_RE = re.compile(r"[+-]?[0-9]+")


# ─────────────────────────────────────────────────────────────────────────────
# Paths
# ─────────────────────────────────────────────────────────────────────────────


def clean_path(path: str) -> str:
    """Lexically shortest equivalent of ``path`` (Go's path.Clean)."""
    cleaned = posixpath.normpath(path) if path else "."
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def base(path: str) -> str:
    """Last element of ``path``; ``"."`` for empty, ``"/"`` for all slashes."""
    path = as_str("base", path)
    if not path:
        return "."
    path = path.rstrip("/")
    if not path:
        return "/"
    return path.rsplit("/", 1)[-1]


def dirname(path: str) -> str:
    """All but the last element of ``path``, cleaned."""
    path = as_str("dir", path)
    return clean_path(path[: path.rfind("/") + 1])


# ─────────────────────────────────────────────────────────────────────────────
# Strings
# ─────────────────────────────────────────────────────────────────────────────


def split(s: str, sep: str) -> list[str]:
    s, sep = as_str("split", s), as_str("split", sep)
    if not sep:
        return list(s)
    return s.split(sep)


def join(elems: Sequence[str], sep: str) -> str:
    return as_str("join", sep).join(as_str_list("join", elems))


def to_upper(s: str) -> str:
    return as_str("toUpper", s).upper()


def to_lower(s: str) -> str:
    return as_str("toLower", s).lower()


def replace(s: str, old: str, new: str, n: int) -> str:
    """Replace the first ``n`` occurrences; ``n < 0`` replaces all."""
    s, old, new = as_str("replace", s), as_str("replace", old), as_str("replace", new)
    return s.replace(old, new, as_int("replace", n))


def contains(s: str, substr: str) -> bool:
    return as_str("contains", substr) in as_str("contains", s)


def trim_suffix(s: str, suffix: str) -> str:
    return as_str("trimSuffix", s).removesuffix(as_str("trimSuffix", suffix))


def base64_encode(data: str) -> str:
    return base64.b64encode(as_str("base64Encode", data).encode()).decode("ascii")


def base64_decode(data: str) -> str:
    try:
        raw = base64.b64decode(as_str("base64Decode", data), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"illegal base64 data: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


def parse_bool(s: str) -> bool:
    s = as_str("parseBool", s)
    if s in _TRUE_STRINGS:
        return True
    if s in _FALSE_STRINGS:
        return False
    raise ValueError(f'strconv.ParseBool: parsing "{s}": invalid syntax')


def atoi(s: str) -> int:
    s = as_str("atoi", s)
    if not _ATOI_RE.fullmatch(s):
        raise ValueError(f'strconv.Atoi: parsing "{s}": invalid syntax')
    return int(s)


# ─────────────────────────────────────────────────────────────────────────────
# Arithmetic (integer, truncating toward zero)
# ─────────────────────────────────────────────────────────────────────────────


def add(a: int, b: int) -> int:
    return as_int("add", a) + as_int("add", b)


def sub(a: int, b: int) -> int:
    return as_int("sub", a) - as_int("sub", b)


def mul(a: int, b: int) -> int:
    return as_int("mul", a) * as_int("mul", b)


def div(a: int, b: int) -> int:
    a, b = as_int("div", a), as_int("div", b)
    if b == 0:
        raise ZeroDivisionError("integer divide by zero")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def mod(a: int, b: int) -> int:
    a, b = as_int("mod", a), as_int("mod", b)
    if b == 0:
        raise ZeroDivisionError("integer divide by zero")
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


def seq(first: int, last: int) -> list[int]:
    """Integers from ``first`` to ``last`` inclusive."""
    return list(range(as_int("seq", first), as_int("seq", last) + 1))


# ─────────────────────────────────────────────────────────────────────────────
# Collections and time
# ─────────────────────────────────────────────────────────────────────────────


def make_map(*values: Any) -> dict[str, Any]:
    """Build a map from alternating keys and values."""
    if len(values) % 2:
        raise ValueError("invalid map call")
    result: dict[str, Any] = {}
    for key, value in zip(values[::2], values[1::2], strict=True):
        if not isinstance(key, str):
            raise ValueError("map keys must be strings")
        result[key] = value
    return result


def reverse(values: Any) -> Any:
    """Reversed copy of a list; anything else is returned unchanged."""
    if isinstance(values, (list, tuple)):
        return list(reversed(values))
    return values


def now() -> datetime:
    return datetime.now().astimezone()


def _static(func: Callable[..., Any]) -> Callable[[Mapping[str, Any]], Callable[..., Any]]:
    """Render factory for functions that ignore the value environment."""

    def factory(values: Mapping[str, Any]) -> Callable[..., Any]:
        return func

    return factory


def _define(
    name: str, description: str, func: Callable[..., Any], rule: ExtractionRule
) -> FunctionDefinition:
    return FunctionDefinition(name=name, description=description, render=_static(func), rule=rule)


TRANSFORM_FUNCTIONS: tuple[FunctionDefinition, ...] = (
    _define("base", "Last element of a slash-separated path", base, FIRST_ARG),
    _define("dir", "All but the last element of a path", dirname, FIRST_ARG),
    _define("split", "Split a string around a separator", split, FIRST_ARG),
    _define("toUpper", "Upper-case a string", to_upper, FIRST_ARG),
    _define("toLower", "Lower-case a string", to_lower, FIRST_ARG),
    _define("replace", "Replace the first n occurrences (n < 0: all)", replace, FIRST_ARG),
    _define("contains", "Whether a string contains a substring", contains, FIRST_ARG),
    _define("base64Encode", "Standard base64 encoding of a string", base64_encode, FIRST_ARG),
    _define("base64Decode", "Decode standard base64 into a string", base64_decode, FIRST_ARG),
    _define("trimSuffix", "Remove a trailing suffix", trim_suffix, FIRST_ARG),
    _define("parseBool", "Parse a boolean spelling such as true, T or 0", parse_bool, FIRST_ARG),
    _define("add", "Integer sum", add, FIRST_ARG),
    _define("sub", "Integer difference", sub, FIRST_ARG),
    _define("mul", "Integer product", mul, FIRST_ARG),
    _define("div", "Integer quotient, truncated toward zero", div, FIRST_ARG),
    _define("mod", "Integer remainder, sign of the dividend", mod, FIRST_ARG),
    _define("seq", "Inclusive integer sequence", seq, FIRST_ARG),
)

PURE_FUNCTIONS: tuple[FunctionDefinition, ...] = (
    _define("map", "Build a map from alternating keys and values", make_map, NO_VARIABLES),
    _define("join", "Join strings with a separator", join, NO_VARIABLES),
    _define("datetime", "Current local time", now, NO_VARIABLES),
    _define("reverse", "Reversed copy of a list", reverse, NO_VARIABLES),
    _define("atoi", "Parse a decimal integer", atoi, NO_VARIABLES),
)

UTILITY_FUNCTIONS: tuple[FunctionDefinition, ...] = (
    *TRANSFORM_FUNCTIONS,
    *JSON_FUNCTIONS,
    *PURE_FUNCTIONS,
)
