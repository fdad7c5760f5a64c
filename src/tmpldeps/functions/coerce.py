"""Argument checks for template function implementations.

Template calls are dynamically typed, so each implementation validates the
arguments it receives. A TypeError raised here surfaces to the template
author as "error calling NAME: ...".
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


def _type_name(value: Any) -> str:
    return "nil" if value is None else type(value).__name__


def as_str(func: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{func}: expected string; got {_type_name(value)}")
    return value


def as_int(func: str, value: Any) -> int:
    """Accept ints and integral floats (JSON numbers decode to float)."""
    if isinstance(value, bool):
        raise TypeError(f"{func}: expected int; got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise TypeError(f"{func}: expected int; got {_type_name(value)}")


def as_str_list(func: str, value: Any) -> list[str]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise TypeError(f"{func}: expected list of strings; got {_type_name(value)}")
    return [as_str(func, item) for item in value]
