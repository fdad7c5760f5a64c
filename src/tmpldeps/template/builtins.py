"""Functions every template can call.

Comparison, logic, collection access, formatting and escaping. ``and`` and
``or`` are listed for completeness; the executor evaluates them itself so
that their operands short-circuit.
"""

from __future__ import annotations

import html as _html
from collections.abc import Callable, Mapping, Sequence
from typing import Any
from urllib.parse import quote_plus

from tmpldeps.template.formatting import sprint, sprintf, sprintln

_SIZED_OR_SCALAR = (bool, int, float, complex, str, bytes, Mapping, Sequence, set, frozenset)

_JS_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "<": "\\u003C",
    ">": "\\u003E",
    "&": "\\u0026",
    "=": "\\u003D",
}


def truth(value: Any) -> bool:
    """Template truthiness: false, 0, nil and empty values are false."""
    if value is None:
        return False
    if isinstance(value, _SIZED_OR_SCALAR):
        return bool(value)
    return True


def and_(*args: Any) -> Any:
    """First falsy argument, or the last one."""
    for arg in args[:-1]:
        if not truth(arg):
            return arg
    return args[-1]


def or_(*args: Any) -> Any:
    """First truthy argument, or the last one."""
    for arg in args[:-1]:
        if truth(arg):
            return arg
    return args[-1]


def not_(arg: Any) -> bool:
    return not truth(arg)


def length(item: Any) -> int:
    if isinstance(item, (str, bytes, Mapping, Sequence, set, frozenset)):
        return len(item)
    raise TypeError(f"len of type {type(item).__name__}")


def _as_index(value: Any, size: int, cap: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"cannot index slice/array with type {type(value).__name__}")
    limit = size if cap is None else cap
    if value < 0 or value > limit:
        raise IndexError(f"index out of range: {value}")
    return value


def index(item: Any, *indices: Any) -> Any:
    """``index .m "k"`` is ``m["k"]``; ``index .l 1 2`` is ``l[1][2]``."""
    for key in indices:
        if item is None:
            raise TypeError("index of untyped nil")
        if isinstance(item, Mapping):
            item = item.get(key)
        elif isinstance(item, (str, Sequence)):
            # Strings index by UTF-8 byte
            data = item.encode() if isinstance(item, str) else item
            position = _as_index(key, len(data))
            if position == len(data):
                raise IndexError(f"index out of range: {position}")
            item = data[position]
        else:
            raise TypeError(f"can't index item of type {type(item).__name__}")
    return item


def slice_(item: Any, *indices: Any) -> Any:
    """``slice .l 1 3`` is ``l[1:3]``."""
    if item is None:
        raise TypeError("slice of untyped nil")
    if not isinstance(item, (str, Sequence)) or isinstance(item, Mapping):
        raise TypeError(f"can't slice item of type {type(item).__name__}")
    if len(indices) > 3 or (isinstance(item, str) and len(indices) > 2):
        raise TypeError(f"too many slice indexes: {len(indices)}")
    bounds = [_as_index(i, len(item)) for i in indices]
    start = bounds[0] if bounds else 0
    stop = bounds[1] if len(bounds) > 1 else len(item)
    if start > stop:
        raise IndexError(f"invalid slice index: {start} > {stop}")
    if len(bounds) == 3 and bounds[2] < stop:
        raise IndexError(f"invalid slice index: {stop} > {bounds[2]}")
    return item[start:stop]


def _kind(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, complex):
        return "complex"
    if isinstance(value, str):
        return "string"
    return "other"


def eq(arg1: Any, *args: Any) -> bool:
    """True if ``arg1`` equals any of ``args``."""
    if not args:
        raise TypeError("missing argument for comparison")
    kind = _kind(arg1)
    for arg in args:
        other = _kind(arg)
        if kind != other and "nil" not in (kind, other):
            raise TypeError("incompatible types for comparison")
        if arg1 == arg:
            return True
    return False


def ne(arg1: Any, arg2: Any) -> bool:
    return not eq(arg1, arg2)


def lt(arg1: Any, arg2: Any) -> bool:
    kind = _kind(arg1)
    if kind not in ("number", "string"):
        raise TypeError("invalid type for comparison")
    if kind != _kind(arg2):
        raise TypeError("incompatible types for comparison")
    return arg1 < arg2


def le(arg1: Any, arg2: Any) -> bool:
    return lt(arg1, arg2) or eq(arg1, arg2)


def gt(arg1: Any, arg2: Any) -> bool:
    return not le(arg1, arg2)


def ge(arg1: Any, arg2: Any) -> bool:
    return not lt(arg1, arg2)


def _text(args: tuple[Any, ...]) -> str:
    if len(args) == 1 and isinstance(args[0], str):
        return args[0]
    return sprint(*args)


def html_escape(*args: Any) -> str:
    escaped = _html.escape(_text(args))
    escaped = escaped.replace("&#x27;", "&#39;").replace("&quot;", "&#34;")
    return escaped.replace("\x00", "\ufffd")


def js_escape(*args: Any) -> str:
    out: list[str] = []
    for ch in _text(args):
        if ch in _JS_ESCAPES:
            out.append(_JS_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        else:
            out.append(f"\\u{ord(ch):04X}")
    return "".join(out)


def urlquery(*args: Any) -> str:
    return quote_plus(_text(args), safe="")


def call(fn: Any, *args: Any) -> Any:
    if fn is None:
        raise TypeError("call of nil")
    if not callable(fn):
        raise TypeError(f"non-function of type {type(fn).__name__}")
    return fn(*args)


BUILTINS: dict[str, Callable[..., Any]] = {
    "and": and_,
    "or": or_,
    "not": not_,
    "len": length,
    "index": index,
    "slice": slice_,
    "eq": eq,
    "ne": ne,
    "lt": lt,
    "le": le,
    "gt": gt,
    "ge": ge,
    "print": sprint,
    "printf": sprintf,
    "println": sprintln,
    "html": html_escape,
    "js": js_escape,
    "urlquery": urlquery,
    "call": call,
}
