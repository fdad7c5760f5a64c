"""Value formatting for rendered output.

Values print the way the template language's reference engine prints them:

    None            <no value> at the top level, <nil> inside collections
    True / False    true / false
    1000000.0       1e+06   (shortest form, exponent from 1e6 and below 1e-4)
    [1, "a"]        [1 a]
    {"b": 1}        map[b:1]

``sprintf`` implements the printf verbs templates commonly use.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from tmpldeps.utils.constants import NO_VALUE

NIL = "<nil>"

_VERB_RE = re.compile(r"%([-+# 0]*)(\d+)?(?:\.(\d*))?(.)", re.DOTALL)


def format_float(value: float) -> str:
    """Shortest representation, switching to exponent form like ``%g``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    point = len(digits) + int(exponent)
    exp = point - 1
    prefix = "-" if sign else ""

    if exp < -4 or exp >= 6:
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        return f"{prefix}{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{text}"
    if point >= len(text):
        return f"{prefix}{text}{'0' * (point - len(text))}"
    return f"{prefix}{text[:point]}.{text[point:]}"


def format_complex(value: complex) -> str:
    imag = format_float(value.imag)
    if not imag.startswith(("-", "+")):
        imag = "+" + imag
    return f"({format_float(value.real)}{imag}i)"


def format_value(value: Any, *, nested: bool = False) -> str:
    """Text form of ``value`` as printed by ``{{ }}`` and ``%v``."""
    if value is None:
        return NIL if nested else NO_VALUE
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, complex):
        return format_complex(value)
    if isinstance(value, (bytes, bytearray)):
        return "[" + " ".join(str(b) for b in value) + "]"
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda item: sort_key(item[0]))
        body = " ".join(
            f"{format_value(k, nested=True)}:{format_value(v, nested=True)}" for k, v in items
        )
        return f"map[{body}]"
    if isinstance(value, (list, tuple, set, frozenset)):
        elements = sorted(value, key=sort_key) if isinstance(value, (set, frozenset)) else value
        return "[" + " ".join(format_value(v, nested=True) for v in elements) + "]"
    return str(value)


def sort_key(value: Any) -> tuple[int, Any]:
    """Map key order: numbers ascending, then everything else by text."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))


def sprint(*args: Any) -> str:
    """Concatenate; a space separates operands when neither is a string."""
    parts: list[str] = []
    for i, arg in enumerate(args):
        if i and not isinstance(arg, str) and not isinstance(args[i - 1], str):
            parts.append(" ")
        parts.append(format_value(arg, nested=True))
    return "".join(parts)


def sprintln(*args: Any) -> str:
    """Space-separated operands followed by a newline."""
    return " ".join(format_value(arg, nested=True) for arg in args) + "\n"


def quote(value: str) -> str:
    """Double-quoted literal with escapes."""
    return json.dumps(value, ensure_ascii=False)


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float64"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "map[string]interface {}"
    if isinstance(value, Sequence):
        return "[]interface {}"
    return type(value).__name__


def _bad_verb(verb: str, value: Any) -> str:
    if value is None:
        return f"%!{verb}({NIL})"
    return f"%!{verb}({_type_name(value)}={format_value(value, nested=True)})"


def _spec(flags: str, width: str | None, precision: str | None, kind: str) -> str:
    align = "<" if "-" in flags else ""
    sign = "+" if "+" in flags else (" " if " " in flags else "")
    alt = "#" if "#" in flags and kind in "xXob" else ""
    zero = "0" if "0" in flags and not align and kind not in "sc" else ""
    prec = f".{precision or 0}" if precision is not None else ""
    return f"{align}{sign}{alt}{zero}{width or ''}{prec}{kind}"


def _pad(text: str, flags: str, width: str | None) -> str:
    if not width:
        return text
    return text.ljust(int(width)) if "-" in flags else text.rjust(int(width))


def _format_one(
    verb: str, flags: str, width: str | None, precision: str | None, value: Any
) -> str:
    is_int = isinstance(value, int) and not isinstance(value, bool)
    is_num = is_int or isinstance(value, float)

    if verb == "v":
        return _pad(format_value(value, nested=True), flags, width)
    if verb == "s":
        text = value if isinstance(value, str) else format_value(value, nested=True)
        if precision is not None:
            text = text[: int(precision or 0)]
        return _pad(text, flags, width)
    if verb == "q":
        if isinstance(value, str):
            return _pad(quote(value), flags, width)
        if is_int:
            return _pad("'" + chr(value) + "'", flags, width)
        return _bad_verb(verb, value)
    if verb == "t":
        if isinstance(value, bool):
            return _pad("true" if value else "false", flags, width)
        return _bad_verb(verb, value)
    if verb == "d":
        return format(value, _spec(flags, width, None, "d")) if is_int else _bad_verb(verb, value)
    if verb in "bo":
        return format(value, _spec(flags, width, None, verb)) if is_int else _bad_verb(verb, value)
    if verb == "c":
        return _pad(chr(value), flags, width) if is_int else _bad_verb(verb, value)
    if verb in "xX":
        if is_int:
            return format(value, _spec(flags, width, None, verb))
        if isinstance(value, str):
            encoded = value.encode().hex()
            return _pad(encoded.upper() if verb == "X" else encoded, flags, width)
        if isinstance(value, float):
            return _pad(value.hex(), flags, width)
        return _bad_verb(verb, value)
    if verb in "eEfFgG":
        if not is_num:
            return _bad_verb(verb, value)
        if verb in "gG" and precision is None:
            text = format_float(float(value))
            if "+" in flags and not text.startswith("-"):
                text = "+" + text
            return _pad(text.upper() if verb == "G" else text, flags, width)
        if precision is None:
            precision = "6"
        return format(float(value), _spec(flags, width, precision, verb))
    return f"%!{verb}(BADVERB)"


def sprintf(template: str, *args: Any) -> str:
    """Format ``args`` according to printf-style ``template``.

    Missing operands print as ``%!v(MISSING)``, unused ones are appended as
    ``%!(EXTRA type=value)``.
    """
    out: list[str] = []
    index = 0
    pos = 0
    for match in _VERB_RE.finditer(template):
        out.append(template[pos : match.start()])
        pos = match.end()
        flags, width, precision, verb = match.groups()
        if verb == "%":
            out.append("%")
            continue
        if index >= len(args):
            out.append(f"%!{verb}(MISSING)")
            continue
        out.append(_format_one(verb, flags, width, precision, args[index]))
        index += 1
    out.append(template[pos:])
    if index < len(args):
        extra = ", ".join(
            f"{_type_name(arg)}={format_value(arg, nested=True)}" for arg in args[index:]
        )
        out.append(f"%!(EXTRA {extra})")
    return "".join(out)
