"""Accessor functions: read inputs by key from the value environment.

Every function here takes the input's name as its first argument, which is
why a string literal in that position is reported as a dependency.

    getv "key" ["default"]  value if it is a non-empty string, else default, else ""
    exists "key"            true if the key is present
    get "key"               value, or an error if the key is absent
    json "key"              value parsed as a JSON object
    jsonArray "key"         value parsed as a JSON array
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

from tmpldeps.environment.exceptions import (
    KeyNotFoundError,
    MalformedDataError,
    ValueTypeError,
)
from tmpldeps.functions.coerce import as_str
from tmpldeps.functions.definition import KEY_ONLY, KEY_WITH_DEFAULT, FunctionDefinition

_JSON_TYPE_NAMES = {
    dict: "object",
    list: "array",
    str: "string",
    int: "number",
    float: "number",
    bool: "boolean",
    type(None): "null",
}


def render_getv(values: Mapping[str, Any]) -> Callable[..., str]:
    def getv(key: str, *default: str) -> str:
        value = values.get(as_str("getv", key))
        if isinstance(value, str) and value:
            return value
        if default:
            return as_str("getv", default[0])
        return ""

    return getv


def render_exists(values: Mapping[str, Any]) -> Callable[[str], bool]:
    def exists(key: str) -> bool:
        return as_str("exists", key) in values

    return exists


def render_get(values: Mapping[str, Any]) -> Callable[[str], Any]:
    def get(key: str) -> Any:
        key = as_str("get", key)
        if key not in values:
            raise KeyNotFoundError(key)
        return values[key]

    return get


def _decode(values: Mapping[str, Any], func: str, key: Any, expected: type) -> Any:
    key = as_str(func, key)
    if key not in values:
        raise KeyNotFoundError(key)
    raw = values[key]
    if not isinstance(raw, str):
        raise ValueTypeError(key, raw, "a string holding JSON")
    shape = _JSON_TYPE_NAMES[expected]
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedDataError(key, shape, exc.msg) from exc
    if not isinstance(data, expected):
        found = _JSON_TYPE_NAMES.get(type(data), type(data).__name__)
        raise MalformedDataError(key, shape, f"found {found}")
    return data


def render_json(values: Mapping[str, Any]) -> Callable[[str], dict[str, Any]]:
    def json_(key: str) -> dict[str, Any]:
        return _decode(values, "json", key, dict)

    return json_


def render_json_array(values: Mapping[str, Any]) -> Callable[[str], list[Any]]:
    def json_array_(key: str) -> list[Any]:
        return _decode(values, "jsonArray", key, list)

    return json_array_


JSON_FUNCTIONS: tuple[FunctionDefinition, ...] = (
    FunctionDefinition(
        name="json",
        description="Parse the value of a key as a JSON object",
        render=render_json,
        rule=KEY_ONLY,
    ),
    FunctionDefinition(
        name="jsonArray",
        description="Parse the value of a key as a JSON array",
        render=render_json_array,
        rule=KEY_ONLY,
    ),
)

ACCESSOR_FUNCTIONS: tuple[FunctionDefinition, ...] = (
    FunctionDefinition(
        name="getv",
        description="Value of a key, or the default when missing or empty",
        render=render_getv,
        rule=KEY_WITH_DEFAULT,
    ),
    FunctionDefinition(
        name="exists",
        description="Whether a key is present",
        render=render_exists,
        rule=KEY_ONLY,
    ),
    FunctionDefinition(
        name="get",
        description="Value of a key; fails if the key is absent",
        render=render_get,
        rule=KEY_ONLY,
    ),
    *JSON_FUNCTIONS,
)

ACCESSOR_NAMES: frozenset[str] = frozenset(d.name for d in ACCESSOR_FUNCTIONS)
