"""Extraction result types."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class VariableInfo:
    """One discovered dependency.

    Identity is positional: a template that reads ``.port`` twice yields two
    equal entries.

    Attributes:
        name: Dotted field path or the key passed to an accessor function
        default_value: Literal fallback from the call, if it declares one
    """

    name: str
    default_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form. ``defaultValue`` is omitted when there is none."""
        data: dict[str, Any] = {"name": self.name}
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        return data


def unique_names(names: Iterable[str]) -> list[str]:
    """Drop repeated names, keeping first-occurrence order."""
    return list(dict.fromkeys(names))
