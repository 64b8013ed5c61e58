"""Conversion of backend response data into JSON-friendly structures."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from pixiu.api import Response


def new_dubbo_response(data: Any) -> Response:
    """Wrap ``data`` in a response, with map keys turned into snake case."""
    return Response(data=deal_response(data, True))


def _is_string_map(value: Any) -> bool:
    return isinstance(value, Mapping) and all(isinstance(k, str) for k in value)


def deal_response(value: Any, hump_to_line: bool) -> Any:
    """Normalise a response value.

    String-keyed maps get snake-case keys when ``hump_to_line`` is set;
    lists and tuples are processed element by element; anything else,
    including maps with non-string keys, is returned unchanged.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        if hump_to_line and _is_string_map(value):
            return _hump_to_line(value)
        return value
    if isinstance(value, (list, tuple)):
        return [deal_response(item, hump_to_line) for item in value]
    return value


def hump_to_line(value: Any) -> Any:
    """Turn every key of a string-keyed map, recursively, into snake case."""
    return _hump_to_line(value)


def _hump_to_line(value: Any) -> Any:
    if not _is_string_map(value):
        return value
    out: dict[str, Any] = {}
    for key, item in value.items():
        name = hump_to_underline(key)
        if item is None:
            out[name] = None
        elif dataclasses.is_dataclass(item) and not isinstance(item, type):
            out[name] = _hump_to_line(
                {f.name: getattr(item, f.name) for f in dataclasses.fields(item)}
            )
        elif isinstance(item, (list, tuple)):
            out[name] = [_hump_to_line(element) for element in item]
        elif isinstance(item, Mapping):
            out[name] = _hump_to_line(item)
        else:
            out[name] = item
    return out


def hump_to_underline(text: str) -> str:
    """Convert camelCase to snake_case.

    An underscore goes before each ASCII capital that follows some
    character other than an underscore; the result is lower-cased.
    """
    parts: list[str] = []
    seen = False
    for index, char in enumerate(text):
        if index > 0 and "A" <= char <= "Z" and seen:
            parts.append("_")
        if char != "_":
            seen = True
        parts.append(char)
    return "".join(parts).lower()