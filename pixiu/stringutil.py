"""Small string helpers."""

from __future__ import annotations

from collections.abc import Iterable


def str_in_slice(value: str, items: Iterable[str]) -> bool:
    """Return whether ``value`` equals one of ``items``."""
    return any(item == value for item in items)