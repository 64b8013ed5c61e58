"""Client and parameter-mapping interfaces and mapping-source helpers."""

from __future__ import annotations

import abc
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pixiu.api import MappingParam, Request
from pixiu.constants import DEFAULT_BODY_ALL, DOT


class MappingError(Exception):
    """Raised when a request parameter cannot be mapped."""


class Client(abc.ABC):
    """A backend client (HTTP, Dubbo, ...)."""

    @abc.abstractmethod
    def apply(self) -> None:
        """Initialise the client."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the client's resources."""

    @abc.abstractmethod
    def call(self, request: Request) -> Any:
        """Invoke the backend service and return its result."""

    @abc.abstractmethod
    def map_params(self, request: Request) -> Any:
        """Map inbound request parameters to backend parameters."""


class RequestOption(abc.ABC):
    """An action that applies a mapped value to a target."""

    @abc.abstractmethod
    def action(self, target: Any, value: Any) -> None:
        """Apply ``value`` to ``target``; raise on failure."""


class ParamMapper(abc.ABC):
    """Maps one kind of inbound parameter onto a target."""

    @abc.abstractmethod
    def map(
        self,
        param: MappingParam,
        request: Request,
        target: Any,
        option: RequestOption | None,
    ) -> None:
        """Map the parameter described by ``param`` onto ``target``."""


_MAP_SOURCE = re.compile(
    r"^([uri|queryStrings|headers|requestBody][\w|\d]+)\.([\w|\d|\.|\-]+)$", re.ASCII
)


def parse_map_source(source: str) -> tuple[str, list[str]]:
    """Split ``queryStrings.id``-style sources into the origin and key path."""
    match = _MAP_SOURCE.match(source)
    if match is None:
        raise MappingError("Parameter mapping config incorrect. Please fix it")
    return match.group(1), match.group(2).split(DOT)


def get_map_value(source_map: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Follow ``keys`` through nested mappings and return the value found."""
    if not keys:
        raise MappingError("keys must not be empty")
    first = keys[0]
    if first == DEFAULT_BODY_ALL:
        return source_map
    if first not in source_map:
        raise MappingError(f"{first} does not exist in request body")
    value = source_map[first]
    if len(keys) == 1:
        return value
    if not isinstance(value, Mapping):
        raise MappingError(f"{first} is not a map structure. It contains {value}")
    return get_map_value(value, keys[1:])