"""Mapping of inbound request parameters onto Dubbo generic-call arguments."""

from __future__ import annotations

import dataclasses
import datetime
import json
import re
from collections.abc import Iterable
from typing import Any

from pixiu.api import MappingParam, Request
from pixiu.constants import (
    HEADERS,
    J_TYPE_MAPPER,
    QUERY_STRINGS,
    REQUEST_BODY,
    REQUEST_URI,
    JType,
)
from pixiu.mapping import (
    MappingError,
    ParamMapper,
    RequestOption,
    get_map_value,
    parse_map_source,
)

OPTION_KEY_TYPES = "types"
OPTION_KEY_GROUP = "group"
OPTION_KEY_VERSION = "version"
OPTION_KEY_INTERFACE = "interface"
OPTION_KEY_APPLICATION = "application"
OPTION_KEY_METHOD = "method"
OPTION_KEY_VALUES = "values"

_GENERIC_PREFIX = "opt"


@dataclasses.dataclass
class DubboTarget:
    """Positional argument values and their Java types for a generic call."""

    values: list[Any] = dataclasses.field(default_factory=list)
    types: list[str] = dataclasses.field(default_factory=list)


# ---------------------------------------------------------------------------
# Options applied to generic ("opt.xxx") mapping destinations
# ---------------------------------------------------------------------------


class _BackendFieldOption(RequestOption):
    """Sets one string field of the request's Dubbo backend settings."""

    _label = ""
    _field = ""

    def action(self, target: Any, value: Any) -> None:
        if not isinstance(value, str):
            raise MappingError(f"{self._label} value is not string")
        if not isinstance(target, Request):
            raise MappingError("Target is not *client.Request in value options")
        backend = target.api.integration_request.dubbo_backend_config
        setattr(backend, self._field, value)


class GroupOption(_BackendFieldOption):
    """Sets the Dubbo service group."""

    _label = "Group"
    _field = "group"

    def action(self, target: Any, value: Any) -> None:
        super().action(target, value)


class VersionOption(_BackendFieldOption):
    """Sets the Dubbo service version."""

    _label = "Version"
    _field = "version"

    def action(self, target: Any, value: Any) -> None:
        super().action(target, value)


class MethodOption(_BackendFieldOption):
    """Sets the Dubbo method name."""

    _label = "Method"
    _field = "method"

    def action(self, target: Any, value: Any) -> None:
        super().action(target, value)


class ApplicationOption(_BackendFieldOption):
    """Sets the Dubbo application name."""

    _label = "Application"
    _field = "application_name"

    def action(self, target: Any, value: Any) -> None:
        super().action(target, value)


class InterfaceOption(_BackendFieldOption):
    """Sets the Dubbo interface name."""

    _label = "Interface"
    _field = "interface"

    def action(self, target: Any, value: Any) -> None:
        super().action(target, value)


class ValuesOption(RequestOption):
    """Assigns all argument values (and optionally their types) at once.

    ``value`` is a ``(values, types)`` pair: ``values`` is a list of arguments
    or a single argument, ``types`` a comma-separated string of Java types
    or empty.  Values are converted only when the number of types matches.
    """

    def action(self, target: Any, value: Any) -> None:
        if not isinstance(target, DubboTarget):
            raise MappingError("Target is not dubboTarget in value options")
        if not (isinstance(value, tuple) and len(value) == 2):
            raise MappingError("The value must be a (values, types) pair")
        raw_values, raw_types = value
        to_types: list[str] = []
        if isinstance(raw_types, str) and raw_types:
            to_types = raw_types.split(",")
        to_values = list(raw_values) if isinstance(raw_values, list) else [raw_values]

        if not to_types or len(to_types) != len(to_values):
            target.types = to_types
            target.values = to_values
            return

        converted_types: list[str] = []
        converted_values: list[Any] = []
        for java_type, item in zip(to_types, to_values):
            trimmed = java_type.strip()
            if trimmed not in J_TYPE_MAPPER:
                raise MappingError(f"Types invalid {trimmed}")
            converted_types.append(trimmed)
            converted_values.append(map_types(trimmed, item))
        target.types = converted_types
        target.values = converted_values


class ParamTypesOption(RequestOption):
    """Overrides argument types from a comma-separated string of Java types."""

    def action(self, target: Any, value: Any) -> None:
        if not isinstance(value, str):
            raise MappingError("The val type must be string")
        if not isinstance(target, DubboTarget):
            raise MappingError("Target is not dubboTarget in target parameter")
        types = value.split(",")
        result: list[str] = []
        for java_type in types:
            trimmed = java_type.strip()
            if not trimmed:
                result.append(java_type)
                continue
            if trimmed not in J_TYPE_MAPPER:
                raise MappingError(f"Types invalid {trimmed}")
            result.append(trimmed)
        target.types = result


DEFAULT_MAP_OPTION: dict[str, RequestOption] = {
    OPTION_KEY_TYPES: ParamTypesOption(),
    OPTION_KEY_GROUP: GroupOption(),
    OPTION_KEY_VERSION: VersionOption(),
    OPTION_KEY_INTERFACE: InterfaceOption(),
    OPTION_KEY_APPLICATION: ApplicationOption(),
    OPTION_KEY_METHOD: MethodOption(),
    OPTION_KEY_VALUES: ValuesOption(),
}


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


def get_generic_map_to(map_to: str) -> tuple[bool, str]:
    """Recognise ``opt.<field>`` destinations; return (is_generic, field)."""
    fields = map_to.split(".")
    if len(fields) != 2 or fields[0] != _GENERIC_PREFIX:
        return False, ""
    if fields[1] not in DEFAULT_MAP_OPTION:
        return False, ""
    return True, fields[1]


def build_option(param: MappingParam) -> RequestOption | None:
    """Return the generic option for ``param``'s destination, if any."""
    is_generic, field = get_generic_map_to(param.map_to)
    return DEFAULT_MAP_OPTION[field] if is_generic else None


def new_dubbo_target(params: Iterable[MappingParam]) -> DubboTarget | None:
    """Pre-size a target for the positional parameters; None if there are none."""
    length = 0
    for param in params:
        is_generic, field = get_generic_map_to(param.map_to)
        if is_generic and field != OPTION_KEY_VALUES:
            continue
        length += 1
    if length == 0:
        return None
    return DubboTarget(values=[None] * length, types=[""] * length)


def validate_target(target: Any) -> DubboTarget:
    """Check that ``target`` is a :class:`DubboTarget` and return it."""
    if not isinstance(target, DubboTarget):
        raise MappingError("Target params for dubbo backend must be *dubbogoTarget")
    return target


def _target_or_none(target: Any) -> DubboTarget | None:
    # A missing target is allowed when every mapping is a generic option.
    return None if target is None else validate_target(target)


def set_common_target(
    target: DubboTarget, position: int, value: Any, target_type: str
) -> None:
    """Store ``value`` and its type at ``position``, growing the lists if needed."""
    if position >= len(target.values):
        target.values.extend([None] * (position + 1 - len(target.values)))
    if position >= len(target.types):
        target.types.extend([""] * (position + 1 - len(target.types)))
    target.values[position] = value
    target.types[position] = target_type


def set_generic_target(
    request: Request,
    option: RequestOption,
    target: DubboTarget | None,
    value: Any,
    target_type: str,
) -> None:
    """Apply a generic option: to the request, or to the target's values/types."""
    if isinstance(
        option, (GroupOption, VersionOption, InterfaceOption, ApplicationOption, MethodOption)
    ):
        option.action(request, value)
    elif isinstance(option, ValuesOption):
        option.action(target, (value, target_type))
    elif isinstance(option, ParamTypesOption):
        option.action(target, value)


def set_target_with_option(
    request: Request,
    option: RequestOption | None,
    target: DubboTarget | None,
    position: int,
    value: Any,
    target_type: str,
) -> None:
    """Set ``value`` through ``option`` if given, else at ``position``."""
    if option is not None:
        set_generic_target(request, option, target, value, target_type)
        return
    converted = map_types(target_type, value)
    if target is None:
        raise MappingError("Target params for dubbo backend must be *dubbogoTarget")
    set_common_target(target, position, converted, target_type)


# ---------------------------------------------------------------------------
# Value conversion
# ---------------------------------------------------------------------------


def _describe(value: Any) -> tuple[str, str]:
    if isinstance(value, str):
        return json.dumps(value), "string"
    return repr(value), type(value).__name__


def _cast_error(value: Any, name: str) -> MappingError:
    shown, type_name = _describe(value)
    return MappingError(f"unable to cast {shown} of type {type_name} to {name}")


_INT_TEXT = re.compile(r"[+-]?\d+", re.ASCII)
_LEGACY_OCTAL = re.compile(r"[+-]?0[0-7]+", re.ASCII)


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    raise _cast_error(value, "string")


def _parse_int_text(text: str) -> int:
    if text != text.strip():
        raise ValueError(text)
    if _LEGACY_OCTAL.fullmatch(text):
        return int(text, 8)
    return int(text, 0)


def _to_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return _parse_int_text(value)
        except ValueError:
            raise _cast_error(value, name) from None
    raise _cast_error(value, name)


def _to_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if value != value.strip():
            raise _cast_error(value, name)
        try:
            return float(value)
        except ValueError:
            raise _cast_error(value, name) from None
    raise _cast_error(value, name)


_TRUE_TEXT = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_TEXT = {"0", "f", "F", "FALSE", "false", "False"}


def _to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        if value in _TRUE_TEXT:
            return True
        if value in _FALSE_TEXT:
            return False
        raise _cast_error(value, "bool")
    raise _cast_error(value, "bool")


_TIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d",
    "%d %b %Y",
    "%d %b %y %H:%M %z",
    "%a, %d %b %Y %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S %Z",
    "%a %b %d %H:%M:%S %Y",
)


def _to_time(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        raise _cast_error(value, "Time")
    if isinstance(value, (int, float)):
        return datetime.datetime.fromtimestamp(value, datetime.timezone.utc)
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            return datetime.datetime.fromisoformat(text)
        except ValueError:
            pass
        for fmt in _TIME_FORMATS:
            try:
                return datetime.datetime.strptime(value, fmt)
            except ValueError:
                continue
        raise MappingError(f"unable to parse date: {value}")
    raise _cast_error(value, "Time")


def map_types(java_type: str, value: Any) -> Any:
    """Convert ``value`` to the Python value matching Java type ``java_type``."""
    kind = J_TYPE_MAPPER.get(java_type)
    if kind is None:
        raise MappingError(f"Invalid parameter type: {java_type}")
    if kind is JType.STRING:
        return _to_str(value)
    if kind in (JType.INT, JType.INT16, JType.INT64):
        return _to_int(value, kind.value)
    if kind in (JType.FLOAT32, JType.FLOAT64):
        return _to_float(value, kind.value)
    if kind is JType.BOOL:
        return _to_bool(value)
    if kind is JType.TIME:
        return _to_time(value)
    return value


# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


def _position(param: MappingParam, option: RequestOption | None, message: str) -> int:
    if _INT_TEXT.fullmatch(param.map_to):
        position = int(param.map_to)
        if position >= 0 or option is not None:
            return position
    if option is None:
        raise MappingError(message)
    return 0


class QueryStringsMapper(ParamMapper):
    """Maps a query-string parameter onto the target."""

    def map(
        self,
        param: MappingParam,
        request: Request,
        target: Any,
        option: RequestOption | None,
    ) -> None:
        dubbo_target = _target_or_none(target)
        query = request.ingress_request.query()
        _, keys = parse_map_source(param.name)
        position = _position(param, option, f"Parameter mapping {param} incorrect")
        values = query.get(keys[0]) or [""]
        if not values[0]:
            raise MappingError(f"Query parameter [{' '.join(keys)}] does not exist")
        set_target_with_option(
            request, option, dubbo_target, position, values[0], param.map_type
        )


class HeaderMapper(ParamMapper):
    """Maps a request header onto the target."""

    def map(
        self,
        param: MappingParam,
        request: Request,
        target: Any,
        option: RequestOption | None,
    ) -> None:
        dubbo_target = _target_or_none(target)
        _, keys = parse_map_source(param.name)
        position = _position(param, option, f"Parameter mapping {param} incorrect")
        header = request.ingress_request.header(keys[0])
        if not header:
            raise MappingError(f"Header {keys[0]} not found")
        set_target_with_option(request, option, dubbo_target, position, header, param.map_type)


class BodyMapper(ParamMapper):
    """Maps a field of a JSON request body onto the target.

    A body that is not a JSON object is treated as empty, and a missing
    field maps as ``None``.
    """

    def map(
        self,
        param: MappingParam,
        request: Request,
        target: Any,
        option: RequestOption | None,
    ) -> None:
        dubbo_target = _target_or_none(target)
        _, keys = parse_map_source(param.name)
        position = _position(
            param,
            option,
            f"Parameter mapping {param} incorrect, parameters for Dubbo backend "
            "must be mapped to an int to represent position",
        )
        try:
            body = json.loads(request.ingress_request.body or b"{}")
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        try:
            value = get_map_value(body, keys)
        except MappingError:
            value = None
        try:
            set_target_with_option(
                request, option, dubbo_target, position, value, param.map_type
            )
        except MappingError as exc:
            raise MappingError(f"set target fail: {exc}") from exc


class UriMapper(ParamMapper):
    """Maps a ``:name`` path parameter onto the target."""

    def map(
        self,
        param: MappingParam,
        request: Request,
        target: Any,
        option: RequestOption | None,
    ) -> None:
        dubbo_target = _target_or_none(target)
        _, keys = parse_map_source(param.name)
        position = _position(param, option, f"Parameter mapping {param} incorrect")
        uri_values = request.api.uri_params(request.ingress_request.url) or {}
        set_target_with_option(
            request,
            option,
            dubbo_target,
            position,
            uri_values.get(keys[0], ""),
            param.map_type,
        )


MAPPERS: dict[str, ParamMapper] = {
    QUERY_STRINGS: QueryStringsMapper(),
    HEADERS: HeaderMapper(),
    REQUEST_BODY: BodyMapper(),
    REQUEST_URI: UriMapper(),
}