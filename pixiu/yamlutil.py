"""YAML loading and decoding into dicts, dataclasses and plain objects."""

from __future__ import annotations

import dataclasses
import enum
import inspect
import os
import re
import types
import typing
from collections.abc import Mapping
from typing import Any

import yaml


class YamlConfigError(Exception):
    """Raised when a YAML configuration cannot be read or decoded."""


def load_yml_config(path: str | os.PathLike) -> bytes:
    """Read the raw bytes of a ``.yml`` or ``.yaml`` file."""
    path = os.fspath(path)
    if not path:
        raise YamlConfigError("configure file name is nil")
    ext = os.path.splitext(path)[1]
    if ext not in (".yml", ".yaml"):
        raise YamlConfigError(
            f"configure file name{{{path}}} suffix must be .yml or .yaml"
        )
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except OSError as exc:
        raise YamlConfigError(f"read file {path} failed: {exc}") from exc


def unmarshal_yml_config(path: str | os.PathLike, target: Any) -> Any:
    """Read a YAML file and decode it into ``target``; return the result."""
    try:
        data = load_yml_config(path)
    except YamlConfigError as exc:
        raise YamlConfigError(f"ioutil.ReadFile(file:{os.fspath(path)}) = error:{exc}") from exc
    return unmarshal_yml(data, target)


def unmarshal_yml(data: bytes | str, target: Any) -> Any:
    """Decode the first YAML document in ``data`` into ``target``.

    ``target`` may be a dict (updated in place), a dataclass type (a new
    instance is built), or an object instance (matching attributes are set).
    The populated value is returned.
    """
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise YamlConfigError(f"yaml decode failed: {exc}") from exc
    return _populate(target, document)


def marshal_yml(value: Any) -> bytes:
    """Serialise ``value`` into a YAML document."""
    try:
        text = yaml.safe_dump(_to_plain(value), sort_keys=False, allow_unicode=True)
    except yaml.YAMLError as exc:
        raise YamlConfigError(f"yaml encode failed: {exc}") from exc
    return text.encode("utf-8")


def parse_config(target: Any, conf: Mapping[str, Any] | None) -> Any:
    """Decode a plain mapping into ``target`` by way of YAML."""
    return unmarshal_yml(marshal_yml(dict(conf) if conf is not None else None), target)


def _yaml_name(field: dataclasses.Field) -> str:
    return field.metadata.get("yaml", field.name)


_OPTIONAL_RE = re.compile(r"(?:typing\.)?Optional\[(.+)\]")
_UNION_RE = re.compile(r"(?:typing\.)?Union\[(.+)\]")
_SEQUENCE_RE = re.compile(
    r"(?:typing\.)?(list|List|tuple|Tuple|Sequence)\[(.+)\]"
)


def _split_top(text: str, sep: str) -> list[str]:
    """Split ``text`` on ``sep`` where it is not inside brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def _lookup(name: str, namespace: Mapping[str, Any]) -> type | None:
    head, *rest = name.split(".")
    obj = namespace.get(head)
    for attr in rest:
        if obj is None:
            return None
        obj = getattr(obj, attr, None)
    return obj if isinstance(obj, type) else None


def _parse_hint(text: str, namespace: Mapping[str, Any]) -> Any:
    """Resolve a string annotation into a dataclass or a list of one."""
    text = text.strip().strip("'\"")
    match = _OPTIONAL_RE.fullmatch(text)
    if match:
        text = match.group(1).strip()
    match = _UNION_RE.fullmatch(text)
    parts = _split_top(match.group(1), ",") if match else _split_top(text, "|")
    if len(parts) > 1:
        for part in parts:
            if part == "None":
                continue
            resolved = _parse_hint(part, namespace)
            if resolved is not None:
                return resolved
        return None

    match = _SEQUENCE_RE.fullmatch(text)
    if match:
        container = tuple if match.group(1) in ("tuple", "Tuple") else list
        inner_parts = _split_top(match.group(2), ",")
        inner = _parse_hint(inner_parts[0], namespace) if inner_parts else None
        return container[inner] if inner is not None else container

    if text == "None":
        return None
    return _lookup(text, namespace)


def _namespace(cls: type) -> Mapping[str, Any]:
    module = inspect.getmodule(cls)
    return vars(module) if module is not None else {}


def _type_hints(cls: type) -> dict[str, Any]:
    namespace: Mapping[str, Any] | None = None
    hints: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        hint = field.type
        if isinstance(hint, str):
            if namespace is None:
                namespace = _namespace(cls)
            hint = _parse_hint(hint, namespace)
        hints[field.name] = hint
    return hints


def _dataclass_in(hint: Any) -> type | None:
    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return hint
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is getattr(types, "UnionType", None):
        for arg in typing.get_args(hint):
            found = _dataclass_in(arg)
            if found is not None:
                return found
    return None


def _convert(hint: Any, value: Any) -> Any:
    if value is None:
        return None
    cls = _dataclass_in(hint)
    if cls is not None and isinstance(value, Mapping):
        return _populate(cls, value)
    origin = typing.get_origin(hint)
    if origin in (list, tuple) and isinstance(value, list):
        args = typing.get_args(hint)
        if args:
            converted = [_convert(args[0], item) for item in value]
            return tuple(converted) if origin is tuple else converted
    return value


def _check_mapping(target: Any, document: Any) -> None:
    if not isinstance(document, Mapping):
        name = target.__name__ if isinstance(target, type) else type(target).__name__
        raise YamlConfigError(
            f"cannot unmarshal {type(document).__name__} into {name}"
        )


def _populate(target: Any, document: Any) -> Any:
    if isinstance(target, dict):
        if document is None:
            return target
        _check_mapping(target, document)
        target.update(document)
        return target

    if isinstance(target, type) and dataclasses.is_dataclass(target):
        if document is None:
            document = {}
        _check_mapping(target, document)
        hints = _type_hints(target)
        kwargs = {}
        for field in dataclasses.fields(target):
            if not field.init:
                continue
            key = _yaml_name(field)
            if key in document:
                kwargs[field.name] = _convert(hints.get(field.name), document[key])
        try:
            return target(**kwargs)
        except TypeError as exc:
            raise YamlConfigError(f"cannot build {target.__name__}: {exc}") from exc

    if document is None:
        return target
    _check_mapping(target, document)

    if dataclasses.is_dataclass(target):
        hints = _type_hints(type(target))
        for field in dataclasses.fields(target):
            key = _yaml_name(field)
            if key not in document:
                continue
            current = getattr(target, field.name, None)
            value = document[key]
            if dataclasses.is_dataclass(current) and not isinstance(current, type) \
                    and isinstance(value, Mapping):
                _populate(current, value)
            else:
                setattr(target, field.name, _convert(hints.get(field.name), value))
        return target

    for key, value in document.items():
        if isinstance(key, str) and hasattr(target, key):
            setattr(target, key, value)
    return target


def _to_plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            _yaml_name(field): _to_plain(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, enum.Enum):
        return _to_plain(value.value)
    if isinstance(value, Mapping):
        return {_to_plain(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_plain(item) for item in value]
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value