"""API resource/method configuration, loaded from a file or from key/value events."""

from __future__ import annotations

import abc
import dataclasses
import logging
import re
import threading
from collections.abc import Mapping, Sequence
from typing import Any

import yaml

from pixiu.yamlutil import YamlConfigError, load_yml_config

logger = logging.getLogger(__name__)

BASE_INFO_NAME = "name"
BASE_INFO_DESC = "description"

_BASE_INFO_KEY = re.compile(r".+/base$")
_RESOURCE_KEY = re.compile(r".+/resources/[^/]+/?$")
_METHOD_KEY = re.compile(r".+/resources/([^/]+)/method/[^/]+/?$")
_RATELIMIT_KEY = re.compile(r".+/filter/ratelimit")


class APIConfigError(Exception):
    """Raised when an API configuration cannot be read or parsed."""


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise APIConfigError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _int(value: Any, what: str) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise APIConfigError(f"{what} is not an integer: {value!r}") from None


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_yaml(text: str | bytes) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise APIConfigError(f"unmarshalYmlConfig error {exc}") from exc


def _text(value: str | bytes) -> str:
    return value.decode("utf-8") if isinstance(value, (bytes, bytearray)) else value


@dataclasses.dataclass
class Method:
    """One HTTP verb of a resource and how it is forwarded."""

    id: int = 0
    resource_path: str = ""
    http_verb: str = ""
    enable: bool = False
    mock: bool = False
    timeout: str = ""
    inbound_request: dict[str, Any] = dataclasses.field(default_factory=dict)
    integration_request: dict[str, Any] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Method:
        """Build a method from its YAML mapping."""
        m = _mapping(data, "method")
        return cls(
            id=_int(m.get("id"), "method id"),
            resource_path=_str(m.get("resourcePath")),
            http_verb=_str(m.get("httpVerb")),
            enable=bool(m.get("enable", False)),
            mock=bool(m.get("mock", False)),
            timeout=_str(m.get("timeout")),
            inbound_request=dict(_mapping(m.get("inboundRequest"), "inboundRequest")),
            integration_request=dict(
                _mapping(m.get("integrationRequest"), "integrationRequest")
            ),
        )


@dataclasses.dataclass
class Resource:
    """A path with its methods and nested resources."""

    id: int = 0
    type: str = ""
    path: str = ""
    timeout: str = ""
    description: str = ""
    filters: list[str] = dataclasses.field(default_factory=list)
    methods: list[Method] = dataclasses.field(default_factory=list)
    resources: list[Resource] = dataclasses.field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Resource:
        """Build a resource (and its methods and children) from its YAML mapping."""
        m = _mapping(data, "resource")
        return cls(
            id=_int(m.get("id"), "resource id"),
            type=_str(m.get("type")),
            path=_str(m.get("path")),
            timeout=_str(m.get("timeout")),
            description=_str(m.get("description")),
            filters=[_str(f) for f in m.get("filters") or []],
            methods=[Method.from_dict(item) for item in m.get("methods") or []],
            resources=[Resource.from_dict(item) for item in m.get("resources") or []],
        )


@dataclasses.dataclass
class APIConfig:
    """The whole API configuration: base information and resources."""

    name: str = ""
    description: str = ""
    resources: list[Resource] = dataclasses.field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> APIConfig:
        """Build an API configuration from its YAML mapping."""
        m = _mapping(data, "api config")
        return cls(
            name=_str(m.get("name")),
            description=_str(m.get("description")),
            resources=[Resource.from_dict(item) for item in m.get("resources") or []],
        )


class APIConfigResourceListener(abc.ABC):
    """Receives changes to resources and methods."""

    @abc.abstractmethod
    def resource_change(self, new: Resource, old: Resource) -> bool:
        """A resource was modified."""

    @abc.abstractmethod
    def resource_add(self, resource: Resource) -> bool:
        """A resource was added."""

    @abc.abstractmethod
    def resource_delete(self, deleted: Resource) -> bool:
        """A resource was deleted."""

    @abc.abstractmethod
    def method_change(self, resource: Resource, method: Method, old: Method) -> bool:
        """A method of ``resource`` was modified."""

    @abc.abstractmethod
    def method_add(self, resource: Resource, method: Method) -> bool:
        """A method was added to ``resource``."""

    @abc.abstractmethod
    def method_delete(self, resource: Resource, method: Method) -> bool:
        """A method was removed from ``resource``."""


def _apply_base_info(conf: APIConfig, text: str) -> None:
    properties = _mapping(_parse_yaml(text), "base info")
    if BASE_INFO_NAME in properties:
        conf.name = _str(properties[BASE_INFO_NAME])
    if BASE_INFO_DESC in properties:
        conf.description = _str(properties[BASE_INFO_DESC])


def _merge_resources(conf: APIConfig, values: Sequence[str]) -> None:
    for value in values:
        resource = Resource.from_dict(_parse_yaml(value))
        found = False
        for index, old in enumerate(conf.resources):
            if old.path != resource.path:
                continue
            # keep the methods already known for this path
            conf.resources[index] = dataclasses.replace(resource, methods=old.methods)
            found = True
        if not found:
            conf.resources.append(resource)


def _merge_methods(conf: APIConfig, values: Sequence[str]) -> None:
    for value in values:
        method = Method.from_dict(_parse_yaml(value))
        found = False
        for resource in conf.resources:
            if method.resource_path != resource.path:
                continue
            for index, old in enumerate(resource.methods):
                if old.http_verb == method.http_verb:
                    resource.methods[index] = method
                    found = True
            if not found:
                resource.methods.append(method)
                found = True
        if not found:
            conf.resources.append(Resource(path=method.resource_path, methods=[method]))


class APIConfigStore:
    """Holds the current API configuration and applies changes to it."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.api_config = APIConfig()
        self.listener: APIConfigResourceListener | None = None

    def register_listener(self, listener: APIConfigResourceListener) -> None:
        """Set the listener told about resource and method changes."""
        self.listener = listener

    def load_from_file(self, path: str) -> APIConfig:
        """Load the API configuration from a YAML file and make it current."""
        if not path:
            raise APIConfigError("Config file not specified")
        logger.info("Load API configuration file form %s", path)
        try:
            content = load_yml_config(path)
        except (YamlConfigError, OSError) as exc:
            raise APIConfigError(f"unmarshalYmlConfig error {exc}") from exc
        conf = APIConfig.from_dict(_parse_yaml(content))
        with self._lock:
            self.api_config = conf
        return conf

    def init_from_kv_list(self, keys: Sequence[str], values: Sequence[str]) -> APIConfig:
        """Build the configuration from config-center keys and YAML values."""
        base_info = ""
        resource_values: list[str] = []
        method_values: list[str] = []
        for key, value in zip(keys, values):
            key, value = _text(key), _text(value)
            if _BASE_INFO_KEY.search(key):
                base_info = value
            elif _RESOURCE_KEY.search(key):
                resource_values.append(value)
            elif _METHOD_KEY.search(key):
                method_values.append(value)

        with self._lock:
            conf = APIConfig()
            _apply_base_info(conf, base_info)
            _merge_resources(conf, resource_values)
            _merge_methods(conf, method_values)
            self.api_config = conf
            return conf

    def handle_put_event(self, key: str | bytes, value: str | bytes) -> None:
        """Apply a put of ``value`` at ``key``; unparsable values are logged."""
        key_text, value_text = _text(key), _text(value)
        with self._lock:
            try:
                if _RESOURCE_KEY.search(key_text):
                    self._merge_resource(Resource.from_dict(_parse_yaml(value_text)))
                elif _METHOD_KEY.search(key_text):
                    method = Method.from_dict(_parse_yaml(value_text))
                    self._merge_method(method.resource_path, method)
                elif _BASE_INFO_KEY.search(key_text):
                    _apply_base_info(self.api_config, value_text)
            except APIConfigError as exc:
                logger.error("handlePutEvent UnmarshalYML error %s", exc)

    def handle_delete_event(self, key: str | bytes) -> None:
        """Apply the deletion of ``key``; malformed keys are logged."""
        key_text = _text(key)
        parts = key_text.rstrip("/").split("/")
        with self._lock:
            if _RESOURCE_KEY.search(key_text):
                try:
                    resource_id = int(parts[-1])
                except ValueError as exc:
                    logger.error("handleDeleteEvent ID is not int error %s", exc)
                    return
                self._delete_resource(resource_id)
            elif _METHOD_KEY.search(key_text):
                if len(parts) < 3:
                    logger.error("handleDeleteEvent key format error")
                    return
                try:
                    resource_id = int(parts[-3])
                    method_id = int(parts[-1])
                except ValueError as exc:
                    logger.error("handleDeleteEvent ID is not int error %s", exc)
                    return
                self._delete_method(resource_id, method_id)

    def _delete_resource(self, resource_id: int) -> None:
        resources = self.api_config.resources
        for index, resource in enumerate(resources):
            if resource.id == resource_id:
                del resources[index]
                if self.listener is not None:
                    self.listener.resource_delete(resource)
                return

    def _merge_resource(self, new: Resource) -> None:
        resources = self.api_config.resources
        for index, old in enumerate(resources):
            if old.id != new.id:
                continue
            new.methods = old.methods
            resources[index] = new
            if self.listener is not None:
                self.listener.resource_change(new, old)
            return
        resources.append(new)
        if self.listener is not None:
            self.listener.resource_add(new)

    def _delete_method(self, resource_id: int, method_id: int) -> None:
        for resource in self.api_config.resources:
            if resource.id != resource_id:
                continue
            for index, method in enumerate(resource.methods):
                if method.id == method_id:
                    del resource.methods[index]
                    if self.listener is not None:
                        self.listener.method_delete(resource, method)
                    return

    def _merge_method(self, path: str, new: Method) -> None:
        for resource in self.api_config.resources:
            if resource.path != path:
                continue
            for index, old in enumerate(resource.methods):
                if old.id == new.id:
                    resource.methods[index] = new
                    if self.listener is not None:
                        self.listener.method_change(resource, new, old)
                    return
            resource.methods.append(new)
            if self.listener is not None:
                self.listener.method_add(resource, new)


_default_store = APIConfigStore()


def load_api_config_from_file(path: str) -> APIConfig:
    """Load the API configuration from ``path`` into the process-wide store."""
    return _default_store.load_from_file(path)