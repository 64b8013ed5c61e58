"""Client that maps HTTP requests onto Dubbo generic invocations."""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from pixiu.api import IntegrationRequest, Request
from pixiu.constants import VERSION
from pixiu.dubbo_mapping import MAPPERS, DubboTarget, build_option, new_dubbo_target
from pixiu.mapping import Client, MappingError, parse_map_source

logger = logging.getLogger(__name__)

JAVA_STRING_CLASS_NAME = "java.lang.String"
JAVA_LANG_CLASS_NAME = "java.lang.Long"

DEFAULT_DUBBO_PROTOCOL = "zookeeper"
DEFAULT_INVOKE_PROTOCOL = "dubbo"
DEFAULT_CLUSTER = "failover"
DEFAULT_RETRIES = "3"


@dataclasses.dataclass
class RegistryConfig:
    """A registry such as zookeeper, nacos or etcd."""

    protocol: str = ""
    address: str = ""
    timeout: str = ""
    username: str = ""
    password: str = ""


@dataclasses.dataclass
class TimeoutConfig:
    """Connect and request timeouts, as duration strings."""

    connect_timeout_str: str = dataclasses.field(
        default="", metadata={"yaml": "connect_timeout"}
    )
    request_timeout_str: str = dataclasses.field(
        default="", metadata={"yaml": "request_timeout"}
    )


@dataclasses.dataclass
class DubboProxyConfig:
    """Configuration of the Dubbo proxy: registries and timeouts."""

    registries: dict[str, RegistryConfig] = dataclasses.field(default_factory=dict)
    timeout: TimeoutConfig | None = dataclasses.field(
        default=None, metadata={"yaml": "timeout_config"}
    )


@dataclasses.dataclass(frozen=True)
class _ApplicationConfig:
    organization: str
    name: str
    module: str
    version: str
    owner: str
    environment: str


_DEFAULT_APPLICATION = _ApplicationConfig(
    organization="dubbo-go-pixiu",
    name="Dubbogo Pixiu",
    module="dubbogo Pixiu",
    version=VERSION,
    owner="Dubbogo Pixiu",
    environment="dev",
)


@dataclasses.dataclass
class _ConsumerConfig:
    check: bool = False
    connect_timeout: str = ""
    request_timeout: str = ""
    application: _ApplicationConfig = _DEFAULT_APPLICATION
    registries: dict[str, RegistryConfig] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class _ReferenceConfig:
    interface_name: str
    cluster: str = DEFAULT_CLUSTER
    registry: str = ""
    protocol: str = DEFAULT_INVOKE_PROTOCOL
    version: str = ""
    group: str = ""
    generic: bool = True
    retries: str = DEFAULT_RETRIES


class _GenericService(Protocol):
    def invoke(self, method: str, types: list[str], values: list[Any]) -> Any: ...


ServiceFactory = Callable[[str, _ReferenceConfig], _GenericService]


def api_key(integration_request: IntegrationRequest) -> str:
    """Return the pool key identifying the backend service of a request."""
    dbc = integration_request.dubbo_backend_config
    return "_".join(
        [dbc.cluster_name, dbc.application_name, dbc.interface, dbc.version, dbc.group]
    )


class DubboClient(Client):
    """Maps request parameters and invokes Dubbo services generically.

    Generic services are built by ``service_factory`` from a reference
    configuration and cached per backend service.
    """

    def __init__(self, service_factory: ServiceFactory | None = None) -> None:
        self._lock = threading.RLock()
        self.generic_service_pool: dict[str, _GenericService | None] = {}
        self.service_factory = service_factory
        self.dubbo_proxy_config: DubboProxyConfig | None = None
        self.consumer_config: _ConsumerConfig | None = None

    def set_config(self, config: DubboProxyConfig) -> None:
        """Set the proxy configuration used by :meth:`apply`."""
        self.dubbo_proxy_config = config

    def apply(self) -> None:
        """Build the consumer configuration from the proxy configuration."""
        config = self.dubbo_proxy_config
        if config is None:
            raise ValueError("dubbo proxy config is not set")
        timeout = config.timeout or TimeoutConfig()
        registries: dict[str, RegistryConfig] = {}
        for name, registry in config.registries.items():
            protocol = registry.protocol
            if not protocol:
                logger.warning(
                    "can not find registry protocol config, use default type 'zookeeper'"
                )
                protocol = DEFAULT_DUBBO_PROTOCOL
            registries[name] = dataclasses.replace(registry, protocol=protocol)
        self.consumer_config = _ConsumerConfig(
            check=False,
            connect_timeout=timeout.connect_timeout_str,
            request_timeout=timeout.request_timeout_str,
            application=_DEFAULT_APPLICATION,
            registries=registries,
        )

    def close(self) -> None:
        """Drop every cached generic service."""
        with self._lock:
            self.generic_service_pool.clear()

    def map_params(self, request: Request) -> DubboTarget | None:
        """Map the request's parameters onto generic-call arguments."""
        ir = request.api.integration_request
        target = new_dubbo_target(ir.mapping_params)
        for param in ir.mapping_params:
            source, _ = parse_map_source(param.name)
            mapper = MAPPERS.get(source)
            if mapper is not None:
                mapper.map(param, request, target, build_option(param))
        return target

    def call(self, request: Request) -> Any:
        """Invoke the backend service described by the request's API."""
        target = self.map_params(request)
        if not isinstance(target, DubboTarget):
            raise MappingError("map parameters failed")
        ir = request.api.integration_request
        method = ir.dubbo_backend_config.method
        logger.debug(
            "dubbo invoke, method:%s, types:%s, reqData:%s",
            method,
            target.types,
            target.values,
        )
        service = self._get(ir)
        result = service.invoke(method, target.types, target.values)
        logger.debug("dubbo client resp:%s", result)
        return result

    def _get(self, ir: IntegrationRequest) -> _GenericService:
        key = api_key(ir)
        with self._lock:
            service = self.generic_service_pool.get(key)
            if service is not None:
                return service
            service = self._create(key, ir)
            self.generic_service_pool[key] = service
            return service

    def _create(self, key: str, ir: IntegrationRequest) -> _GenericService:
        if self.service_factory is None:
            raise RuntimeError("no generic service factory configured")
        dbc = ir.dubbo_backend_config
        registries = self.consumer_config.registries if self.consumer_config else {}
        reference = _ReferenceConfig(
            interface_name=dbc.interface,
            cluster=DEFAULT_CLUSTER,
            registry=",".join(registries),
            protocol=dbc.protocol or DEFAULT_INVOKE_PROTOCOL,
            version=dbc.version,
            group=dbc.group,
            generic=True,
            retries=dbc.retries or DEFAULT_RETRIES,
        )
        return self.service_factory(key, reference)


_singleton: DubboClient | None = None
_singleton_lock = threading.Lock()


def singleton_dubbo_client() -> DubboClient:
    """Return the process-wide Dubbo client, creating it on first use."""
    global _singleton
    if _singleton is None:
        with _singleton_lock:
            if _singleton is None:
                _singleton = DubboClient()
    return _singleton