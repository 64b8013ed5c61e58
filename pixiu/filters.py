"""HTTP and network filter plugins, their registries and the filter manager."""

from __future__ import annotations

import abc
import dataclasses
import logging
import threading
from collections.abc import Iterable
from typing import Any

from pixiu.yamlutil import YamlConfigError, parse_config

logger = logging.getLogger(__name__)


class FilterError(Exception):
    """Raised when a filter cannot be found, built or configured."""


@dataclasses.dataclass
class HTTPFilterConfig:
    """Name and raw configuration of one HTTP filter."""

    name: str
    config: dict[str, Any] | None = None


class HttpFilter(abc.ABC):
    """A filter applied to HTTP requests."""

    @abc.abstractmethod
    def prepare_filter_chain(self, ctx: Any) -> None:
        """Add this filter to the context's chain."""

    @abc.abstractmethod
    def handle(self, ctx: Any) -> None:
        """Process the request held by ``ctx``."""

    @abc.abstractmethod
    def apply(self) -> None:
        """Finish initialisation after configuration; raise on failure."""

    @abc.abstractmethod
    def config(self) -> Any:
        """Return the mutable configuration object of the filter."""


class HttpFilterPlugin(abc.ABC):
    """Factory for HTTP filters of one kind."""

    @abc.abstractmethod
    def kind(self) -> str:
        """Return the unique kind name of this plugin."""

    @abc.abstractmethod
    def create_filter(self) -> HttpFilter:
        """Build a new, unconfigured filter."""


class NetworkFilter(abc.ABC):
    """A filter that receives HTTP contexts from a listener."""

    @abc.abstractmethod
    def on_data(self, ctx: Any) -> None:
        """Handle the context; raise on failure."""


class NetworkFilterPlugin(abc.ABC):
    """Factory for network filters of one kind."""

    @abc.abstractmethod
    def kind(self) -> str:
        """Return the unique kind name of this plugin."""

    @abc.abstractmethod
    def create_filter(self, config: Any, bootstrap: Any) -> NetworkFilter:
        """Build a network filter from its configuration."""


_http_filter_plugins: dict[str, HttpFilterPlugin] = {}
_network_filter_plugins: dict[str, NetworkFilterPlugin] = {}


def _register(registry: dict[str, Any], plugin: Any) -> None:
    kind = plugin.kind()
    if not kind:
        raise ValueError(f"{type(plugin).__name__}: empty kind")
    existing = registry.get(kind)
    if existing is not None:
        raise ValueError(
            f"{type(plugin).__name__} and {type(existing).__name__} got same kind: {kind}"
        )
    registry[kind] = plugin


def _lookup(registry: dict[str, Any], kind: str) -> Any:
    try:
        return registry[kind]
    except KeyError:
        raise FilterError(f"plugin not found {kind}") from None


def register_http_filter(plugin: HttpFilterPlugin) -> None:
    """Register an HTTP filter plugin under its kind."""
    _register(_http_filter_plugins, plugin)


def get_http_filter_plugin(kind: str) -> HttpFilterPlugin:
    """Return the HTTP filter plugin registered for ``kind``."""
    return _lookup(_http_filter_plugins, kind)


def register_network_filter(plugin: NetworkFilterPlugin) -> None:
    """Register a network filter plugin under its kind."""
    _register(_network_filter_plugins, plugin)


def get_network_filter_plugin(kind: str) -> NetworkFilterPlugin:
    """Return the network filter plugin registered for ``kind``."""
    return _lookup(_network_filter_plugins, kind)


class FilterManager:
    """Builds and holds the active HTTP filters."""

    def __init__(self, filter_configs: Iterable[HTTPFilterConfig] | None = None) -> None:
        self._filter_configs = list(filter_configs or [])
        self._filters: list[HttpFilter] = []
        self._lock = threading.RLock()

    def get_filters(self) -> list[HttpFilter]:
        """Return the active filters in configuration order."""
        with self._lock:
            return list(self._filters)

    def load(self) -> None:
        """Build filters from the configuration given at construction."""
        self.reload(self._filter_configs)

    def reload(self, filter_configs: Iterable[HTTPFilterConfig]) -> None:
        """Replace the active filters with ones built from ``filter_configs``.

        Filters that fail to build are logged and left out.
        """
        built: list[HttpFilter] = []
        for entry in filter_configs:
            try:
                built.append(self.apply(entry.name, entry.config))
            except FilterError as exc:
                logger.error("apply [%s] init fail, %s", entry.name, exc)
        with self._lock:
            self._filters = built

    def apply(self, name: str, conf: dict[str, Any] | None) -> HttpFilter:
        """Build, configure and initialise the filter registered as ``name``."""
        try:
            plugin = get_http_filter_plugin(name)
        except FilterError as exc:
            raise FilterError("filter not found") from exc
        try:
            http_filter = plugin.create_filter()
        except Exception as exc:
            raise FilterError("plugin create filter error") from exc
        try:
            parse_config(http_filter.config(), conf)
        except YamlConfigError as exc:
            raise FilterError(f"config error: {exc}") from exc
        try:
            http_filter.apply()
        except Exception as exc:
            raise FilterError(f"create fail: {exc}") from exc
        return http_filter