"""Adapter plugins and the registry that holds them by kind."""

from __future__ import annotations

import abc
from typing import Any


class PluginNotFoundError(LookupError):
    """Raised when no plugin is registered for a kind."""


class Adapter(abc.ABC):
    """An adapter with a start/stop lifetime."""

    @abc.abstractmethod
    def start(self) -> None:
        """Start the adapter."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Stop the adapter."""

    @abc.abstractmethod
    def apply(self) -> None:
        """Initialise the adapter; raise on failure."""

    @abc.abstractmethod
    def config(self) -> Any:
        """Return the adapter's configuration object."""


class AdapterPlugin(abc.ABC):
    """Factory for adapters of one kind."""

    @abc.abstractmethod
    def kind(self) -> str:
        """Return the unique kind name of this plugin."""

    @abc.abstractmethod
    def create_adapter(self, config: Any, bootstrap: Any) -> Adapter:
        """Build an adapter from its configuration."""


_adapter_plugins: dict[str, AdapterPlugin] = {}


def register_adapter_plugin(plugin: AdapterPlugin) -> None:
    """Register ``plugin`` under its kind; kinds must be non-empty and unique."""
    kind = plugin.kind()
    if not kind:
        raise ValueError(f"{type(plugin).__name__}: empty kind")
    existing = _adapter_plugins.get(kind)
    if existing is not None:
        raise ValueError(
            f"{type(plugin).__name__} and {type(existing).__name__} got same kind: {kind}"
        )
    _adapter_plugins[kind] = plugin


def get_adapter_plugin(kind: str) -> AdapterPlugin:
    """Return the plugin registered for ``kind``."""
    try:
        return _adapter_plugins[kind]
    except KeyError:
        raise PluginNotFoundError(f"plugin not found {kind}") from None