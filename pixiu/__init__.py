"""Gateway building blocks: request parameter mapping for Dubbo generic calls, response normalisation, plugin registries and API configuration."""

__version__ = "0.4.0"