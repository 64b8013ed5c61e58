"""API descriptions, backend settings and the request/response wrappers."""

from __future__ import annotations

import dataclasses
from typing import Any
from urllib.parse import parse_qs, urlsplit

from pixiu.constants import PATH_PARAM_IDENTIFIER, PATH_SLASH

HTTP_REQUEST = "http"
DUBBO_REQUEST = "dubbo"


def _yaml(name: str) -> dict[str, str]:
    return {"yaml": name}


@dataclasses.dataclass
class DubboMetadata:
    """Dubbo service metadata from the API configuration."""

    application_name: str = dataclasses.field(default="", metadata=_yaml("application_name"))
    group: str = ""
    version: str = ""
    interface: str = ""
    method: str = ""
    types: list[str] = dataclasses.field(default_factory=list)
    retries: str = ""
    cluster_name: str = dataclasses.field(default="", metadata=_yaml("cluster_name"))
    protocol_type_str: str = dataclasses.field(default="", metadata=_yaml("protocol_type"))
    serialization_type_str: str = dataclasses.field(
        default="", metadata=_yaml("serialization_type")
    )


@dataclasses.dataclass
class MappingParam:
    """One parameter mapping: where a value comes from and where it goes."""

    name: str = ""
    map_to: str = dataclasses.field(default="", metadata=_yaml("mapTo"))
    map_type: str = dataclasses.field(default="", metadata=_yaml("mapType"))

    def __str__(self) -> str:
        return f"{{{self.name} {self.map_to} {self.map_type}}}"


@dataclasses.dataclass
class DubboBackendConfig:
    """Settings of a Dubbo backend."""

    cluster_name: str = dataclasses.field(default="", metadata=_yaml("clusterName"))
    application_name: str = dataclasses.field(default="", metadata=_yaml("applicationName"))
    protocol: str = ""
    group: str = ""
    version: str = ""
    interface: str = ""
    method: str = ""
    types: list[str] = dataclasses.field(default_factory=list, metadata=_yaml("paramTypes"))
    retries: str = ""


@dataclasses.dataclass
class HTTPBackendConfig:
    """Settings of an HTTP backend."""

    url: str = ""
    host: str = ""
    path: str = ""
    schema: str = dataclasses.field(default="", metadata=_yaml("scheme"))


@dataclasses.dataclass
class IntegrationRequest:
    """How an inbound request is forwarded to its backend."""

    request_type: str = dataclasses.field(default="", metadata=_yaml("requestType"))
    mapping_params: list[MappingParam] = dataclasses.field(
        default_factory=list, metadata=_yaml("mappingParams")
    )
    http_backend_config: HTTPBackendConfig = dataclasses.field(
        default_factory=HTTPBackendConfig, metadata=_yaml("httpBackendConfig")
    )
    dubbo_backend_config: DubboBackendConfig = dataclasses.field(
        default_factory=DubboBackendConfig, metadata=_yaml("dubboBackendConfig")
    )


def _segments(path: str) -> list[str]:
    return path.strip(PATH_SLASH).split(PATH_SLASH)


@dataclasses.dataclass
class API:
    """One routed API: URL pattern, HTTP verb and backend integration."""

    url_pattern: str = ""
    http_verb: str = "GET"
    integration_request: IntegrationRequest = dataclasses.field(
        default_factory=IntegrationRequest
    )

    def uri_params(self, path: str) -> dict[str, str] | None:
        """Extract ``:name`` parameters of the URL pattern from ``path``.

        Returns ``None`` when ``path`` does not match the pattern.
        """
        actual = _segments(urlsplit(path).path)
        expected = _segments(self.url_pattern)
        if len(actual) != len(expected):
            return None
        params: dict[str, str] = {}
        for pattern_part, value in zip(expected, actual):
            if pattern_part.startswith(PATH_PARAM_IDENTIFIER):
                params[pattern_part[len(PATH_PARAM_IDENTIFIER):]] = value
            elif pattern_part != value:
                return None
        return params

    def is_wildcard_backend_path(self) -> bool:
        """Whether the HTTP backend path holds ``:name`` parameters."""
        path = self.integration_request.http_backend_config.path
        return any(
            segment.startswith(PATH_PARAM_IDENTIFIER) for segment in path.split(PATH_SLASH)
        )


@dataclasses.dataclass
class IngressRequest:
    """An inbound HTTP request as seen by the gateway."""

    method: str = "GET"
    url: str = "/"
    host: str = ""
    headers: dict[str, str] = dataclasses.field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        if not self.host:
            self.host = urlsplit(self.url).netloc

    def query(self) -> dict[str, list[str]]:
        """Parse the query string into lists of values per key."""
        return parse_qs(urlsplit(self.url).query, keep_blank_values=True)

    def header(self, name: str) -> str:
        """Return the header ``name`` (case-insensitive), or an empty string."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""


@dataclasses.dataclass
class Request:
    """A request bound for a backend endpoint."""

    ingress_request: IngressRequest
    api: API
    context: dict[str, Any] = dataclasses.field(default_factory=dict)

    def get_url(self) -> str:
        """Return the backend URL for HTTP integrations, else an empty string."""
        ir = self.api.integration_request
        if ir.request_type != HTTP_REQUEST:
            return ""
        if ir.http_backend_config.url:
            return ir.http_backend_config.url
        path = urlsplit(self.ingress_request.url).path
        return "http://" + self.ingress_request.host + path


@dataclasses.dataclass
class Response:
    """Data returned from an endpoint."""

    data: Any = None