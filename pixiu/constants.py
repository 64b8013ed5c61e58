"""Shared constants: environment keys, defaults, filter names and type maps."""

from __future__ import annotations

import datetime
import enum

VERSION = "0.4.0"

# Environment keys
ENV_RESPONSE_STRATEGY = "dgp-response-strategy"
ENV_MOCK = "dgp-mock"

ENV_DUBBOGO_PIXIU_CONFIG = "DUBBOGO_PIXIU_CONFIG"
ENV_DUBBOGO_PIXIU_API_CONFIG = "DUBBOGO_PIXIU_API_CONFIG"
ENV_DUBBOGO_PIXIU_LOG_CONFIG = "DUBBOGO_PIXIU_LOG_CONFIG"
ENV_DUBBOGO_PIXIU_LOG_LEVEL = "DUBBOGO_PIXIU_LOG_LEVEL"
ENV_DUBBOGO_PIXIU_LOG_FORMAT = "DUBBOGO_PIXIU_LOG_FORMAT"
ENV_DUBBOGO_PIXIU_LIMIT_CPUS = "DUBBOGO_PIXIU_LIMIT_CPUS"

# Default response bodies
DEFAULT_403_BODY = b"403 for bidden"
DEFAULT_404_BODY = b"404 page not found"
DEFAULT_405_BODY = b"405 method not allowed"
DEFAULT_406_BODY = b"406 api not up"
DEFAULT_503_BODY = b"503 service unavailable"

# Logging
FILE_DATE_FORMAT = "%Y-%m-%d"
MESSAGE_DATE_LAYOUT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MODE = 0o600
LOG_DATA_BUFFER = 5000
CONSOLE = "console"

# HTTP headers and paths
HEADER_KEY_CONTEXT_TYPE = "Content-Type"
HEADER_KEY_ACCESS_CONTROL_ALLOW_ORIGIN = "Access-Control-Allow-Origin"
HEADER_KEY_ACCESS_CONTROL_EXPOSE_HEADERS = "Access-Control-Expose-Headers"
HEADER_KEY_ACCESS_CONTROL_ALLOW_METHODS = "Access-Control-Allow-Methods"
HEADER_KEY_ACCESS_CONTROL_MAX_AGE = "Access-Control-Max-Age"
HEADER_KEY_ACCESS_CONTROL_ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"

HEADER_VALUE_JSON_UTF8 = "application/json;charset=UTF-8"
HEADER_VALUE_TEXT_PLAIN = "text/plain"
HEADER_VALUE_ALL = "*"

PATH_SLASH = "/"
PATH_PARAM_IDENTIFIER = ":"

HTTP1_HEADER_KEY_HOST = "Host"
HTTP2_HEADER_KEY_HOST = ":authority"

PPROF_DEFAULT_ADDRESS = "0.0.0.0"
PPROF_DEFAULT_PORT = 7070


class JType(enum.Enum):
    """Target value kinds that Java parameter type names map onto."""

    STRING = "string"
    INT16 = "int16"
    INT = "int"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"
    TIME = "time"
    OBJECT = "object"

    @property
    def python_type(self) -> type:
        return _PYTHON_TYPES[self]


_PYTHON_TYPES = {
    JType.STRING: str,
    JType.INT16: int,
    JType.INT: int,
    JType.INT64: int,
    JType.FLOAT32: float,
    JType.FLOAT64: float,
    JType.BOOL: bool,
    JType.TIME: datetime.datetime,
    JType.OBJECT: object,
}

# Java basic type names mapped to the value kind they convert to.
J_TYPE_MAPPER: dict[str, JType] = {
    "string": JType.STRING,
    "java.lang.String": JType.STRING,
    "char": JType.STRING,
    "short": JType.INT16,
    "int": JType.INT,
    "long": JType.INT64,
    "float": JType.FLOAT32,
    "double": JType.FLOAT64,
    "boolean": JType.BOOL,
    "java.util.Date": JType.TIME,
    "date": JType.TIME,
    "object": JType.OBJECT,
    "java.lang.Object": JType.OBJECT,
}

# Filter names
HTTP_CONNECT_MANAGER_FILTER = "dgp.filter.httpconnectionmanager"

HTTP_AUTHORITY_FILTER = "dgp.filter.http.authority"
HTTP_PROXY_FILTER = "dgp.filter.http.httpproxy"
HTTP_HEADER_FILTER = "dgp.filter.http.header"
HTTP_HOST_FILTER = "dgp.filter.http.host"
HTTP_METRIC_FILTER = "dgp.filter.http.metric"
HTTP_RECOVERY_FILTER = "dgp.filter.http.recovery"
HTTP_RESPONSE_FILTER = "dgp.filter.http.response"
HTTP_ACCESS_LOG_FILTER = "dgp.filter.http.accesslog"
HTTP_RATE_LIMIT_FILTER = "dgp.filter.http.ratelimit"
HTTP_GRPC_PROXY_FILTER = "dgp.filter.http.grpcproxy"
HTTP_DUBBO_PROXY_FILTER = "dgp.filter.http.dubboproxy"
HTTP_API_CONFIG_FILTER = "dgp.filter.http.apiconfig"
HTTP_TIMEOUT_FILTER = "dgp.filter.http.timeout"
TRACING_FILTER = "dgp.filters.tracing"
HTTP_CORS_FILTER = "dgp.filter.http.cors"

SPRING_CLOUD_ADAPTER = "dgp.adapter.springcloud"

# Command line keys
CONFIG_PATH_KEY = "config"
API_CONFIG_PATH_KEY = "api-config"
LOG_CONFIG_PATH_KEY = "log-config"
LOG_LEVEL_KEY = "log-level"
LIMIT_CPUS_KEY = "limit-cpus"
LOG_FORMAT_KEY = "log-format"

# Timeouts, in seconds
DEFAULT_TIMEOUT_STR = "1s"
DEFAULT_TIMEOUT = 1.0

DEFAULT_BODY_ALL = "_all"

RESPONSE_STRATEGY_NORMAL = "normal"
RESPONSE_STRATEGY_HUMP = "hump"

DEFAULT_DISCOVERY_TYPE = "EDS"
DEFAULT_LOAD_BALANCE_TYPE = "RoundRobin"
DEFAULT_FILTER_TYPE = "dgp.filter.httpconnectionmanager"
DEFAULT_HTTP_TYPE = "net/http"
DEFAULT_PROTOCOL_TYPE = "HTTP"

YAML = ".yaml"
YML = ".yml"

DEFAULT_CONFIG_PATH = "configs/conf.yaml"
DEFAULT_API_CONFIG_PATH = "configs/api_config.yaml"
DEFAULT_LOG_CONFIG_PATH = "configs/log.yml"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LIMIT_CPUS = "0"
DEFAULT_LOG_FORMAT = ""

# Interface keys
NAME_KEY = "name"
GROUP_KEY = "group"
VERSION_KEY = "version"
INTERFACE_KEY = "interface"
RETRIES_KEY = "retries"

# Mapping sources and destinations
REQUEST_BODY = "requestBody"
QUERY_STRINGS = "queryStrings"
HEADERS = "headers"
REQUEST_URI = "uri"
DOT = "."