# pixiu

Building blocks for an API gateway that forwards incoming HTTP requests to
Dubbo services.

## What is in the package

- `pixiu.api`: dataclasses that describe an API (`API`, `IntegrationRequest`,
  `MappingParam`, `DubboBackendConfig`, `HTTPBackendConfig`, `DubboMetadata`).
  It also has the request wrappers `IngressRequest` (method, URL, headers,
  body), `Request` and `Response`. `API.uri_params(path)` pulls `:name`
  parameters out of a path. `Request.get_url()` gives the backend URL of an
  HTTP integration.
- `pixiu.mapping`: the abstract `Client`, `ParamMapper` and `RequestOption`
  interfaces, along with `parse_map_source` and `get_map_value`.
- `pixiu.dubbo_mapping`: maps query strings, headers, JSON body fields and
  URI parameters onto positional generic-call arguments (`DubboTarget`). It
  handles generic `opt.<field>` destinations (`opt.interface`, `opt.group`,
  `opt.version`, `opt.method`, `opt.application`, `opt.values`,
  `opt.types`) and converts values to Java types with `map_types`.
- `pixiu.dubbo_client`: `DubboClient` maps a request's parameters and calls
  a generic service. The service comes from a `service_factory` that you
  pass in, and the client caches it per backend key (`api_key`).
  `singleton_dubbo_client()` returns one client for the whole process.
- `pixiu.http_response`: `new_dubbo_response`, `deal_response`,
  `hump_to_line` and `hump_to_underline` turn camel-case map keys into
  snake case.
- `pixiu.filters`: registries for HTTP and network filter plugins, plus
  `FilterManager`, which builds configured filters from `HTTPFilterConfig`
  entries.
- `pixiu.adapter`: a registry for adapter plugins.
- `pixiu.api_config`: `APIConfig`, `Resource` and `Method`. `APIConfigStore`
  loads them from a YAML file or from key/value listings, applies put and
  delete events, and notifies an `APIConfigResourceListener`.
- `pixiu.yamlutil`: reads YAML files and decodes them into dicts,
  dataclasses or objects.
- `pixiu.constants`: shared names, defaults and the Java type table
  `J_TYPE_MAPPER`.
- `pixiu.stringutil`: `str_in_slice`.

## Installation

```
pip install .
```

Python 3.10 or later is required. The only runtime dependency is PyYAML.

## Examples

```python
from pixiu.mapping import parse_map_source, get_map_value

source, keys = parse_map_source("requestBody.user.id")
# source == "requestBody", keys == ["user", "id"]
get_map_value({"user": {"id": 7}}, keys)   # -> 7
```

```python
from pixiu.dubbo_mapping import map_types, get_generic_map_to

map_types("int", "123")              # -> 123
map_types("string", 123)             # -> "123"
get_generic_map_to("opt.interface")  # -> (True, "interface")
```

Mapping request parameters onto Dubbo arguments:

```python
from pixiu.api import API, IngressRequest, MappingParam, Request
from pixiu.dubbo_client import DubboClient

api = API(url_pattern="/user/:id")
api.integration_request.mapping_params = [
    MappingParam(name="uri.id", map_to="0", map_type="long"),
    MappingParam(name="queryStrings.name", map_to="1", map_type="string"),
]
request = Request(IngressRequest(url="/user/42?name=joe"), api)
target = DubboClient().map_params(request)
# target.values == [42, "joe"], target.types == ["long", "string"]
```

```python
from pixiu.http_response import hump_to_underline

hump_to_underline("firstName")   # -> "first_name"
```

```python
from pixiu.api_config import load_api_config_from_file

config = load_api_config_from_file("api_config.yml")
print(config.name, [resource.path for resource in config.resources])
```

To register your own HTTP filter plugin (a subclass of `HttpFilterPlugin`)
and build filters from configuration:

```python
from pixiu.filters import FilterManager, HTTPFilterConfig, register_http_filter

register_http_filter(my_plugin)
manager = FilterManager([HTTPFilterConfig(name="my.filter", config={"foo": "bar"})])
manager.load()
filters = manager.get_filters()
```

Errors are raised as exceptions: `MappingError`, `FilterError`,
`PluginNotFoundError`, `APIConfigError` and `YamlConfigError`.

## What the package does not do

- It has no command, no listener and no server. Nothing here accepts
  connections or routes live traffic.
- It has no client for plain HTTP backends, and no mapping of parameters
  onto outgoing HTTP requests.
- `DubboClient` does not speak the Dubbo protocol and does not contact
  registries. You supply the generic service through `service_factory`.
- `APIConfigStore` does not connect to a configuration center. You pass it
  key/value listings and put/delete events yourself.

## Running the tests

```
pip install ".[test]"
pytest
```