from pixiu.api import (
    API,
    DUBBO_REQUEST,
    HTTP_REQUEST,
    HTTPBackendConfig,
    IngressRequest,
    IntegrationRequest,
    MappingParam,
    Request,
    Response,
)


def _api(pattern="/mock/test", request_type=HTTP_REQUEST, backend=None):
    return API(
        url_pattern=pattern,
        integration_request=IntegrationRequest(
            request_type=request_type,
            http_backend_config=backend or HTTPBackendConfig(),
        ),
    )


def test_uri_params_match():
    api = _api("/mock/:id/:name")
    assert api.uri_params("/mock/12345/joe?age=19") == {"id": "12345", "name": "joe"}


def test_uri_params_mismatch():
    api = _api("/mock/:id")
    assert api.uri_params("/other/12345") is None
    assert api.uri_params("/mock/12345/extra") is None


def test_is_wildcard_backend_path():
    assert _api(backend=HTTPBackendConfig(path="/:id")).is_wildcard_backend_path() is True
    assert _api(backend=HTTPBackendConfig(path="")).is_wildcard_backend_path() is False


def test_query_and_header():
    ingress = IngressRequest(url="/mock/test?id=12345&age=19", headers={"Auth": "1234567"})
    assert ingress.query() == {"id": ["12345"], "age": ["19"]}
    assert ingress.header("auth") == "1234567"
    assert ingress.header("Missing") == ""


def test_host_taken_from_absolute_url():
    ingress = IngressRequest(url="http://abc.com/api/v1?name=tc")
    request = Request(ingress, _api())
    assert request.get_url() == "http://" + "abc.com" + "/api/v1"


def test_get_url_uses_backend_url():
    backend = HTTPBackendConfig(url="http://abc.com/12345")
    request = Request(IngressRequest(url="/mock/test"), _api(backend=backend))
    assert request.get_url() == backend.url


def test_get_url_builds_from_ingress():
    request = Request(IngressRequest(url="/mock/test?x=1", host="localhost"), _api())
    assert request.get_url() == "http://" + "localhost" + "/mock/test"


def test_get_url_empty_for_dubbo():
    request = Request(IngressRequest(url="/mock/test"), _api(request_type=DUBBO_REQUEST))
    assert request.get_url() == ""


def test_mapping_param_str():
    param = MappingParam(name="queryStrings.age", map_to="jk", map_type="int")
    assert str(param) == "{queryStrings.age jk int}"


def test_response_holds_data():
    payload = {"a": [1, 2]}
    assert Response(payload).data is payload