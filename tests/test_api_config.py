import pytest

from pixiu.api_config import (
    APIConfig,
    APIConfigError,
    APIConfigResourceListener,
    APIConfigStore,
    Method,
    Resource,
    load_api_config_from_file,
)

PREFIX = "/pixiu/config/api"

API_YAML = """\
name: api name
description: api description
resources:
  - id: 1
    type: restful
    path: /api/v1/test-dubbo/user
    description: user
    methods:
      - id: 1
        httpVerb: GET
        resourcePath: /api/v1/test-dubbo/user
        enable: true
        timeout: 1000ms
"""


class Recorder(APIConfigResourceListener):
    def __init__(self):
        self.events = []

    def resource_change(self, new, old):
        self.events.append(("resource_change", new.id, new.path, old.path))
        return True

    def resource_add(self, resource):
        self.events.append(("resource_add", resource.id, resource.path))
        return True

    def resource_delete(self, deleted):
        self.events.append(("resource_delete", deleted.id))
        return True

    def method_change(self, resource, method, old):
        self.events.append(("method_change", resource.path, method.http_verb, old.http_verb))
        return True

    def method_add(self, resource, method):
        self.events.append(("method_add", resource.path, method.id))
        return True

    def method_delete(self, resource, method):
        self.events.append(("method_delete", resource.id, method.id))
        return True


@pytest.fixture
def api_file(tmp_path):
    path = tmp_path / "api_config.yml"
    path.write_text(API_YAML)
    return str(path)


@pytest.fixture
def store():
    s = APIConfigStore()
    s.init_from_kv_list(
        [
            f"{PREFIX}/base",
            f"{PREFIX}/resources/1",
            f"{PREFIX}/resources/1/method/1",
        ],
        [
            "name: api name\ndescription: api desc\n",
            "id: 1\npath: /user\ntype: restful\n",
            "id: 1\nresourcePath: /user\nhttpVerb: GET\n",
        ],
    )
    return s


def test_load_from_file_requires_path():
    with pytest.raises(APIConfigError, match="^Config file not specified$"):
        load_api_config_from_file("")


def test_load_from_file(api_file):
    conf = load_api_config_from_file(api_file)
    assert conf.name == "api name"
    assert conf.description == "api description"
    assert [r.path for r in conf.resources] == ["/api/v1/test-dubbo/user"]
    method = conf.resources[0].methods[0]
    assert method.http_verb == "GET"
    assert method.enable is True
    assert method.timeout == "1000ms"


def test_store_load_from_file_sets_current(api_file):
    s = APIConfigStore()
    conf = s.load_from_file(api_file)
    assert s.api_config is conf


def test_load_missing_file(tmp_path):
    with pytest.raises(APIConfigError):
        APIConfigStore().load_from_file(str(tmp_path / "missing.yml"))


def test_from_dict_rejects_non_mapping():
    with pytest.raises(APIConfigError):
        Resource.from_dict(["a", "b"])


def test_init_from_kv_list(store):
    conf = store.api_config
    assert conf.name == "api name"
    assert conf.description == "api desc"
    assert [r.path for r in conf.resources] == ["/user"]
    assert [m.http_verb for m in conf.resources[0].methods] == ["GET"]


def test_init_method_without_resource_creates_one():
    s = APIConfigStore()
    conf = s.init_from_kv_list(
        [f"{PREFIX}/resources/1", f"{PREFIX}/resources/2/method/1", f"{PREFIX}/other"],
        ["id: 1\npath: /user\n", "id: 1\nresourcePath: /order\nhttpVerb: POST\n", "x: y"],
    )
    assert [r.path for r in conf.resources] == ["/user", "/order"]
    assert conf.resources[0].methods == []
    assert [m.http_verb for m in conf.resources[1].methods] == ["POST"]


def test_init_same_verb_replaces_method():
    s = APIConfigStore()
    conf = s.init_from_kv_list(
        [
            f"{PREFIX}/resources/1",
            f"{PREFIX}/resources/1/method/1",
            f"{PREFIX}/resources/1/method/2",
        ],
        [
            "id: 1\npath: /user\n",
            "id: 1\nresourcePath: /user\nhttpVerb: GET\n",
            "id: 2\nresourcePath: /user\nhttpVerb: GET\n",
        ],
    )
    assert [m.id for m in conf.resources[0].methods] == [2]


def test_init_invalid_value_raises():
    s = APIConfigStore()
    with pytest.raises(APIConfigError):
        s.init_from_kv_list([f"{PREFIX}/resources/1"], ["- a\n- b\n"])
    with pytest.raises(APIConfigError):
        s.init_from_kv_list([f"{PREFIX}/resources/1"], ["key: [unclosed"])


def test_put_resource_change_keeps_methods(store):
    recorder = Recorder()
    store.register_listener(recorder)
    store.handle_put_event(f"{PREFIX}/resources/1", "id: 1\npath: /users\n")
    resource = store.api_config.resources[0]
    assert resource.path == "/users"
    assert [m.http_verb for m in resource.methods] == ["GET"]
    assert recorder.events == [("resource_change", 1, "/users", "/user")]


def test_put_resource_add(store):
    recorder = Recorder()
    store.register_listener(recorder)
    store.handle_put_event(f"{PREFIX}/resources/3".encode(), b"id: 3\npath: /order\n")
    assert [r.id for r in store.api_config.resources] == [1, 3]
    assert recorder.events == [("resource_add", 3, "/order")]


def test_put_method_change_and_add(store):
    recorder = Recorder()
    store.register_listener(recorder)
    store.handle_put_event(
        f"{PREFIX}/resources/1/method/1", "id: 1\nresourcePath: /user\nhttpVerb: PUT\n"
    )
    store.handle_put_event(
        f"{PREFIX}/resources/1/method/5", "id: 5\nresourcePath: /user\nhttpVerb: POST\n"
    )
    methods = store.api_config.resources[0].methods
    assert [(m.id, m.http_verb) for m in methods] == [(1, "PUT"), (5, "POST")]
    assert recorder.events == [
        ("method_change", "/user", "PUT", "GET"),
        ("method_add", "/user", 5),
    ]


def test_put_base_info(store):
    store.handle_put_event(f"{PREFIX}/base", "name: renamed\n")
    assert store.api_config.name == "renamed"
    assert store.api_config.description == "api desc"


def test_put_invalid_value_leaves_config(store):
    store.handle_put_event(f"{PREFIX}/resources/1", "key: [unclosed")
    assert [r.path for r in store.api_config.resources] == ["/user"]


def test_delete_resource(store):
    recorder = Recorder()
    store.register_listener(recorder)
    store.handle_delete_event(f"{PREFIX}/resources/1/")
    assert store.api_config.resources == []
    assert recorder.events == [("resource_delete", 1)]


def test_delete_method(store):
    recorder = Recorder()
    store.register_listener(recorder)
    store.handle_delete_event(f"{PREFIX}/resources/1/method/1")
    assert store.api_config.resources[0].methods == []
    assert recorder.events == [("method_delete", 1, 1)]


def test_delete_with_non_integer_id_is_ignored(store):
    store.handle_delete_event(f"{PREFIX}/resources/abc")
    store.handle_delete_event(f"{PREFIX}/resources/1/method/xyz")
    assert len(store.api_config.resources) == 1
    assert len(store.api_config.resources[0].methods) == 1


def test_api_config_from_dict_nested():
    conf = APIConfig.from_dict(
        {
            "name": "n",
            "resources": [
                {"id": 2, "path": "/a", "resources": [{"id": 3, "path": "/a/b"}]}
            ],
        }
    )
    assert conf.resources[0].resources[0].path == "/a/b"
    assert conf.resources[0].resources[0].id == 3


def test_method_from_dict_bad_id():
    with pytest.raises(APIConfigError):
        Method.from_dict({"id": "one"})