import dataclasses

import pytest

from pixiu.filters import (
    FilterError,
    FilterManager,
    HTTPFilterConfig,
    HttpFilter,
    HttpFilterPlugin,
    NetworkFilter,
    NetworkFilterPlugin,
    get_http_filter_plugin,
    get_network_filter_plugin,
    register_http_filter,
    register_network_filter,
)

DEMO = "dgp.filters.demo"
BROKEN = "dgp.filters.broken"


@dataclasses.dataclass
class _DemoConfig:
    foo: str = ""
    bar: str = ""


class _Context:
    def __init__(self):
        self.filters = []
        self.messages = []

    def append_filter_func(self, func):
        self.filters.append(func)


class _DemoFilter(HttpFilter):
    def __init__(self):
        self.conf = _DemoConfig(foo="default foo", bar="default bar")
        self.text = ""

    def prepare_filter_chain(self, ctx):
        ctx.append_filter_func(self.handle)

    def handle(self, ctx):
        ctx.messages.append(self.text)

    def config(self):
        return self.conf

    def apply(self):
        self.text = f"{self.conf.foo} is drinking in the {self.conf.bar}"


class _DemoPlugin(HttpFilterPlugin):
    def kind(self):
        return DEMO

    def create_filter(self):
        return _DemoFilter()


class _BrokenFilter(_DemoFilter):
    def apply(self):
        raise RuntimeError("boom")


class _BrokenPlugin(HttpFilterPlugin):
    def kind(self):
        return BROKEN

    def create_filter(self):
        return _BrokenFilter()


register_http_filter(_DemoPlugin())
register_http_filter(_BrokenPlugin())


def test_apply():
    fm = FilterManager()
    f = fm.apply(DEMO, {"foo": "Cat", "bar": "The Walnut"})
    ctx = _Context()
    f.handle(ctx)
    assert ctx.messages == ["Cat is drinking in the The Walnut"]


def test_apply_without_config_keeps_defaults():
    f = FilterManager().apply(DEMO, None)
    assert f.text == "default foo is drinking in the default bar"


def test_load():
    conf = {"foo": "Cat", "bar": "The Walnut"}
    configs = [HTTPFilterConfig(name=DEMO, config=conf)]
    fm = FilterManager()
    fm.reload(configs)
    filters = fm.get_filters()
    assert len(filters) == len(configs)
    ctx = _Context()
    for f in filters:
        f.prepare_filter_chain(ctx)
        f.handle(ctx)
    assert len(ctx.filters) == 1
    assert ctx.messages == ["Cat is drinking in the The Walnut"]


def test_load_from_constructor_configs():
    fm = FilterManager([HTTPFilterConfig(name=DEMO), HTTPFilterConfig(name=DEMO)])
    assert fm.get_filters() == []
    fm.load()
    assert len(fm.get_filters()) == 2


def test_reload_leaves_out_failed_filters():
    fm = FilterManager()
    fm.reload([HTTPFilterConfig(name=DEMO), HTTPFilterConfig(name=BROKEN),
               HTTPFilterConfig(name="dgp.filters.unknown")])
    assert len(fm.get_filters()) == 1


def test_apply_unknown_filter():
    with pytest.raises(FilterError, match="filter not found"):
        FilterManager().apply("dgp.filters.unknown", {})


def test_apply_failing_filter():
    with pytest.raises(FilterError, match="create fail: boom"):
        FilterManager().apply(BROKEN, {})


def test_get_registered_http_plugin():
    assert get_http_filter_plugin(DEMO).kind() == DEMO
    with pytest.raises(FilterError, match="plugin not found nope"):
        get_http_filter_plugin("nope")


def test_register_duplicate_http_filter():
    with pytest.raises(ValueError, match=f"got same kind: {DEMO}"):
        register_http_filter(_DemoPlugin())


class _EchoNetworkFilter(NetworkFilter):
    def __init__(self, config):
        self.config = config

    def on_data(self, ctx):
        ctx.messages.append(self.config)


class _EchoNetworkPlugin(NetworkFilterPlugin):
    def kind(self):
        return "dgp.filters.network.echo"

    def create_filter(self, config, bootstrap):
        return _EchoNetworkFilter(config)


def test_network_filter_registry():
    register_network_filter(_EchoNetworkPlugin())
    plugin = get_network_filter_plugin("dgp.filters.network.echo")
    net_filter = plugin.create_filter("hello", None)
    ctx = _Context()
    net_filter.on_data(ctx)
    assert ctx.messages == ["hello"]
    with pytest.raises(FilterError):
        get_network_filter_plugin("dgp.filters.network.none")