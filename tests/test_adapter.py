import pytest

from pixiu.adapter import (
    Adapter,
    AdapterPlugin,
    PluginNotFoundError,
    get_adapter_plugin,
    register_adapter_plugin,
)


class _Config:
    pass


class _DemoAdapter(Adapter):
    def __init__(self):
        self.cfg = _Config()
        self.running = False

    def start(self):
        self.running = True

    def stop(self):
        self.running = False

    def apply(self):
        return None

    def config(self):
        return self.cfg


class _DemoPlugin(AdapterPlugin):
    def __init__(self, kind="test"):
        self._kind = kind

    def kind(self):
        return self._kind

    def create_adapter(self, config, bootstrap):
        return _DemoAdapter()


def test_register_adapter_plugin():
    plugin = _DemoPlugin("test")
    register_adapter_plugin(plugin)
    assert get_adapter_plugin("test") is plugin


def test_created_adapter_lifecycle():
    plugin = _DemoPlugin("lifecycle-kind")
    register_adapter_plugin(plugin)
    adapter = get_adapter_plugin("lifecycle-kind").create_adapter(None, None)
    adapter.start()
    assert adapter.running is True
    adapter.stop()
    assert adapter.running is False
    assert isinstance(adapter.config(), _Config)


def test_get_unknown_plugin():
    with pytest.raises(PluginNotFoundError, match="plugin not found nothing-here"):
        get_adapter_plugin("nothing-here")


def test_register_empty_kind():
    with pytest.raises(ValueError, match="empty kind"):
        register_adapter_plugin(_DemoPlugin(""))


def test_register_duplicate_kind():
    register_adapter_plugin(_DemoPlugin("duplicate-kind"))
    with pytest.raises(ValueError, match="got same kind: duplicate-kind"):
        register_adapter_plugin(_DemoPlugin("duplicate-kind"))