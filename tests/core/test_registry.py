# tests/core/test_registry.py
import pytest

from scriptshell.core.errors import DuplicateName, UnknownCommand
from scriptshell.core.plugins.base import PluginBase
from scriptshell.core.plugins.registry import PluginRegistry


def _noop(args, ctx, stdin=None):
    return 0


class GreeterPlugin(PluginBase):
    name = "greeter"

    def get_commands(self):
        return {"greet": _noop, "wave": _noop}

    def get_help_texts(self):
        return {"greet": "GREETER:\n  greet   Say hello."}

    def get_command_hierarchy(self):
        return {"greet": {"loud": None}}


class ClashingPlugin(PluginBase):
    name = "clash"

    def get_commands(self):
        return {"other": _noop, "wave": _noop}


class BrokenInstancePlugin(PluginBase):
    name = "broken"

    def get_commands(self):
        return {}

    def get_instance(self, ctx):
        raise RuntimeError("no instance today")


@pytest.fixture
def empty_registry():
    return PluginRegistry()


def test_register_and_resolve(empty_registry):
    empty_registry.register(GreeterPlugin())

    binding = empty_registry.resolve_handler("greet")
    assert binding.plugin_name == "greeter"
    assert binding.command_name == "greet"
    assert binding.handler is _noop
    assert "greeter" in empty_registry
    assert empty_registry.command_names() == ["greet", "wave"]


def test_resolve_unknown_command(empty_registry):
    with pytest.raises(UnknownCommand) as exc_info:
        empty_registry.resolve_handler("nope")
    assert exc_info.value.command_name == "nope"


def test_duplicate_plugin_name_is_rejected(empty_registry):
    empty_registry.register(GreeterPlugin())
    with pytest.raises(DuplicateName) as exc_info:
        empty_registry.register(GreeterPlugin())
    assert exc_info.value.kind == "plugin"
    assert len(empty_registry) == 1


def test_command_collision_registers_nothing(empty_registry):
    """A plugin whose command is taken is rejected as a whole."""
    empty_registry.register(GreeterPlugin())
    with pytest.raises(DuplicateName) as exc_info:
        empty_registry.register(ClashingPlugin())

    assert exc_info.value.name == "wave"
    assert "clash" not in empty_registry
    with pytest.raises(UnknownCommand):
        empty_registry.resolve_handler("other")


def test_plugin_without_name_is_rejected(empty_registry):
    plugin = GreeterPlugin()
    plugin.name = ""
    with pytest.raises(ValueError):
        empty_registry.register(plugin)


def test_unregister_removes_commands(empty_registry):
    empty_registry.register(GreeterPlugin())
    assert empty_registry.unregister("greeter") is True
    assert empty_registry.unregister("greeter") is False
    with pytest.raises(UnknownCommand):
        empty_registry.resolve_handler("greet")


def test_get_plugin_instance(empty_registry, ctx):
    plugin = GreeterPlugin()
    empty_registry.register(plugin)
    empty_registry.register(BrokenInstancePlugin())

    assert empty_registry.get_plugin_instance("greeter", ctx) is plugin
    assert empty_registry.get_plugin_instance("absent", ctx) is None
    # A failing instance factory is logged, not raised
    assert empty_registry.get_plugin_instance("broken", ctx) is None


def test_help_and_hierarchy(empty_registry):
    empty_registry.register(GreeterPlugin())
    assert "greet   Say hello." in empty_registry.help_texts()["greet"]
    assert empty_registry.command_hierarchy() == {"greet": {"loud": None}, "wave": None}


def test_builtin_plugins_are_registered(registry):
    """The builtin and scripting plugins discover their handler modules."""
    names = registry.command_names()
    for command in ("echo", "help", "quit", "exit", "set", "get", "source", "config", "plugin", "time"):
        assert command in names
    for command in ("capture", "buffer", "pyscript", "python", "env", "resource", "url"):
        assert registry.resolve_handler(command).plugin_name == "scripting"
    assert [info.name for info in registry.plugins()] == ["builtin", "scripting"]
