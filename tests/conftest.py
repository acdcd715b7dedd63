import pytest

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.core import _maybe_expand_args, register_builtin_plugins
from scriptshell.core.plugins.registry import PluginRegistry
from scriptshell.core.xngine import ExecuteEngine


@pytest.fixture
def registry():
    """A registry holding only the builtin and scripting plugins."""
    reg = PluginRegistry()
    register_builtin_plugins(reg)
    return reg


@pytest.fixture
def engine(registry):
    return ExecuteEngine(registry=registry, maybe_expand_args=_maybe_expand_args)


@pytest.fixture
def ctx(engine):
    """A clean session bound to the test engine."""
    return ShellContext(engine=engine)
