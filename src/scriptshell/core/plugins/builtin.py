# src/scriptshell/core/plugins/builtin.py
from typing import TYPE_CHECKING, List

from scriptshell.core.plugins.base import HandlerPackagePlugin

if TYPE_CHECKING:
    from scriptshell.core.context.shell_context import ShellContext


class BuiltinPlugin(HandlerPackagePlugin):
    """General shell commands: help, quit, echo, set/get, source, config, plugin, time."""

    name = "builtin"
    handler_package = "scriptshell.core.handlers.core"


class ScriptingInstance:
    """What scripts get back from get_plugin_instance('scripting')."""

    def __init__(self, ctx: "ShellContext"):
        self._ctx = ctx

    def get_buffer(self, name: str) -> str:
        """
        Returns the content of a capture buffer.

        Raises:
            UnknownBuffer: If nothing was ever captured into `name`.
        """
        return self._ctx.buffers.read(name)

    def buffer_names(self) -> List[str]:
        return self._ctx.buffers.names()

    def environment_handles(self) -> List[str]:
        return self._ctx.environments.handles()


class ScriptingPlugin(HandlerPackagePlugin):
    """Capture buffers, resources and the Python script loader."""

    name = "scripting"
    handler_package = "scriptshell.core.handlers.scripting"

    def get_instance(self, ctx: "ShellContext") -> ScriptingInstance:
        return ScriptingInstance(ctx)
