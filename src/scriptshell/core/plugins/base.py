# src/scriptshell/core/plugins/base.py
import abc
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from scriptshell.core.discovery import discover_handlers

if TYPE_CHECKING:
    from scriptshell.core.context.shell_context import ShellContext

# handler(args, ctx, stdin) -> exit code
CommandHandler = Callable[[List[str], "ShellContext", Optional[str]], int]


class PluginBase(metaclass=abc.ABCMeta):
    """
    Abstract base class for all plugins.

    A plugin is a named capability provider. It exposes zero or more command
    handlers and, optionally, a queryable instance that scripts can reach via
    ``get_plugin_instance(name)``. The registry asks for both once, when the
    plugin is registered.
    """

    name: str = ""

    @abc.abstractmethod
    def get_commands(self) -> Dict[str, CommandHandler]:
        """
        Returns the command handlers this plugin provides.

        Returns:
            A mapping of command name to handler function. Handlers receive
            (args, ctx, stdin), write their output with print() and return an
            integer exit code (0 for success).
        """
        raise NotImplementedError("Every plugin must implement 'get_commands'.")

    def get_help_texts(self) -> Dict[str, str]:
        return {}

    def get_command_hierarchy(self) -> Dict[str, Any]:
        return {}

    def get_instance(self, ctx: "ShellContext") -> Any:
        """Returns the object scripts receive from get_plugin_instance()."""
        return self

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


class HandlerPackagePlugin(PluginBase):
    """A plugin whose commands are the handle_* functions of a handler package."""

    handler_package: str = ""

    def __init__(self):
        self._handlers, self._hierarchy, self._help_texts = discover_handlers(self.handler_package)

    def get_commands(self) -> Dict[str, CommandHandler]:
        return dict(self._handlers)

    def get_help_texts(self) -> Dict[str, str]:
        return dict(self._help_texts)

    def get_command_hierarchy(self) -> Dict[str, Any]:
        return dict(self._hierarchy)
