# src/scriptshell/core/plugins/registry.py
import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from scriptshell.core.errors import DuplicateName, UnknownCommand
from scriptshell.core.plugins.base import CommandHandler, PluginBase
from scriptshell.model import PluginInfo

if TYPE_CHECKING:
    from scriptshell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandlerBinding:
    """A resolved command: the handler plus the plugin that owns it."""
    plugin_name: str
    command_name: str
    handler: CommandHandler


@dataclass
class PluginRecord:
    plugin: PluginBase
    commands: Dict[str, CommandHandler]
    instance_factory: Callable[["ShellContext"], Any]
    help_texts: Dict[str, str] = field(default_factory=dict)
    hierarchy: Dict[str, Any] = field(default_factory=dict)
    source: str = "builtin"


class PluginRegistry:
    """
    Maps plugin names and command names to registered plugins.

    The registry is shared by every session of the process. Registration and
    lookups are serialized with one lock; lookups dominate after startup.
    """

    def __init__(self):
        self._plugins: Dict[str, PluginRecord] = {}
        self._commands: Dict[str, HandlerBinding] = {}
        self._lock = threading.RLock()

    def register(self, plugin: PluginBase, source: str = "builtin") -> None:
        """
        Adds a plugin and all of its commands.

        Raises:
            DuplicateName: If the plugin name or one of its command names is
                already registered. Nothing is registered in that case.
        """
        name = plugin.name
        if not name:
            raise ValueError(f"Plugin {plugin!r} has no name.")

        # Resolve the plugin's capabilities once, outside the lock.
        commands = dict(plugin.get_commands())
        record = PluginRecord(
            plugin=plugin,
            commands=commands,
            instance_factory=plugin.get_instance,
            help_texts=dict(plugin.get_help_texts()),
            hierarchy=dict(plugin.get_command_hierarchy()),
            source=source,
        )

        with self._lock:
            if name in self._plugins:
                raise DuplicateName(name, "plugin")
            for command_name in commands:
                if command_name in self._commands:
                    raise DuplicateName(command_name, "command")

            self._plugins[name] = record
            for command_name, handler in commands.items():
                self._commands[command_name] = HandlerBinding(name, command_name, handler)

        logger.debug("Registered plugin '%s' with %d commands", name, len(commands))

    def unregister(self, name: str) -> bool:
        """Removes a plugin and its commands. Returns False if it was not registered."""
        with self._lock:
            record = self._plugins.pop(name, None)
            if record is None:
                return False
            for command_name in record.commands:
                self._commands.pop(command_name, None)
        logger.debug("Unregistered plugin '%s'", name)
        return True

    def resolve_handler(self, command_name: str) -> HandlerBinding:
        """
        Raises:
            UnknownCommand: If no plugin provides `command_name`.
        """
        with self._lock:
            binding = self._commands.get(command_name)
        if binding is None:
            raise UnknownCommand(command_name)
        return binding

    def get_plugin(self, name: str) -> Optional[PluginBase]:
        with self._lock:
            record = self._plugins.get(name)
        return record.plugin if record else None

    def get_plugin_instance(self, name: str, ctx: "ShellContext") -> Optional[Any]:
        """Returns the plugin's queryable instance, or None. Never raises."""
        with self._lock:
            record = self._plugins.get(name)
        if record is None:
            return None
        try:
            return record.instance_factory(ctx)
        except Exception as e:
            logger.error("Plugin '%s' failed to provide an instance: %s", name, e, exc_info=True)
            return None

    def plugins(self) -> List[PluginInfo]:
        with self._lock:
            return [
                PluginInfo(name=name, commands=sorted(record.commands), source=record.source)
                for name, record in sorted(self._plugins.items())
            ]

    def command_names(self) -> List[str]:
        with self._lock:
            return sorted(self._commands)

    def help_texts(self) -> Dict[str, str]:
        with self._lock:
            texts: Dict[str, str] = {}
            for record in self._plugins.values():
                texts.update(record.help_texts)
            return texts

    def command_hierarchy(self) -> Dict[str, Any]:
        """Command tree used by the completer: command -> subcommands (or None)."""
        with self._lock:
            hierarchy: Dict[str, Any] = {name: None for name in self._commands}
            for record in self._plugins.values():
                for command_name, sub in record.hierarchy.items():
                    if command_name in hierarchy:
                        hierarchy[command_name] = sub
            return hierarchy

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._plugins

    def __len__(self) -> int:
        with self._lock:
            return len(self._plugins)
