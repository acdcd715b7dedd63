# src/scriptshell/core/handlers/core/plugin_handler.py
from typing import Any, Dict, List, Optional

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.errors import DuplicateName
from scriptshell.core.plugins.manager import PluginManager

plugin_help_text = """
PLUGINS:
  plugin list               List registered plugins and their commands.
  plugin load <file|name>   Load a *_plugin.py file and register its commands.
  plugin unload <name>      Remove a plugin and its commands.
""".strip()

# Define the hierarchy for auto-suggestion
COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "list": None,
    "load": None,
    "unload": None,
}

USAGE = """
Usage:
  plugin list
  plugin load <file|name>
  plugin unload <name>
"""

# Plugins the shell cannot run without.
_PROTECTED = {"builtin", "scripting"}


def handle_plugin(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Handles listing, loading and unloading of plugins.

    Returns:
        int: Exit code (0 for success, 1 for usage or load errors).
    """
    if not args:
        print(USAGE)
        return 1

    registry = ctx.engine.registry
    command = args[0]

    if command == "list":
        plugins = registry.plugins()
        print("Registered plugins:")
        for info in plugins:
            print(f"  - {info.name} [{info.source}]: {', '.join(info.commands) or '(no commands)'}")
        return 0

    if command == "load":
        if len(args) < 2:
            print("Usage: plugin load <file|name>")
            return 1
        manager = PluginManager(registry)
        try:
            plugin = manager.load(args[1])
        except FileNotFoundError as e:
            print(f"❌ {e}")
            return 1
        except DuplicateName as e:
            print(f"❌ Cannot load plugin: {e.message}")
            return 1
        print(f"✅ Plugin '{plugin.name}' loaded.")
        return 0

    if command == "unload":
        if len(args) < 2:
            print("Usage: plugin unload <name>")
            return 1
        name = args[1]
        if name in _PROTECTED:
            print(f"❌ Plugin '{name}' cannot be unloaded.")
            return 1
        if not registry.unregister(name):
            print(f"WARNING: plugin '{name}' not found")
            return 1
        print(f"plugin '{name}' unloaded")
        return 0

    print(f"Unknown plugin command: '{command}'")
    return 1
