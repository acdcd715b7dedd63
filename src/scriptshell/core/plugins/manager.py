# src/scriptshell/core/plugins/manager.py
import importlib.util
import logging
from pathlib import Path
from typing import List, Optional, Union

from scriptshell.core.plugins.base import PluginBase
from scriptshell.core.plugins.registry import PluginRegistry
from scriptshell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class PluginManager:
    """Discovers and loads plugin files (*_plugin.py) into a registry at runtime."""

    def __init__(self, registry: PluginRegistry, plugin_dir: Union[str, Path, None] = None):
        self.registry = registry
        self.plugin_dir = Path(plugin_dir) if plugin_dir else PathUtils.get_user_plugins_dir()
        logger.debug("Plugin directory is set to: %s", self.plugin_dir)

    def discover_plugins(self) -> List[Path]:
        """
        Searches for plugin files (*_plugin.py) in the plugin directory and all subdirectories.

        Returns:
            List[Path]: The discovered plugin files, sorted by path.
        """
        if not self.plugin_dir.is_dir():
            return []
        return sorted(self.plugin_dir.glob("**/*_plugin.py"))

    def resolve_plugin_file(self, name_or_path: str) -> Optional[Path]:
        """Accepts a file path, or a plugin base name found in the plugin directory."""
        candidate = Path(name_or_path).expanduser()
        if candidate.is_file():
            return candidate

        base = name_or_path if name_or_path.endswith("_plugin") else f"{name_or_path}_plugin"
        if self.plugin_dir.is_dir():
            matches = sorted(self.plugin_dir.glob(f"**/{base}.py"))
            if matches:
                return matches[0]
        return None

    def instantiate(self, plugin_file: Path) -> PluginBase:
        """
        Imports a plugin file and instantiates the PluginBase subclass it defines.

        Raises:
            ImportError: If the module cannot be loaded.
            TypeError: If the file does not define a PluginBase subclass.
        """
        module_name = f"scriptshell_ext_{plugin_file.stem}"
        spec = importlib.util.spec_from_file_location(module_name, plugin_file)
        if not spec or not spec.loader:
            raise ImportError(f"Could not create a module spec for {plugin_file}")

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        plugin_class = None
        # Find the class that inherits from PluginBase
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if (
                isinstance(attr, type)
                and issubclass(attr, PluginBase)
                and attr.__module__ == module.__name__
                and not getattr(attr, "__abstractmethods__", None)
            ):
                plugin_class = attr
                break

        if not plugin_class:
            raise TypeError(f"Plugin file {plugin_file} must contain a class inheriting from PluginBase.")

        return plugin_class()

    def load(self, name_or_path: str) -> PluginBase:
        """
        Loads a plugin file and registers it.

        Raises:
            FileNotFoundError: If no plugin file matches.
            DuplicateName: If the plugin or one of its commands is already registered.
        """
        plugin_file = self.resolve_plugin_file(name_or_path)
        if plugin_file is None:
            raise FileNotFoundError(f"Plugin '{name_or_path}' not found (searched {self.plugin_dir})")

        plugin = self.instantiate(plugin_file)
        self.registry.register(plugin, source=str(plugin_file))
        logger.info("Loaded plugin '%s' from %s", plugin.name, plugin_file)
        return plugin

    def autoload(self) -> List[str]:
        """Loads every plugin file from the plugin directory; failures are logged and skipped."""
        loaded: List[str] = []
        for plugin_file in self.discover_plugins():
            try:
                loaded.append(self.load(str(plugin_file)).name)
            except Exception as e:
                logger.error("Failed to load plugin %s: %s", plugin_file, e, exc_info=True)
        return loaded
