import copy
import json
import logging
from typing import Any, Dict, Optional

from scriptshell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

# Used for keys that settings.json does not define.
DEFAULTS: Dict[str, Any] = {
    "debug": {"level": "WARNING", "module_levels": {}, "silenced_loggers": {}},
    "shell": {"prompt": "scriptshell>> ", "banner": "Welcome to scriptshell (type 'help' for commands)"},
    "scripting": {"default_environment": "default"},
    "plugins": {"autoload": True},
}

_TRUE_WORDS = ("1", "true", "yes", "on")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _cast_like(current: Any, value: Any) -> Any:
    """Casts `value` to the type of the value it replaces (strings from the command line)."""
    if current is None or not isinstance(value, str):
        return value
    if isinstance(current, bool):
        return value.strip().lower() in _TRUE_WORDS
    if isinstance(current, (dict, list)):
        return json.loads(value)
    return type(current)(value)


class ConfigManager:
    """
    Singleton holding the shell configuration: settings.json layered over the
    built-in defaults. Changes made with `set_nested` last until `reset`.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Looks up a dotted key, e.g. 'scripting.default_environment'."""
        value: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value if value is not None else default

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a dotted key for the session. Missing sections are created; a
        value replacing an existing one is cast to that value's type.
        """
        *parents, leaf = key_path.split('.')
        section = self._config
        for key in parents:
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        try:
            value = _cast_like(section.get(leaf), value)
        except (ValueError, TypeError) as e:
            logger.warning("Keeping '%s' as a string: %s", key_path, e)

        section[leaf] = value
        logger.info("Configuration updated: %s = %r", key_path, value)
        return True

    def reset(self) -> None:
        """Reloads settings.json over the defaults, dropping session changes."""
        config_path = PathUtils.get_settings_file()
        settings: Dict[str, Any] = {}
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                settings = json.load(f)
        except FileNotFoundError:
            logger.warning("settings.json not found at %s. Using defaults.", config_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to load %s: %s", config_path, e, exc_info=True)
        if not isinstance(settings, dict):
            logger.error("Ignoring %s: the top level must be an object.", config_path)
            settings = {}
        self._config = _merge(DEFAULTS, settings)
        logger.debug("Configuration loaded from %s", config_path)


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
