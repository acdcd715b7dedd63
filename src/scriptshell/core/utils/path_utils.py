# src/scriptshell/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the installed 'scriptshell' package."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_shell_package_root() / "settings.json"

    # --- User specific paths ---

    @staticmethod
    def get_user_config_dir() -> Path:
        """
        Returns the path to the user's .scriptshell config directory.
        (e.g., ~/.scriptshell/)
        """
        return Path.home() / ".scriptshell"

    @staticmethod
    def get_user_plugins_dir() -> Path:
        """Directory scanned for *_plugin.py files at startup."""
        return PathUtils.get_user_config_dir() / "plugins"

    @staticmethod
    def get_shell_history_file() -> Path:
        """
        Returns the path to the shell history file in the user's home directory.
        (e.g., ~/.scriptshell_history)
        """
        return Path.home() / ".scriptshell_history"
