# tests/core/test_config_management.py
import json

import pytest

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.handlers.core.config_handler import handle_config
from scriptshell.core.managers.config_manager import DEFAULTS, ConfigManager
from scriptshell.core.utils.path_utils import PathUtils

# A predictable configuration for the tests
MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING"
    },
    "scripting": {
        "default_environment": "workbench"
    },
    "plugins": {
        "autoload": False
    }
}


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    Sets up an isolated ConfigManager:
    - writes a fake 'settings.json' into a temporary package root;
    - points PathUtils at that root;
    - reloads the singleton, and reloads the real settings afterwards.
    """
    package_root = tmp_path / "scriptshell"
    package_root.mkdir()
    settings_file = package_root / "settings.json"
    settings_file.write_text(json.dumps(MOCK_SETTINGS_CONTENT))

    monkeypatch.setattr(PathUtils, "get_shell_package_root", lambda: package_root)

    # The singleton may already hold the real settings
    config_manager_instance = ConfigManager()
    config_manager_instance.reset()

    yield config_manager_instance, ShellContext()

    monkeypatch.undo()
    config_manager_instance.reset()


# --- ConfigManager ---

def test_config_manager_load(config_env):
    """settings.json values win over the defaults; missing keys come from the defaults."""
    manager, _ = config_env
    config = manager.get_all()
    assert config["scripting"]["default_environment"] == "workbench"
    assert config["plugins"]["autoload"] is False
    assert config["shell"]["prompt"] == DEFAULTS["shell"]["prompt"]


def test_config_manager_get_nested(config_env):
    manager, _ = config_env
    assert manager.get_nested("scripting.default_environment") == "workbench"
    assert manager.get_nested("non.existent.key", "default") == "default"
    assert manager.get_nested("debug.level.deeper", "fallback") == "fallback"


def test_config_manager_set_nested(config_env):
    """New keys are added; replaced values keep their type."""
    manager, _ = config_env

    manager.set_nested("debug.level", "INFO")
    assert manager.get_nested("debug.level") == "INFO"

    manager.set_nested("new_feature.enabled", "True")
    assert manager.get_nested("new_feature.enabled") == "True"

    manager.set_nested("shell.columns", 80)
    manager.set_nested("shell.columns", "120")
    assert manager.get_nested("shell.columns") == 120

    manager.set_nested("plugins.autoload", "yes")
    assert manager.get_nested("plugins.autoload") is True
    manager.set_nested("plugins.autoload", "off")
    assert manager.get_nested("plugins.autoload") is False

    manager.set_nested("debug.module_levels", '{"scriptshell": "DEBUG"}')
    assert manager.get_nested("debug.module_levels") == {"scriptshell": "DEBUG"}


def test_config_manager_set_nested_uncastable(config_env):
    manager, _ = config_env
    manager.set_nested("shell.columns", 80)
    manager.set_nested("shell.columns", "wide")
    assert manager.get_nested("shell.columns") == "wide"


def test_config_manager_set_below_a_value_fails(config_env):
    manager, _ = config_env
    assert manager.set_nested("debug.level.deeper", "x") is False


def test_config_manager_reset(config_env):
    manager, _ = config_env

    manager.set_nested("debug.level", "DEBUG")
    assert manager.get_nested("debug.level") == "DEBUG"

    manager.reset()

    assert manager.get_nested("debug.level") == "WARNING"


def test_config_manager_missing_file(config_env, tmp_path, monkeypatch):
    manager, _ = config_env
    monkeypatch.setattr(PathUtils, "get_shell_package_root", lambda: tmp_path / "nowhere")
    manager.reset()
    assert manager.get_all() == DEFAULTS


def test_config_manager_invalid_file(config_env, tmp_path, monkeypatch):
    manager, _ = config_env
    broken_root = tmp_path / "broken"
    broken_root.mkdir()
    (broken_root / "settings.json").write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(PathUtils, "get_shell_package_root", lambda: broken_root)

    manager.reset()

    assert manager.get_nested("scripting.default_environment") == "default"


# --- Default scripting environment ---

def test_default_environment_comes_from_config(config_env):
    _, ctx = config_env
    assert ctx.default_environment == "workbench"


def test_config_set_changes_retained_environment(config_env, engine, tmp_path):
    """'config set' takes effect for the next 'pyscript -r' of a running session."""
    ctx = ShellContext(engine=engine)
    script = tmp_path / "s.py"
    script.write_text("loaded = True\n", encoding="utf-8")

    assert engine.dispatch(f"pyscript -r {script}", ctx).ok
    assert engine.dispatch("config set scripting.default_environment other", ctx).ok
    assert engine.dispatch(f"pyscript -r {script}", ctx).ok

    assert ctx.environments.handles() == ["other", "workbench"]


# --- 'config' command handler ---

def test_handle_config_list(config_env, capsys):
    _, ctx = config_env
    assert handle_config(["list"], ctx) == 0
    captured = capsys.readouterr()

    output_json = json.loads(captured.out)
    assert output_json["scripting"]["default_environment"] == "workbench"


def test_handle_config_set(config_env, capsys):
    manager, ctx = config_env
    handle_config(["set", "scripting.default_environment", "lab"], ctx)
    captured = capsys.readouterr()

    assert "Config updated: scripting.default_environment = lab" in captured.out
    assert manager.get_nested("scripting.default_environment") == "lab"
    assert ctx.default_environment == "lab"


def test_handle_config_set_usage(config_env, capsys):
    _, ctx = config_env
    assert handle_config(["set", "debug.level"], ctx) == 1
    assert "Usage: config set" in capsys.readouterr().out


def test_handle_config_reset(config_env, capsys):
    manager, ctx = config_env

    handle_config(["set", "debug.level", "CRITICAL"], ctx)
    assert manager.get_nested("debug.level") == "CRITICAL"

    handle_config(["reset"], ctx)
    captured = capsys.readouterr()

    assert "Configuration has been reset" in captured.out
    assert manager.get_nested("debug.level") == "WARNING"
