# src/scriptshell/core/core.py
from __future__ import annotations

import logging
from typing import List, Optional

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.plugins.builtin import BuiltinPlugin, ScriptingPlugin
from scriptshell.core.plugins.registry import PluginRegistry
from scriptshell.core.xngine import ExecuteEngine
from scriptshell.core.parser import VAR_PATTERN, tokenize_command

logger = logging.getLogger(__name__)

# Commands that receive their @{var} tokens unexpanded. The command wrappers
# leave expansion to the nested command's own dispatch.
_NO_EXPAND = {"set", "get", "capture", "buffer", "time"}


def _maybe_expand_args(name: str, args: List[str], ctx: ShellContext) -> List[str]:
    """Helper that expands arguments before they are passed to a handler."""
    if name in _NO_EXPAND:
        return list(args)
    return [XNGINE.expand_context_vars(a, ctx) for a in args]


# The process-wide plugin registry, shared by every session.
REGISTRY = PluginRegistry()

# Initialize the engine with the registry and parser logic.
XNGINE = ExecuteEngine(
    registry=REGISTRY,
    var_pattern=VAR_PATTERN,
    maybe_expand_args=_maybe_expand_args,
    logger=logger,
)


def register_builtin_plugins(registry: Optional[PluginRegistry] = None) -> None:
    """Registers the builtin and scripting plugins (once)."""
    registry = registry if registry is not None else REGISTRY
    for plugin_class in (BuiltinPlugin, ScriptingPlugin):
        if plugin_class.name not in registry:
            registry.register(plugin_class())


def new_session() -> ShellContext:
    """Creates a fresh session bound to the global engine."""
    return ShellContext(engine=XNGINE)


# Export core functionality for use by the main application layer.
dispatch = XNGINE.dispatch
expand_context_vars = XNGINE.expand_context_vars

__all__ = [
    "REGISTRY",
    "XNGINE",
    "dispatch",
    "expand_context_vars",
    "new_session",
    "register_builtin_plugins",
    "tokenize_command",
]
