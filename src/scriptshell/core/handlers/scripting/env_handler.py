# src/scriptshell/core/handlers/scripting/env_handler.py
from typing import Any, Dict, List, Optional

from scriptshell.core.context.shell_context import ShellContext

env_help_text = """
ENVIRONMENTS:
  env list                        List retained scripting environments.
  env show [<handle>]             Show the bindings of an environment.
  env drop <handle>               Discard a retained environment.
  env call [--env <handle>] <function> [<arg>...]
                                  Call a function defined in a retained environment.
""".strip()

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "list": None,
    "show": None,
    "drop": None,
    "call": None,
}

USAGE = """
Usage:
  env list
  env show [<handle>]
  env drop <handle>
  env call [--env <handle>] <function> [<arg>...]
"""


def _handle_show(args: List[str], ctx: ShellContext) -> int:
    handle = args[0] if args else ctx.default_environment
    env = ctx.environments.get(handle)
    if env is None:
        print(f"❌ No retained environment '{handle}'.")
        return 1

    bindings = env.bindings()
    print(f"Environment '{handle}' ({env.loads} script loads, {len(bindings)} bindings):")
    for binding in bindings:
        print(f"  {binding.name:<24} {binding.kind.value:<10} {binding.summary}")
    return 0


def _handle_call(args: List[str], ctx: ShellContext) -> int:
    handle = ctx.default_environment
    if len(args) >= 2 and args[0] == "--env":
        handle, args = args[1], args[2:]
    if not args:
        print("Usage: env call [--env <handle>] <function> [<arg>...]")
        return 1

    value = ctx.scripts.call(handle, args[0], *args[1:])
    if value is not None:
        print(value)
    return 0


def handle_env(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Handles inspection of the session's scripting environments."""
    if not args:
        print(USAGE)
        return 1

    command, rest = args[0], args[1:]

    if command == "list":
        handles = ctx.environments.handles()
        if not handles:
            print("No retained environments.")
            return 0
        for handle in handles:
            info = ctx.environments.get(handle).info()
            print(f"  - {info.handle}: {info.bindings} bindings, {info.loads} script loads")
        return 0

    if command == "show":
        return _handle_show(rest, ctx)

    if command == "drop":
        if not rest:
            print("Usage: env drop <handle>")
            return 1
        if ctx.environments.drop(rest[0]):
            print(f"environment '{rest[0]}' dropped")
            return 0
        print(f"❌ No retained environment '{rest[0]}'.")
        return 1

    if command == "call":
        return _handle_call(rest, ctx)

    print(f"Unknown env command: '{command}'")
    return 1
