# src/scriptshell/core/handlers/scripting/buffer_handler.py
import argparse
from typing import Any, Dict, List, Optional

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.errors import CaptureAlreadyActive, UnknownBuffer
from scriptshell.model import Command

buffer_help_text = """
BUFFERS:
  buffer list [-v] [<name>...]     List buffers (-v also prints their content).
  buffer show <name>               Print the content of a buffer.
  buffer clear <name>              Empty a buffer.
  buffer delete <name>...          Delete buffers.
  buffer feed <name> <command> [<arg>...]
                                   Run <command> with the buffer as its input.
""".strip()

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "list": None,
    "show": None,
    "clear": None,
    "delete": None,
    "feed": None,
}

USAGE = """
Usage:
  buffer list [-v] [<name>...]
  buffer show <name>
  buffer clear <name>
  buffer delete <name>...
  buffer feed <name> <command> [<arg>...]
"""


def _print_indented(text: str, prefix: str = "    ") -> None:
    for line in text.splitlines():
        print(prefix + line)


def _handle_list(args: List[str], ctx: ShellContext) -> int:
    parser = argparse.ArgumentParser(prog="buffer list", add_help=False)
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("names", nargs="*")
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    names = parsed_args.names or ctx.buffers.names()
    if not names:
        print("No buffers.")
        return 0

    for name in names:
        try:
            content = ctx.buffers.read(name)
        except UnknownBuffer:
            print(f"{name}: (not found)")
            continue
        print(f"{name}: ({len(content)} characters)")
        if parsed_args.verbose:
            _print_indented(content)
    return 0


def _handle_feed(args: List[str], ctx: ShellContext) -> int:
    if len(args) < 2:
        print("Usage: buffer feed <name> <command> [<arg>...]")
        return 1
    name = args[0]
    try:
        content = ctx.buffers.read(name)
    except UnknownBuffer as e:
        print(f"❌ {e.message}")
        return 1
    result = ctx.engine.execute(Command.from_tokens(args[1:]), ctx, stdin=content)
    return result.exit_code


def handle_buffer(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Handles inspection and maintenance of the session's capture buffers.

    Returns:
        int: Exit code (0 for success, 1 for usage errors or unknown buffers).
    """
    if not args:
        print(USAGE)
        return 1

    command, rest = args[0], args[1:]

    if command == "feed":
        # The fed command is expanded when it is executed
        rest = [ctx.engine.expand_context_vars(rest[0], ctx), *rest[1:]] if rest else rest
        return _handle_feed(rest, ctx)

    rest = [ctx.engine.expand_context_vars(arg, ctx) for arg in rest]

    if command == "list":
        return _handle_list(rest, ctx)

    if not rest:
        print(USAGE)
        return 1

    if command == "show":
        try:
            content = ctx.buffers.read(rest[0])
        except UnknownBuffer as e:
            print(f"❌ {e.message}")
            return 1
        print(content, end="" if content.endswith("\n") or not content else "\n")
        return 0

    if command == "clear":
        try:
            ctx.buffers.clear(rest[0])
        except UnknownBuffer as e:
            print(f"❌ {e.message}")
            return 1
        return 0

    if command == "delete":
        exit_code = 0
        for name in rest:
            try:
                deleted = ctx.buffers.delete(name)
            except CaptureAlreadyActive as e:
                print(f"❌ {e.message}")
                exit_code = 1
                continue
            print(f"buffer '{name}' {'deleted' if deleted else 'not found'}")
            if not deleted:
                exit_code = 1
        return exit_code

    print(f"Unknown buffer command: '{command}'")
    return 1
