# src/scriptshell/core/handlers/scripting/pyscript_handler.py
import argparse
import logging
from typing import List, Optional

from scriptshell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)

pyscript_help_text = """
SCRIPTING:
  pyscript [-r] [--env <handle>] <file>
                      Run a Python script (alias: python).
    -r                Run in the retained environment <handle> (default from
                      scripting.default_environment) so later '-r' loads see the
                      functions and data this script defines. Without -r the
                      script runs in a fresh environment that is thrown away.
  Scripts can call print(), println(), dispatch_command(line) and
  get_plugin_instance(name).
""".strip()


def build_parser(prog: str = "pyscript") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, add_help=False)
    parser.add_argument("-r", "--retain", action="store_true")
    parser.add_argument("--env", default=None)
    parser.add_argument("file")
    return parser


def handle_pyscript(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Loads and runs a Python script file.

    Raises:
        ScriptExecutionError: If the script fails; the engine reports it as a
            failed command.
    """
    try:
        parsed_args = build_parser().parse_args(args)
    except SystemExit:
        return 1

    handle = parsed_args.env or ctx.default_environment
    result = ctx.scripts.run_file(parsed_args.file, handle=handle, retain=parsed_args.retain)
    logger.debug(
        "Script %s finished in environment '%s' (defined: %s)",
        parsed_args.file, result.environment, ", ".join(result.defined) or "-",
    )
    return 0


handle_python = handle_pyscript
