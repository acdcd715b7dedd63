# src/scriptshell/core/handlers/core/source_handler.py
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.xngine import QUIT_EXIT_CODE

logger = logging.getLogger(__name__)

source_help_text = """
COMMAND FILES:
  source <file>                   Run every line of <file> as a shell command.
  source --stop-on-error <file>   Stop at the first failing command.
  Blank lines and lines starting with '#' are skipped.
""".strip()


def read_command_lines(path: Path) -> List[str]:
    """Returns the command lines of a command file, without blanks and comments."""
    lines = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines


def handle_source(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Runs a command file line by line in the current session.

    A failing line is reported and the file continues with the next line,
    unless --stop-on-error is given.

    Returns:
        int: 0 when every command succeeded, 1 otherwise, or the quit code
        if the file asked the shell to quit.
    """
    parser = argparse.ArgumentParser(prog="source", add_help=False)
    parser.add_argument("file")
    parser.add_argument("--stop-on-error", action="store_true")
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    path = Path(parsed_args.file).expanduser()
    try:
        lines = read_command_lines(path)
    except OSError as e:
        print(f"❌ Cannot read command file '{path}': {e}")
        return 1

    logger.debug("Sourcing %d commands from %s", len(lines), path)
    failures = 0
    for line in lines:
        result = ctx.dispatch(line)
        if result.exit_code == QUIT_EXIT_CODE:
            return QUIT_EXIT_CODE
        if not result.ok:
            failures += 1
            if parsed_args.stop_on_error:
                break

    return 0 if failures == 0 else 1
