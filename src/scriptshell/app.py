from __future__ import annotations

import argparse
import logging
import shlex
import sys
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.core import REGISTRY, new_session, register_builtin_plugins
from scriptshell.core.managers.completion_manager import CompletionManager
from scriptshell.core.managers.config_manager import config_manager
from scriptshell.core.plugins.manager import PluginManager
from scriptshell.core.utils.configure_logging import configure_logger
from scriptshell.core.utils.path_utils import PathUtils
from scriptshell.core.xngine import QUIT_EXIT_CODE

logger = logging.getLogger(__name__)


class PromptToolkitCompleter(Completer):
    """
    A wrapper that uses the CompletionManager to generate suggestions
    in a way that prompt_toolkit expects.
    """

    def __init__(self, manager: CompletionManager):
        self.manager = manager

    def get_completions(self, document: Document, complete_event):
        yield from self.manager.generate_completions(document)


def _setup_logging(level: Optional[str]) -> None:
    configure_logger(
        level or config_manager.get_nested("debug.level", "WARNING"),
        module_specific_levels=config_manager.get_nested("debug.module_levels"),
        silenced_loggers=config_manager.get_nested("debug.silenced_loggers"),
    )


def bootstrap(autoload_plugins: bool = True) -> ShellContext:
    """Registers the plugins and returns a new session."""
    register_builtin_plugins()
    if autoload_plugins and config_manager.get_nested("plugins.autoload", True):
        loaded = PluginManager(REGISTRY).autoload()
        if loaded:
            logger.info("Autoloaded plugins: %s", ", ".join(loaded))
    return new_session()


# --- Shell Application ---


def start_shell(ctx: ShellContext) -> int:
    """Starts the interactive REPL (Read-Eval-Print Loop)."""
    print(config_manager.get_nested("shell.banner", "Welcome to scriptshell (type 'help' for commands)"))

    history_path = PathUtils.get_shell_history_file()
    history = FileHistory(str(history_path))

    completion_manager = CompletionManager(ctx)
    session = PromptSession(
        history=history,
        completer=PromptToolkitCompleter(completion_manager),
        complete_while_typing=True
    )
    logger.info("Shell startup; history file at: %s", history_path)

    prompt = config_manager.get_nested("shell.prompt", "scriptshell>> ")
    last_exit = 0
    try:
        while True:
            try:
                line = session.prompt(prompt).strip()
            except (EOFError, KeyboardInterrupt):
                break

            result = ctx.dispatch(line)
            if result.exit_code == QUIT_EXIT_CODE:
                break
            last_exit = result.exit_code
    finally:
        print("Bye!")
    return last_exit


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scriptshell", description="Extensible command shell with Python scripting.")
    # -c and -f share one list so commands and files run in the order given
    parser.add_argument("-c", "--command", action="append", dest="steps", default=[], metavar="LINE",
                        help="Run a command line and exit (repeatable).")
    parser.add_argument("-f", "--file", action="append", dest="steps", metavar="FILE",
                        type=lambda path: f"source {shlex.quote(path)}",
                        help="Run a command file and exit (repeatable).")
    parser.add_argument("--log-level", default=None, help="Override debug.level from settings.json.")
    parser.add_argument("--no-plugins", action="store_true", help="Do not autoload user plugins.")
    return parser


def main(argv: List[str] | None = None) -> int:
    """Entrypoint for running the shell from the command line."""
    parsed = build_arg_parser().parse_args(argv)
    _setup_logging(parsed.log_level)
    ctx = bootstrap(autoload_plugins=not parsed.no_plugins)

    if not parsed.steps:
        return start_shell(ctx)

    results = ctx.engine.dispatch_many(parsed.steps, ctx)
    failed = [r for r in results if not r.ok]
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
