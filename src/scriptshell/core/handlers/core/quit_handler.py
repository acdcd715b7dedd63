# src/scriptshell/core/handlers/core/quit_handler.py
from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.xngine import QUIT_EXIT_CODE


def handle_quit(_args, _ctx: ShellContext, _stdin=None) -> int:
    """Signals the shell to stop."""
    return QUIT_EXIT_CODE


handle_exit = handle_quit
handle_bye = handle_quit
