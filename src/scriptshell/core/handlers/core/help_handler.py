# src/scriptshell/core/handlers/core/help_handler.py
from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.utils.helptext import get_help_text


def handle_help(_args, ctx: ShellContext, _stdin=None) -> int:
    print(get_help_text(ctx.engine.registry))
    return 0
