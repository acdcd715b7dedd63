# src/scriptshell/core/handlers/core/get_handler.py
from typing import List, Optional

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.parser import GET_PATTERN

get_help_text = """
VARIABLES:
  set @{name}=value   Create or overwrite a session variable (shorthand: @{name}=value).
  get @{name}         Display the value of a variable (shorthand: @{name}).
  get                 List all session variables.
  Variables are expanded as @{name} in the arguments of other commands.
""".strip()


def handle_get(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Handles the 'get' command, which is primarily used via the @{var} shorthand.

    Resolves and prints the value of a context variable.

    Returns:
        int: Exit code (0 for success, 1 for error or not found).
    """
    if not args:
        for key, value in sorted(ctx.vars().items()):
            print(f"@{{{key}}} = {value}")
        return 0

    token = args[0].strip()
    m = GET_PATTERN.match(token)

    if not m:
        print(f"Invalid variable format: {token}. Must be in the format @{{name}}.")
        return 1

    key = m.group(1)
    val = ctx.engine.resolve_var(key, ctx)

    if val is not None:
        print(val)
        return 0

    # Variable not found is treated as a non-zero exit code
    print(f"Error: Variable '@{{{key}}}' not found in context.")
    return 1
