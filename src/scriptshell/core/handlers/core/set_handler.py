# src/scriptshell/core/handlers/core/set_handler.py
from typing import List, Optional

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.parser import SET_PATTERN


def handle_set(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Handles the 'set' command, including the @{var}=value shorthand.

    Assigns a string value to a context variable.

    Args:
        args (List[str]): Arguments, where the key and value are expected
                          to be combined in the form '@{name}=value'.
        ctx (ShellContext): The current shell context where the variable will be stored.
        _stdin (Optional[str]): Standard input (unused here).

    Returns:
        int: Exit code (0 for success, 1 for usage error).
    """
    if not args:
        print("Usage: set @{name}=value")
        return 1

    # Rejoin arguments: the tokenizer already split on unquoted whitespace.
    full_arg = " ".join(args)
    m = SET_PATTERN.match(full_arg)

    if not m:
        print("Usage: set @{name}=value")
        return 1

    key, value = m.group(1).strip(), m.group(2).strip()
    ctx.set(key, value)
    return 0
