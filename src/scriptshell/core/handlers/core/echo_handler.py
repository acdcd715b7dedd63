# src/scriptshell/core/handlers/core/echo_handler.py
from typing import List, Optional

from scriptshell.core.context.shell_context import ShellContext


def handle_echo(args: List[str], _ctx: ShellContext, stdin: Optional[str] = None) -> int:
    """
    Handles the 'echo' command.

    Prints the provided text and returns a specific exit code if the
    --code flag is used.

    Args:
        args (List[str]): Arguments passed to the echo command.
        _ctx (ShellContext): The shell context (unused in this handler).
        stdin (Optional[str]): Input fed from a buffer ('buffer feed').

    Returns:
        int: The specified exit code (default is 0).
    """
    text_to_print_args = []
    exit_code = 0
    i = 0

    # Manually parse arguments to find the optional '--code <N>' flag
    while i < len(args):
        arg = args[i]

        if arg == "--code" and i + 1 < len(args):
            try:
                exit_code = int(args[i + 1])
                i += 1  # Skip the value that was consumed as the code
            except ValueError:
                # Not a number: '--code' is just text
                text_to_print_args.append(arg)
        else:
            text_to_print_args.append(arg)

        i += 1

    # Joined arguments win over fed input
    if text_to_print_args:
        print(" ".join(text_to_print_args))
    elif stdin:
        print(stdin, end="" if stdin.endswith("\n") else "\n")
    else:
        print()

    return exit_code
