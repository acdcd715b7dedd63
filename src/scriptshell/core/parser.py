# src/scriptshell/core/parser.py
from __future__ import annotations
import re
import shlex
from typing import List, Optional

from scriptshell.core.errors import MalformedCommand
from scriptshell.model import Command

# Pattern to identify variable expansion: @{name}
VAR_PATTERN = re.compile(r"@\{([^}]+)\}")
# Pattern to identify the variable SET shorthand: @{name}=value
SET_PATTERN = re.compile(r"^@\{([^}=]+)\}=(.*)$")
# Pattern to identify the variable GET shorthand: @{name} (full match)
GET_PATTERN = re.compile(r"^@\{([A-Za-z_][\w\.]*)\}$")


def split_tokens(line: str) -> List[str]:
    """
    Splits a raw line into tokens on whitespace.

    Single- and double-quoted spans form one token with the quotes stripped.

    Raises:
        MalformedCommand: If a quote is left unterminated.
    """
    s = (line or "").strip()
    if not s:
        return []

    # posix mode strips the quotes; backslashes and '#' are plain word text
    lexer = shlex.shlex(s, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""
    try:
        return list(lexer)
    except ValueError as e:
        raise MalformedCommand(f"malformed command line ({e}): {s}") from e


def tokenize_command(line: str) -> Optional[Command]:
    """
    Parses the user input into a Command.

    Recognizes the shorthands for 'set' (@{var}=value) and 'get' (@{var}).

    Args:
        line (str): The raw input string from the shell or a script.

    Returns:
        Optional[Command]: The command, or None when the line holds no command
        (blank input), so callers can simply skip it.
    """
    tokens = split_tokens(line)
    if not tokens:
        return None

    first = tokens[0]
    if '=' in first and SET_PATTERN.match(first):
        tokens = ["set", *tokens]
    elif GET_PATTERN.fullmatch(first):
        tokens = ["get", *tokens]

    return Command.from_tokens(tokens, line=line.strip())
