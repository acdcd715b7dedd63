# src/scriptshell/core/utils/helptext.py
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scriptshell.core.plugins.registry import PluginRegistry

# The static header part of the help text
HEADER_HELP_TEXT = """
scriptshell - Help

An extensible command shell with capture buffers and Python scripting.

---
COMMAND LINES
---
  <name> <arg>...     Run a command. Quote arguments ('...' or "...") to keep spaces.
  @{name}             Session variables are expanded inside arguments.

---
COMMANDS
---
GENERAL:
  help                Show this help text.
  quit | exit | bye   Exit the shell.
  echo [--code N] <text...>
                      Display the specified text (and exit with code N).
""".strip()


def get_help_text(registry: "PluginRegistry") -> str:
    """
    Assembles the full help text from the header and the help text
    fragments of all registered plugins.
    """
    full_help_parts = [HEADER_HELP_TEXT]
    help_texts = registry.help_texts()

    # Sort the command help texts alphabetically for a consistent order
    for command_name in sorted(help_texts.keys()):
        full_help_parts.append(help_texts[command_name])

    return "\n\n".join(full_help_parts)
