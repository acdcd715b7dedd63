# src/scriptshell/core/handlers/scripting/resource_handler.py
import logging
from pathlib import Path
from typing import List, Optional

import requests

from scriptshell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)

resource_help_text = """
RESOURCES:
  resource <file|url>       Print the content of a file or URL (alias: url).
                            Combine with capture to load it into a buffer:
                            capture buffer page resource https://example.com
""".strip()

REQUEST_TIMEOUT = 10.0


def read_resource(identifier: str, timeout: float = REQUEST_TIMEOUT) -> str:
    """
    Returns the text of a URL (anything with '://') or of a local file.

    Raises:
        requests.RequestException: If the URL cannot be fetched.
        OSError: If the file cannot be read.
    """
    if "://" in identifier and not identifier.startswith("file://"):
        resp = requests.get(identifier, timeout=timeout)
        resp.raise_for_status()
        return resp.text

    path = Path(identifier[len("file://"):] if identifier.startswith("file://") else identifier)
    return path.expanduser().read_text(encoding="utf-8")


def handle_resource(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Writes a file or URL to the output, so it can be captured like any command output."""
    if len(args) != 1:
        print("Usage: resource <file|url>")
        return 1

    identifier = args[0]
    try:
        content = read_resource(identifier)
    except requests.RequestException as e:
        logger.warning("Fetching %s failed: %s", identifier, e)
        print(f"❌ Cannot fetch '{identifier}': {e}")
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"❌ Cannot read '{identifier}': {e}")
        return 1

    print(content, end="")
    return 0


handle_url = handle_resource
