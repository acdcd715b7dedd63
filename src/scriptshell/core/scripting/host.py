# src/scriptshell/core/scripting/host.py
import sys
from typing import TYPE_CHECKING, Any, Dict, Optional

from scriptshell.model import DispatchResult

if TYPE_CHECKING:
    from scriptshell.core.context.shell_context import ShellContext


class ScriptHost:
    """
    The shell as seen from inside a script.

    Bound methods of this object are injected into every environment as
    print, println, dispatch_command and get_plugin_instance; the object
    itself is available as `shell`.
    """

    def __init__(self, ctx: "ShellContext"):
        self._ctx = ctx

    def print(self, *values: Any, sep: str = " ", end: str = "") -> None:
        # sys.stdout is looked up per call: it is the sink of the running command
        sys.stdout.write(sep.join(str(v) for v in values) + end)

    def println(self, *values: Any, sep: str = " ") -> None:
        self.print(*values, sep=sep, end="\n")

    def dispatch_command(self, line: str) -> DispatchResult:
        """Runs a shell command line; failures come back as a failed result."""
        return self._ctx.dispatch(line)

    def get_plugin_instance(self, name: str) -> Optional[Any]:
        """Returns the plugin's queryable instance, or None if it is not registered."""
        return self._ctx.get_plugin_instance(name)

    def get_var(self, name: str) -> Optional[str]:
        return self._ctx.get(name)

    def set_var(self, name: str, value: Any) -> None:
        self._ctx.set(name, str(value))

    def bindings(self) -> Dict[str, Any]:
        return {
            "print": self.print,
            "println": self.println,
            "dispatch_command": self.dispatch_command,
            "get_plugin_instance": self.get_plugin_instance,
            "shell": self,
        }
