import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from scriptshell.core.managers.buffer_manager import BufferStore
from scriptshell.core.managers.config_manager import config_manager
from scriptshell.core.scripting.environment import EnvironmentManager
from scriptshell.core.scripting.host import ScriptHost
from scriptshell.core.scripting.runner import ScriptRunner

# Prevent circular imports during runtime, but retain type hinting for static analysis
if TYPE_CHECKING:
    from scriptshell.core.xngine import ExecuteEngine
    from scriptshell.model import DispatchResult

logger = logging.getLogger(__name__)


class ShellContext:
    """
    Holds the state of one shell session.

    Every session owns its own buffers, scripting environments and variables.
    Plugins are shared: they live in the engine's registry.
    """

    def __init__(self, engine: Optional["ExecuteEngine"] = None):
        self._vars: Dict[str, str] = {}
        self.engine = engine

        self.buffers = BufferStore()
        self.environments = EnvironmentManager(host_api_factory=lambda: ScriptHost(self).bindings())
        self.scripts = ScriptRunner(self.environments)

    @property
    def default_environment(self) -> str:
        """Handle used by 'pyscript -r' and 'env' when none is given; read from config on each use."""
        return str(config_manager.get_nested("scripting.default_environment", "default"))

    def dispatch(self, line: str) -> "DispatchResult":
        """Dispatches a command line in this session."""
        if self.engine is None:
            raise RuntimeError("ShellContext has no engine attached.")
        return self.engine.dispatch(line, self)

    def get_plugin_instance(self, name: str) -> Optional[Any]:
        if self.engine is None:
            return None
        return self.engine.get_plugin_instance(name, self)

    def set(self, key: str, value: str) -> None:
        """Sets a context variable."""
        self._vars[key] = value

    def get(self, key: str) -> Optional[str]:
        """Retrieves a context variable. Returns None if key does not exist."""
        return self._vars.get(key)

    def vars(self) -> Dict[str, str]:
        return dict(self._vars)

    def __repr__(self) -> str:
        """Provides a string representation of the context state."""
        return (
            f"<ShellContext buffers={len(self.buffers)} "
            f"environments={len(self.environments.handles())} vars_count={len(self._vars)}>"
        )
