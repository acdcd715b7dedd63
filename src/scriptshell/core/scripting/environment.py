# src/scriptshell/core/scripting/environment.py
import builtins
import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from scriptshell.core.errors import ShellError, UndefinedBinding
from scriptshell.model import Binding, BindingKind, EnvironmentInfo

logger = logging.getLogger(__name__)

HostApiFactory = Callable[[], Dict[str, Any]]


def classify(value: Any) -> BindingKind:
    """Maps a bound Python value onto its binding kind."""
    if value is None:
        return BindingKind.NONE
    if isinstance(value, bool):
        return BindingKind.BOOLEAN
    if isinstance(value, (int, float, complex)):
        return BindingKind.NUMBER
    if isinstance(value, str):
        return BindingKind.TEXT
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return BindingKind.STRUCTURED
    if callable(value):
        return BindingKind.FUNCTION
    return BindingKind.OBJECT


def _summarize(value: Any, kind: BindingKind, limit: int = 60) -> str:
    if kind == BindingKind.FUNCTION:
        return f"{getattr(value, '__name__', type(value).__name__)}()"
    if kind == BindingKind.STRUCTURED:
        return f"{type(value).__name__} of {len(value)} items"
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


class Environment:
    """
    A namespace of bindings that scripts run against.

    The host API (print, dispatch_command, ...) is injected at creation. A
    later definition of a name replaces the earlier one.
    """

    def __init__(self, handle: str, persistent: bool, host_api: Dict[str, Any]):
        self.handle = handle
        self.persistent = persistent
        self.created_at = datetime.now()
        self.loads = 0
        self._host_api = dict(host_api)
        self.namespace: Dict[str, Any] = {
            "__name__": "__script__",
            "__builtins__": builtins,
        }
        self.namespace.update(self._host_api)

    def _is_user_name(self, name: str) -> bool:
        if name.startswith("__") and name.endswith("__"):
            return False
        if name in self._host_api and self.namespace.get(name) is self._host_api[name]:
            return False
        return True

    def define(self, name: str, value: Any) -> None:
        self.namespace[name] = value

    def has(self, name: str) -> bool:
        return name in self.namespace and self._is_user_name(name)

    def value(self, name: str) -> Any:
        """
        Raises:
            UndefinedBinding: If the environment does not bind `name`.
        """
        if name not in self.namespace or (name.startswith("__") and name.endswith("__")):
            raise UndefinedBinding(name, self.handle)
        return self.namespace[name]

    def lookup(self, name: str) -> Binding:
        value = self.value(name)
        kind = classify(value)
        return Binding(name=name, kind=kind, value=value, summary=_summarize(value, kind))

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        binding = self.lookup(name)
        if binding.kind != BindingKind.FUNCTION:
            raise ShellError(f"'{name}' is a {binding.kind.value} binding, not a function")
        return binding.value(*args, **kwargs)

    def user_names(self) -> List[str]:
        return sorted(name for name in self.namespace if self._is_user_name(name))

    def bindings(self) -> List[Binding]:
        return [self.lookup(name) for name in self.user_names()]

    def snapshot(self) -> Dict[str, int]:
        """Identity of every user binding; used to work out what a script load defined."""
        return {name: id(self.namespace[name]) for name in self.user_names()}

    def changed_since(self, snapshot: Dict[str, int]) -> List[str]:
        return [
            name for name in self.user_names()
            if snapshot.get(name) != id(self.namespace[name])
        ]

    def info(self) -> EnvironmentInfo:
        return EnvironmentInfo(
            handle=self.handle,
            persistent=self.persistent,
            loads=self.loads,
            bindings=len(self.user_names()),
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        state = "persistent" if self.persistent else "ephemeral"
        return f"<Environment {self.handle!r} {state} bindings={len(self.user_names())}>"


class EnvironmentManager:
    """
    Arena of scripting environments for one session, keyed by handle.

    Retained (persistent) environments live until dropped. Every load without
    the retain flag gets a fresh ephemeral environment that is never stored,
    so its bindings die with the script.
    """

    def __init__(self, host_api_factory: HostApiFactory):
        self._host_api_factory = host_api_factory
        self._retained: Dict[str, Environment] = {}
        self._lock = threading.RLock()

    def _create(self, handle: str, persistent: bool) -> Environment:
        return Environment(handle, persistent, self._host_api_factory())

    def acquire(self, handle: Optional[str], retain: bool) -> Environment:
        if not retain:
            if handle and handle in self:
                logger.debug("Ignoring handle '%s' for an ephemeral script load", handle)
            return self._create(f"ephemeral-{uuid.uuid4().hex[:8]}", persistent=False)

        if not handle:
            raise ValueError("A retained environment needs a handle.")

        with self._lock:
            env = self._retained.get(handle)
            if env is None:
                env = self._create(handle, persistent=True)
                self._retained[handle] = env
                logger.debug("Created retained environment '%s'", handle)
            return env

    def release(self, env: Environment) -> None:
        if not env.persistent:
            logger.debug("Discarding ephemeral environment '%s'", env.handle)

    def get(self, handle: str) -> Optional[Environment]:
        with self._lock:
            return self._retained.get(handle)

    def drop(self, handle: str) -> bool:
        with self._lock:
            return self._retained.pop(handle, None) is not None

    def handles(self) -> List[str]:
        with self._lock:
            return sorted(self._retained)

    def __contains__(self, handle: str) -> bool:
        with self._lock:
            return handle in self._retained
