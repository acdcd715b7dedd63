# src/scriptshell/core/scripting/runner.py
from __future__ import annotations

import ast
import logging
import re
from pathlib import Path
from types import CodeType
from typing import Any, List, Optional, Tuple, Union

from scriptshell.core.errors import ScriptExecutionError, ShellError, UndefinedBinding
from scriptshell.core.scripting.environment import Environment, EnvironmentManager
from scriptshell.model import ScriptResult

logger = logging.getLogger(__name__)

_NAME_ERROR_PATTERN = re.compile(r"name '([^']+)' is not defined")


def _compile(source: str, filename: str) -> Tuple[CodeType, Optional[CodeType]]:
    """
    Compiles a script. When the last statement is an expression it is compiled
    separately so its value can be handed back as the script's result.
    """
    tree = ast.parse(source, filename=filename, mode="exec")
    tail: Optional[CodeType] = None
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = tree.body.pop()
        tail = compile(ast.Expression(body=last.value), filename, "eval")
    body = compile(tree, filename, "exec")
    return body, tail


def _missing_name(exc: NameError) -> str:
    name = getattr(exc, "name", None)
    if name:
        return name
    m = _NAME_ERROR_PATTERN.search(str(exc))
    return m.group(1) if m else str(exc)


class ScriptRunner:
    """
    Runs Python scripts against environments of an EnvironmentManager.

    Execution is not re-entrant across environments: while a script runs, a
    nested load is only accepted for the same retained environment.
    """

    def __init__(self, environments: EnvironmentManager):
        self.environments = environments
        self._active: List[Environment] = []

    @property
    def active_environment(self) -> Optional[Environment]:
        return self._active[-1] if self._active else None

    def _check_reentry(self, handle: Optional[str], retain: bool, script: str) -> None:
        current = self.active_environment
        if current is None:
            return
        if retain and current.persistent and handle == current.handle:
            return
        raise ScriptExecutionError(
            f"cannot load '{script}' while a script is running in environment '{current.handle}'",
            script=script,
        )

    def _wrap(self, exc: Exception, env: Environment, script: str) -> ScriptExecutionError:
        if isinstance(exc, NameError):
            cause: Exception = UndefinedBinding(_missing_name(exc), env.handle)
            return ScriptExecutionError(f"{script}: {cause}", cause=cause, script=script)
        if isinstance(exc, ShellError):
            return ScriptExecutionError(f"{script}: {exc.message}", cause=exc, script=script)
        return ScriptExecutionError(f"{script}: {type(exc).__name__}: {exc}", cause=exc, script=script)

    def run(self, source: str, handle: Optional[str] = None, retain: bool = False,
            filename: str = "<script>") -> ScriptResult:
        """
        Executes script source against the environment identified by `handle`.

        Args:
            source: Python source of the script.
            handle: Environment handle; only used when `retain` is set.
            retain: Create or reuse the persistent environment `handle`. Without
                it the script gets a fresh environment that is thrown away.
            filename: Name used in tracebacks and error messages.

        Returns:
            ScriptResult: Value of the final expression (if any) and the names
            the script defined.

        Raises:
            ScriptExecutionError: On syntax errors, undefined names, errors
                raised by host calls, or any other failure in the script.
                Bindings defined before the failure stay in a retained
                environment.
        """
        self._check_reentry(handle, retain, filename)

        try:
            body, tail = _compile(source, filename)
        except SyntaxError as e:
            raise ScriptExecutionError(
                f"syntax error in {filename}, line {e.lineno}: {e.msg}", cause=e, script=filename
            ) from e
        except ValueError as e:
            # e.g. source containing null bytes
            raise ScriptExecutionError(f"cannot compile {filename}: {e}", cause=e, script=filename) from e

        env = self.environments.acquire(handle, retain)
        before = env.snapshot()
        logger.debug("Running %s in environment '%s'", filename, env.handle)

        self._active.append(env)
        try:
            exec(body, env.namespace)
            value: Any = eval(tail, env.namespace) if tail is not None else None
        except ScriptExecutionError:
            raise
        except Exception as e:
            raise self._wrap(e, env, filename) from e
        finally:
            self._active.pop()
            env.loads += 1
            self.environments.release(env)

        return ScriptResult(
            environment=env.handle,
            retained=env.persistent,
            value=value,
            defined=env.changed_since(before),
        )

    def run_file(self, path: Union[str, Path], handle: Optional[str] = None,
                 retain: bool = False) -> ScriptResult:
        script_path = Path(path).expanduser()
        try:
            source = script_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScriptExecutionError(f"cannot read script '{script_path}': {e}", cause=e,
                                       script=str(script_path)) from e
        return self.run(source, handle=handle, retain=retain, filename=str(script_path))

    def call(self, handle: str, name: str, *args: Any) -> Any:
        """
        Invokes a function bound in the retained environment `handle`.

        Raises:
            ShellError: If there is no retained environment `handle`.
            UndefinedBinding: If the environment has no binding `name`.
            ScriptExecutionError: If the function itself fails.
        """
        env = self.environments.get(handle)
        if env is None:
            raise ShellError(f"no retained environment '{handle}'")
        self._check_reentry(handle, True, name)
        env.lookup(name)

        self._active.append(env)
        try:
            return env.call(name, *args)
        except ScriptExecutionError:
            raise
        except Exception as e:
            raise self._wrap(e, env, name) from e
        finally:
            self._active.pop()
