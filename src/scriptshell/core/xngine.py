from __future__ import annotations

import inspect
import logging
import re
import sys
from contextlib import redirect_stdout
from typing import Any, Callable, Iterable, List, Optional, Pattern

from scriptshell.core.capture import CaptureSink, ConsoleSink
from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.errors import MalformedCommand, ShellError, UnknownCommand
from scriptshell.core.parser import VAR_PATTERN, tokenize_command
from scriptshell.core.plugins.registry import PluginRegistry
from scriptshell.model import Command, DispatchResult, DispatchStatus

QUIT_EXIT_CODE = 130
UNKNOWN_COMMAND_EXIT_CODE = 127
MALFORMED_EXIT_CODE = 2


class ExecuteEngine:
    """
    Core engine responsible for command dispatch, output routing and
    context variable expansion.

    Dispatch is synchronous: everything a command does is visible before the
    next command starts. A failing command is reported and returned as a
    failed result; it never aborts the session or a running script.
    """

    def __init__(
            self,
            *,
            registry: PluginRegistry,
            var_pattern: Pattern[str] = VAR_PATTERN,
            maybe_expand_args: Optional[Callable[[str, List[str], ShellContext], List[str]]] = None,
            logger: Optional[logging.Logger] = None,
    ) -> None:
        self.registry = registry
        self._VAR_PATTERN = var_pattern
        self._maybe_expand_args = maybe_expand_args or (lambda name, args, ctx: list(args))
        self._log = logger or logging.getLogger(__name__)

    def expand_context_vars(self, text: str, ctx: ShellContext) -> str:
        """Performs @{var} expansion in the given text."""
        def repl(m: re.Match) -> str:
            end = m.end()
            if end < len(text) and text[end] == '=':
                return m.group(0)
            name = m.group(1)
            val = self.resolve_var(name, ctx)
            return str(val) if val is not None else m.group(0)

        return self._VAR_PATTERN.sub(repl, text)

    def resolve_var(self, name: str, ctx: ShellContext) -> Optional[Any]:
        """Resolves a context variable by its (possibly dotted) name."""
        return ctx.get(name)

    def dispatch(self, line: str, context: Optional[ShellContext] = None) -> DispatchResult:
        """
        Tokenizes and executes one command line.

        Blank lines yield a NO_COMMAND result; malformed lines and unknown
        commands yield a FAILURE result after being reported.
        """
        ctx = context if context is not None else ShellContext(engine=self)
        try:
            command = tokenize_command(line)
        except MalformedCommand as e:
            return self._fail(line, None, e.message, MALFORMED_EXIT_CODE)

        if command is None:
            return DispatchResult(line=line, status=DispatchStatus.NO_COMMAND)

        return self.execute(command, ctx)

    def dispatch_many(self, lines: Iterable[str], context: ShellContext,
                      stop_on_quit: bool = True) -> List[DispatchResult]:
        """Dispatches lines one after another; stops early on a quit request."""
        results: List[DispatchResult] = []
        for line in lines:
            result = self.dispatch(line, context)
            results.append(result)
            if stop_on_quit and result.exit_code == QUIT_EXIT_CODE:
                break
        return results

    def execute(
            self,
            command: Command,
            ctx: ShellContext,
            sink: Optional[CaptureSink] = None,
            stdin: Optional[str] = None,
    ) -> DispatchResult:
        """
        Resolves the handler of an already tokenized command and runs it with
        `sink` as its output (the console when no sink is given).
        """
        if ctx.engine is None:
            ctx.engine = self

        try:
            binding = self.registry.resolve_handler(command.name)
        except UnknownCommand as e:
            return self._fail(command.line, command, e.message, UNKNOWN_COMMAND_EXIT_CODE)

        args = self._maybe_expand_args(command.name, list(command.args), ctx)
        target = sink if sink is not None else ConsoleSink(sys.stdout)

        try:
            with redirect_stdout(target):
                exit_code = self._call_handler(binding.handler, args, ctx, stdin)
        except ShellError as e:
            self._log.debug("Command '%s' failed: %s", command.name, e.message)
            return self._fail(command.line, command, e.message, 1)
        except Exception as e:
            self._log.error("Command '%s' raised: %s", command.name, e, exc_info=True)
            return self._fail(command.line, command, f"Error running '{command.name}': {e}", 1)

        if exit_code in (0, QUIT_EXIT_CODE):
            return DispatchResult(line=command.line, command=command,
                                  status=DispatchStatus.SUCCESS, exit_code=exit_code)

        self._log.debug("Command '%s' exited with code %d", command.name, exit_code)
        return DispatchResult(line=command.line, command=command, status=DispatchStatus.FAILURE,
                              exit_code=exit_code, error=f"exit code {exit_code}")

    def get_plugin_instance(self, name: str, ctx: ShellContext) -> Optional[Any]:
        return self.registry.get_plugin_instance(name, ctx)

    def _fail(self, line: str, command: Optional[Command], message: str, exit_code: int) -> DispatchResult:
        # Reports go to stderr so they never end up in a capture buffer by accident
        print(f"❌ {message}", file=sys.stderr)
        return DispatchResult(line=line, command=command, status=DispatchStatus.FAILURE,
                              exit_code=exit_code, error=message)

    def _call_handler(self, handler, args, ctx, stdin) -> int:
        sig = inspect.signature(handler)
        if len(sig.parameters) >= 3:
            return int(handler(args, ctx, stdin))
        return int(handler(args, ctx))
