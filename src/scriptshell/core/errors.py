# src/scriptshell/core/errors.py
from typing import Optional


class ShellError(Exception):
    """Base class for all errors raised by the shell core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedCommand(ShellError):
    """The tokenizer could not split a command line (e.g. unterminated quote)."""


class UnknownCommand(ShellError):
    """No registered plugin owns the requested command name."""

    def __init__(self, command_name: str):
        super().__init__(f"unknown command: '{command_name}'")
        self.command_name = command_name


class DuplicateName(ShellError):
    """A plugin or command name is already taken in the registry."""

    def __init__(self, name: str, kind: str = "plugin"):
        super().__init__(f"{kind} name '{name}' is already registered")
        self.name = name
        self.kind = kind


class UnknownBuffer(ShellError):
    """The named buffer was never captured into (or was deleted)."""

    def __init__(self, buffer_name: str):
        super().__init__(f"buffer '{buffer_name}' not found")
        self.buffer_name = buffer_name


class CaptureAlreadyActive(ShellError):
    """A capture into the named buffer is already in progress."""

    def __init__(self, buffer_name: str):
        super().__init__(f"a capture into buffer '{buffer_name}' is already active")
        self.buffer_name = buffer_name


class UndefinedBinding(ShellError):
    """A name was looked up that the active environment does not define."""

    def __init__(self, name: str, environment: Optional[str] = None):
        where = f" in environment '{environment}'" if environment else ""
        super().__init__(f"'{name}' is not defined{where}")
        self.name = name
        self.environment = environment


class ScriptExecutionError(ShellError):
    """
    Raised when loading or running a script fails.

    The underlying failure (syntax error, undefined binding, an error surfaced
    from a host call, ...) is available as ``cause``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None, script: Optional[str] = None):
        super().__init__(message)
        self.cause = cause
        self.script = script
