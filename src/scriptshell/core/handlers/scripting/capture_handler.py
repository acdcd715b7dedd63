# src/scriptshell/core/handlers/scripting/capture_handler.py
import sys
from contextlib import ExitStack, redirect_stderr
from typing import Any, Dict, List, Optional, Tuple

from scriptshell.core.capture import BufferSink, CaptureSink, ConsoleSink, TeeSink
from scriptshell.core.context.shell_context import ShellContext
from scriptshell.model import Command, DispatchResult

capture_help_text = """
CAPTURE:
  capture buffer [-t] [-e] <name> <command> [<arg>...]
                      Run <command> and store its output in buffer <name>
                      instead of printing it. A new capture replaces the old content.
    -t                Also echo the output to the console.
    -e                Also capture error messages into the buffer.
  Scripts read buffers with get_plugin_instance("scripting").get_buffer(<name>).
""".strip()

CAPTURE_MODES = ("buffer",)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {mode: None for mode in CAPTURE_MODES}

USAGE = "Usage: capture buffer [-t] [-e] <buffer-name> <command> [<command-arg>...]"


def capture_into_buffer(
        ctx: ShellContext,
        buffer_name: str,
        command: Command,
        tee: bool = False,
        errors: bool = False,
        stdin: Optional[str] = None,
) -> DispatchResult:
    """
    Executes `command` with its output routed into `buffer_name`.

    The capture is closed even when the command fails, so the buffer always
    holds exactly what the command wrote.

    Raises:
        CaptureAlreadyActive: If `buffer_name` is already being captured into.
    """
    ctx.buffers.start_capture(buffer_name)
    sink: CaptureSink = BufferSink(ctx.buffers, buffer_name)
    if tee:
        sink = TeeSink(sink, ConsoleSink(sys.stdout))

    try:
        with ExitStack() as stack:
            if errors:
                stack.enter_context(redirect_stderr(sink))
            result = ctx.engine.execute(command, ctx, sink=sink, stdin=stdin)
    finally:
        ctx.buffers.end_capture(buffer_name)
    return result


def _parse_flags(tokens: List[str]) -> Tuple[bool, bool, List[str]]:
    tee = errors = False
    rest = list(tokens)
    while rest and len(rest[0]) > 1 and rest[0].startswith("-") and set(rest[0][1:]) <= {"t", "e"}:
        flags = rest.pop(0)[1:]
        tee = tee or "t" in flags
        errors = errors or "e" in flags
    return tee, errors, rest


def handle_capture(args: List[str], ctx: ShellContext, stdin: Optional[str] = None) -> int:
    """
    Handles 'capture <mode> [-t] [-e] <name> <command> [<arg>...]'.

    The nested command is dispatched through the engine like any other
    command; only its output sink differs.

    Returns:
        int: The exit code of the nested command, or 1 on usage errors.
    """
    if not args:
        print(USAGE)
        return 1

    mode = args[0]
    if mode not in CAPTURE_MODES:
        print(f"❌ Unknown capture mode '{mode}' (supported: {', '.join(CAPTURE_MODES)}).")
        return 1

    tee, errors, rest = _parse_flags(args[1:])
    if len(rest) < 2:
        print(USAGE)
        return 1

    # Only the buffer name is expanded here; the nested command expands its own arguments
    buffer_name = ctx.engine.expand_context_vars(rest[0], ctx)
    nested = Command.from_tokens(rest[1:])
    result = capture_into_buffer(ctx, buffer_name, nested, tee=tee, errors=errors, stdin=stdin)
    return result.exit_code
