# src/scriptshell/core/handlers/core/time_handler.py
import sys
import time
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from scriptshell.core.capture import LinePrefixSink
from scriptshell.core.context.shell_context import ShellContext
from scriptshell.model import Command

time_help_text = """
TIMING:
  time [-d] [-t] [-T <format>] [-s] <command> [<arg>...]
                      Run <command> and report how long it took.
    -d                Prefix each output line with the milliseconds elapsed so far.
    -t                Prefix each output line with the time of day (yymmddHHMMSS).
    -T <format>       Like -t with a strftime format.
    -s                Print a summary line with the total time (the default
                      when no other option is given).
  Can be combined with capture: capture buffer x time -d <command>...
""".strip()

USAGE = "Usage: time [-d] [-t] [-T <format>] [-s] <command> [<arg>...]"

DEFAULT_TIME_FORMAT = "%y%m%d%H%M%S"


def _parse_options(args: List[str]) -> Tuple[bool, Optional[str], bool, List[str]]:
    """Reads the leading options; everything from the first non-option on is the command."""
    elapsed = summary = False
    time_format: Optional[str] = None
    rest = list(args)
    while rest and rest[0].startswith("-") and len(rest[0]) > 1:
        option = rest.pop(0)
        if option == "-T":
            if not rest:
                raise ValueError("option -T needs a format")
            if time_format is not None:
                raise ValueError("can't specify both '-t' and '-T'")
            time_format = rest.pop(0)
            continue
        for flag in option[1:]:
            if flag == "d":
                elapsed = True
            elif flag == "s":
                summary = True
            elif flag == "t":
                if time_format is not None:
                    raise ValueError("can't specify both '-t' and '-T'")
                time_format = DEFAULT_TIME_FORMAT
            else:
                raise ValueError(f"unknown option '-{flag}'")
    return elapsed, time_format, summary, rest


def _make_prefix(started: float, elapsed: bool, time_format: Optional[str]) -> Callable[[], str]:
    def prefix() -> str:
        stamp = datetime.now().strftime(time_format) if time_format else ""
        if not elapsed:
            return stamp
        millis = int((time.perf_counter() - started) * 1000)
        return f"{stamp} ({millis})" if stamp else str(millis)
    return prefix


def handle_time(args: List[str], ctx: ShellContext, stdin: Optional[str] = None) -> int:
    """
    Runs a nested command and reports its timing.

    Returns:
        int: The exit code of the nested command, or 1 on usage errors.
    """
    try:
        elapsed, time_format, summary, rest = _parse_options(args)
    except ValueError as e:
        print(f"❌ {e}")
        print(USAGE)
        return 1

    if not rest:
        print(USAGE)
        return 1

    prefixing = elapsed or time_format is not None
    summary = summary or not prefixing
    started = time.perf_counter()

    sink = LinePrefixSink(sys.stdout, _make_prefix(started, elapsed, time_format)) if prefixing else None
    try:
        result = ctx.engine.execute(Command.from_tokens(rest), ctx, sink=sink, stdin=stdin)
    finally:
        if sink is not None:
            sink.close()

    if summary:
        took = (time.perf_counter() - started) * 1000
        print(f"time: '{rest[0]}' took {took:.0f} ms")
    return result.exit_code
