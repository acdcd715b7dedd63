# src/scriptshell/core/capture.py
from __future__ import annotations

import io
import sys
from typing import Callable, Optional, TextIO

from scriptshell.core.managers.buffer_manager import BufferStore


class CaptureSink(io.TextIOBase):
    """
    Write-target handed to a command while it executes.

    The dispatcher installs the sink as ``sys.stdout`` for the duration of the
    handler call, so handlers simply ``print()`` and never know where their
    output ends up.
    """

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:  # pragma: no cover - abstract
        raise NotImplementedError


class ConsoleSink(CaptureSink):
    """Pass-through to the console stream that was active at dispatch time."""

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__()
        self._stream = stream if stream is not None else sys.stdout

    @property
    def stream(self) -> TextIO:
        return self._stream

    def write(self, text: str) -> int:
        self._stream.write(text)
        return len(text)

    def flush(self) -> None:
        self._stream.flush()


class BufferSink(CaptureSink):
    """Routes every write into an active capture of the buffer store."""

    def __init__(self, store: BufferStore, buffer_name: str):
        super().__init__()
        self._store = store
        self.buffer_name = buffer_name

    def write(self, text: str) -> int:
        if text:
            self._store.append_to_capture(self.buffer_name, text)
        return len(text)


class TeeSink(CaptureSink):
    """Forwards each write to several sinks (capture while still echoing)."""

    def __init__(self, *sinks: io.TextIOBase):
        super().__init__()
        self._sinks = sinks

    def write(self, text: str) -> int:
        for sink in self._sinks:
            sink.write(text)
        return len(text)

    def flush(self) -> None:
        for sink in self._sinks:
            sink.flush()


class LinePrefixSink(CaptureSink):
    """
    Prefixes every complete output line with `prefix()` before passing it on.
    A trailing partial line is held back until `close()`.
    """

    def __init__(self, target: io.TextIOBase, prefix: Callable[[], str]):
        super().__init__()
        self._target = target
        self._prefix = prefix
        self._partial = ""

    def write(self, text: str) -> int:
        pending = self._partial + text
        *lines, self._partial = pending.split("\n")
        for line in lines:
            self._target.write(f"{self._prefix()}: {line}\n")
        return len(text)

    def flush(self) -> None:
        self._target.flush()

    def close(self) -> None:
        if self._partial:
            self._target.write(f"{self._prefix()}: {self._partial}\n")
            self._partial = ""
        super().close()
