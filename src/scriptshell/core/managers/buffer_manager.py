# src/scriptshell/core/managers/buffer_manager.py
import logging
import threading
from typing import Dict, List

from scriptshell.core.errors import CaptureAlreadyActive, UnknownBuffer

logger = logging.getLogger(__name__)


class BufferStore:
    """
    Holds the named output buffers of one shell session.

    A capture accumulates text in a pending list; the buffer's readable content
    is only replaced when the capture ends, so a read never observes a
    half-written capture.
    """

    def __init__(self):
        self._buffers: Dict[str, str] = {}
        self._pending: Dict[str, List[str]] = {}
        self._lock = threading.RLock()

    def start_capture(self, name: str) -> None:
        """Begins a capture into `name`, creating the buffer or truncating it."""
        with self._lock:
            if name in self._pending:
                raise CaptureAlreadyActive(name)
            self._pending[name] = []
            self._buffers[name] = ""
        logger.debug("Started capture into buffer '%s'", name)

    def append_to_capture(self, name: str, text: str) -> None:
        with self._lock:
            pending = self._pending.get(name)
            if pending is None:
                raise UnknownBuffer(name)
            pending.append(text)

    def end_capture(self, name: str) -> str:
        """Finalizes the capture and returns the buffer's new content."""
        with self._lock:
            pending = self._pending.pop(name, None)
            if pending is None:
                raise UnknownBuffer(name)
            content = "".join(pending)
            self._buffers[name] = content
        logger.debug("Finished capture into buffer '%s' (%d characters)", name, len(content))
        return content

    def is_capturing(self, name: str) -> bool:
        with self._lock:
            return name in self._pending

    def read(self, name: str) -> str:
        """
        Returns the content of the buffer.

        Raises:
            UnknownBuffer: If nothing was ever captured into `name`.
        """
        with self._lock:
            if name not in self._buffers:
                raise UnknownBuffer(name)
            return self._buffers[name]

    def clear(self, name: str) -> None:
        """Truncates an existing buffer to empty content."""
        with self._lock:
            if name not in self._buffers:
                raise UnknownBuffer(name)
            self._buffers[name] = ""

    def delete(self, name: str) -> bool:
        with self._lock:
            if name in self._pending:
                raise CaptureAlreadyActive(name)
            return self._buffers.pop(name, None) is not None

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._buffers.keys())

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._buffers

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffers)
