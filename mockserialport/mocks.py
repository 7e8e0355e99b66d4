"""
Mock implementations for testing.

In-memory Port suitable for unit testing the read loop without socat.
"""

from typing import List, Optional
from collections import deque

from .interfaces import Port


class FakePort(Port):
    """
    Scripted port for testing.

    Test code queues read results with inject_bytes() / inject_error() and
    inspects written data with get_sent(). Once the queue is empty, read()
    returns b'' (end of stream).
    """

    def __init__(self):
        self._rx: deque = deque()
        self._tx: List[bytes] = []
        self._write_error: Optional[Exception] = None
        self.read_sizes: List[int] = []
        self.path = ""
        self.baud = 0

    def read(self, size: int) -> bytes:
        self.read_sizes.append(size)
        if not self._rx:
            return b""
        item = self._rx.popleft()
        if isinstance(item, Exception):
            raise item
        if len(item) > size:
            self._rx.appendleft(item[size:])
        return item[:size]

    def write(self, data: bytes) -> int:
        if self._write_error is not None:
            raise self._write_error
        self._tx.append(bytes(data))
        return len(data)

    # Test helper methods

    def open(self, path: str, baud: int) -> "FakePort":
        """Usable as ``Options.open``; records the arguments."""
        self.path = path
        self.baud = baud
        return self

    def inject_bytes(self, *chunks: bytes) -> None:
        """Queue chunks, each returned by one read()."""
        self._rx.extend(chunks)

    def inject_error(self, error: Exception) -> None:
        """Queue an exception raised by the next read() that reaches it."""
        self._rx.append(error)

    def set_write_error(self, error: Optional[Exception]) -> None:
        """Make write() raise *error* (None to clear)."""
        self._write_error = error

    def get_sent(self) -> List[bytes]:
        """Get all data sent via write()."""
        return self._tx.copy()

    def clear_sent(self) -> None:
        self._tx.clear()
