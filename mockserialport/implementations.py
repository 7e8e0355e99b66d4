"""
Real Port implementation for production use.

Wraps pyserial so a pseudo-terminal (or real hardware) satisfies the
Port interface.
"""

from typing import Optional

import serial

from .interfaces import Port


class SerialPort(Port):
    """
    Serial port implementation using pyserial.

    pyserial's read(size) blocks until size bytes arrive; read() here
    blocks for the first byte only and then returns whatever else is
    already waiting, up to size.
    """

    def __init__(self, path: str, baud: int, timeout: Optional[float] = None):
        self._serial = serial.Serial(path, baud, timeout=timeout)

    @property
    def serial(self) -> serial.Serial:
        return self._serial

    def read(self, size: int) -> bytes:
        if size <= 0:
            return b""
        first = self._serial.read(1)
        if not first:
            return b""
        waiting = self._serial.in_waiting
        if waiting and size > 1:
            return first + self._serial.read(min(waiting, size - 1))
        return first

    def write(self, data: bytes) -> int:
        return self._serial.write(data)

    def close(self) -> None:
        self._serial.close()


def open_serial_port(path: str, baud: int) -> SerialPort:
    """Default ``Options.open``: open *path* with pyserial, no read timeout."""
    return SerialPort(path, baud)
