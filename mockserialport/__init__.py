"""
Mock Serial Port

A serial port test double: socat links two pseudo-terminals and the mock
answers whatever the program under test writes to its end.
"""

from .interfaces import Port, FlagRegistry
from .options import Options, DEFAULT_PID_FILE, DEFAULT_SOCAT, DEFAULT_BAUD_RATE
from .mock import Mock, PortNotOpenError, READ_SIZE
from .implementations import SerialPort, open_serial_port

__all__ = [
    "Port",
    "FlagRegistry",
    "Options",
    "DEFAULT_PID_FILE",
    "DEFAULT_SOCAT",
    "DEFAULT_BAUD_RATE",
    "Mock",
    "PortNotOpenError",
    "READ_SIZE",
    "SerialPort",
    "open_serial_port",
]
