"""
Interfaces for Mock Serial Port

Abstract base classes for the two capabilities the mock consumes but does
not implement: a byte-level port and a flag registry. Any object with the
same methods works; the ABCs document the contract and enable mock-based
testing without hardware.
"""

import argparse
from abc import ABC, abstractmethod


class Port(ABC):
    """
    Abstract interface for a byte-level serial port.

    Implementations:
    - SerialPort: Wraps pyserial for pseudo-terminals and real hardware
    - FakePort: For unit testing without socat
    """

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Block until data is available and return up to size bytes.

        Returns b'' at end of stream. Raises on transport errors.
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write data to the port. Returns bytes written."""
        pass


class FlagRegistry(ABC):
    """
    Abstract interface for command-line flag registration.

    Mirrors argparse's add_argument so parsers and argument groups
    satisfy it directly.
    """

    @abstractmethod
    def add_argument(self, *name_or_flags: str, **kwargs):
        """Register a flag."""
        pass


FlagRegistry.register(argparse.ArgumentParser)
FlagRegistry.register(argparse._ArgumentGroup)
