"""Mock configuration: socat paths, baud rate and the two callbacks."""

from __future__ import annotations

import argparse
import dataclasses
import shutil
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from .interfaces import FlagRegistry, Port

if TYPE_CHECKING:
    from .mock import Mock

DEFAULT_PID_FILE = "socat.pid"
DEFAULT_SOCAT = "socat"
DEFAULT_BAUD_RATE = 115200

# (field, flag name, help, type)
_FLAGS = (
    ("input_file", "i", "input file", str),
    ("output_file", "o", "output file", str),
    ("pid_file", "pid", "pid of socat", str),
    ("socat_path", "socat", "path of socat executable", str),
    ("baud_rate", "baudrate", "baud rate", int),
    ("extra_opts", "opts", "extra options for socat", str),
)

OpenFunc = Callable[[str, int], Port]
ProcessFunc = Callable[["Mock", bytes], Optional[bytes]]


@dataclass(frozen=True)
class Options:
    """Mock options.

    Attributes:
        input_file: Device link for the program under test to open.
        output_file: Device link the mock opens.
        pid_file: File storing the socat process id.
        socat_path: Path of the socat executable.
        baud_rate: 1200/2400/4800/9600/19200/38400/57600/115200 (not validated).
        extra_opts: Extra socat address options, appended to both endpoints.
        verbose: Log lifecycle events and traffic.
        open: Called with (path, baud_rate) to open the output device.
            Defaults to pyserial via ``open_serial_port``.
        process: Called with (mock, buffered bytes) on every read; returns
            the bytes it did not consume.
    """

    input_file: str = ""
    output_file: str = ""
    pid_file: str = DEFAULT_PID_FILE
    socat_path: str = DEFAULT_SOCAT
    baud_rate: int = DEFAULT_BAUD_RATE
    extra_opts: str = ""
    verbose: bool = False
    open: Optional[OpenFunc] = None
    process: Optional[ProcessFunc] = None

    @property
    def pid_path(self) -> str:
        return self.pid_file or DEFAULT_PID_FILE

    def resolve_socat(self) -> str:
        """Return the socat executable, searching PATH for the default name."""
        if self.socat_path and self.socat_path != DEFAULT_SOCAT:
            return self.socat_path
        return shutil.which(DEFAULT_SOCAT) or DEFAULT_SOCAT

    def socat_command_args(self) -> list[str]:
        """Return the two socat address arguments (input first, then output)."""
        extra = self.extra_opts
        if extra and not extra.startswith(","):
            extra = "," + extra
        return [
            f"pty,raw,echo=0,ispeed={self.baud_rate},ospeed={self.baud_rate},link={self.input_file}{extra}",
            f"pty,raw,echo=0,ispeed={self.baud_rate},ospeed={self.baud_rate},link={self.output_file}{extra}",
        ]

    def set_flags(self, registry: FlagRegistry) -> None:
        """Register -i, -o, -pid, -socat, -baudrate and -opts on *registry*."""
        self.set_flags_prefix(registry, "")

    def set_flags_prefix(self, registry: FlagRegistry, prefix: str) -> None:
        """Register the flags as -<prefix>-i, -<prefix>-o, ... on *registry*.

        Current option values become the flag defaults.
        """
        np = f"{prefix}-" if prefix else ""
        for field, name, help_text, type_ in _FLAGS:
            registry.add_argument(
                f"-{np}{name}",
                dest=_dest(prefix, field),
                type=type_,
                default=getattr(self, field),
                help=help_text,
            )

    def from_flags(self, namespace: argparse.Namespace, prefix: str = "") -> Options:
        """Return a copy with the values parsed into *namespace* applied."""
        values = {}
        for field, _name, _help, _type in _FLAGS:
            dest = _dest(prefix, field)
            if hasattr(namespace, dest):
                values[field] = getattr(namespace, dest)
        return dataclasses.replace(self, **values)


def _dest(prefix: str, field: str) -> str:
    if not prefix:
        return field
    return f"{prefix.replace('-', '_')}_{field}"
