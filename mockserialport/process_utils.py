"""Process-management utilities for the socat bridge.

PID file handling and signal helpers shared by the mock and the CLI.
"""

from __future__ import annotations

import os
import re
import signal
import time
from pathlib import Path
from typing import Optional, Union

# Largest value a pid_t can hold; anything above cannot name a process.
PID_MAX = 2**31 - 1

_PID_RE = re.compile(r"[+-]?[0-9]+")


def pid_alive(pid: int) -> bool:
    """Check if a process exists via signal 0.

    A process we lack permission to signal still counts as alive.
    """
    try:
        return kill_process(pid, 0)
    except PermissionError:
        return True
    except OSError:
        return False


def read_pid_file(path: Union[str, Path]) -> Optional[int]:
    """Read a PID from *path*.

    The file must hold a decimal integer, optionally followed by newlines.
    Returns ``None`` if it is missing, unreadable, malformed (whitespace,
    underscores, other text) or outside 1..PID_MAX.
    """
    try:
        text = Path(path).read_text().rstrip("\n")
    except (OSError, UnicodeDecodeError):
        return None
    if not _PID_RE.fullmatch(text):
        return None
    pid = int(text)
    return pid if 0 < pid <= PID_MAX else None


def write_pid_file(path: Union[str, Path], pid: int) -> None:
    """Write *pid* in decimal with no trailing newline.

    The file is created with mode 0o666 (before umask). Errors propagate.
    """
    fd = os.open(str(path), os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o666)
    with os.fdopen(fd, "w") as f:
        f.write(str(pid))


def remove_file(path: Union[str, Path]) -> None:
    """Remove a file if it exists (ignoring errors)."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError:
        pass


def kill_process(pid: int, sig: int = signal.SIGKILL) -> bool:
    """Send *sig* to *pid*.

    Returns ``True`` if the signal was delivered and ``False`` if no such
    process exists. Any other ``OSError`` propagates.
    """
    try:
        os.kill(pid, sig)
    except ProcessLookupError:
        return False
    return True


def stop_process_graceful(pid: int, timeout_s: float = 5.0, poll_s: float = 0.1) -> bool:
    """Ask *pid* to exit with SIGTERM, escalating to SIGKILL after *timeout_s*.

    The PID is trusted: callers pass what their own PID file recorded.
    Returns ``True`` if the process is gone afterwards.
    """
    try:
        if not kill_process(pid, signal.SIGTERM):
            return True
    except OSError:
        return not pid_alive(pid)

    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if not pid_alive(pid):
            return True
        time.sleep(poll_s)

    try:
        kill_process(pid, signal.SIGKILL)
    except OSError:
        pass
    time.sleep(poll_s)
    return not pid_alive(pid)
