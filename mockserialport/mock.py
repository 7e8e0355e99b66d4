"""Serial port mock backed by a socat pseudo-terminal pair.

socat links two pseudo-terminals: the program under test opens the input
device, the mock opens the output device. Bytes arriving on the output
device are buffered and handed to ``Options.process``, which may reply via
``Mock.write()`` and returns whatever it did not consume.

Usage:
    def process(mock, data):
        if data == b"hello":
            mock.write(b"world")
            return b""
        return data

    with Mock(Options(input_file="ttyIN", output_file="ttyOUT", process=process)):
        ...  # open ttyIN and talk to it
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from typing import Optional

from .implementations import open_serial_port
from .interfaces import Port
from .options import Options
from .process_utils import kill_process, read_pid_file, remove_file, write_pid_file

logger = logging.getLogger(__name__)

READ_SIZE = 100
DEVICE_POLL_ATTEMPTS = 10
DEVICE_POLL_INTERVAL_S = 0.1
PORT_OPEN_TIMEOUT_S = 1.0


class PortNotOpenError(RuntimeError):
    """Raised when writing before the output device has been opened."""


def _hex(data: bytes) -> str:
    return data.hex(" ").upper()


class Mock:
    """Runs socat and answers traffic on its output device.

    Not thread-safe: callers serialize start/terminate/read on one instance.
    ``read()`` blocks, so it normally runs on its own thread
    (``read_in_background()``).
    """

    def __init__(self, options: Options):
        self.options = options
        self.port: Optional[Port] = None
        self.read_error: Optional[BaseException] = None
        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None
        self._port_ready = threading.Event()

    def _log(self, msg: str, *args) -> None:
        if self.options.verbose:
            logger.info(msg, *args)

    def _log_warning(self, msg: str, *args) -> None:
        if self.options.verbose:
            logger.warning(msg, *args)

    def _log_error(self, msg: str, *args) -> None:
        if self.options.verbose:
            logger.error(msg, *args)

    @property
    def process(self) -> Optional[subprocess.Popen]:
        """The running socat process, if started."""
        return self._process

    # =========================================================================
    # Process supervision
    # =========================================================================

    def start(self) -> None:
        """Start socat, wait for the output device, then run the read loop.

        Blocks until the loop ends; the loop's terminal error propagates.
        """
        self.start_socat()
        self.wait_for_device()
        self.read()

    def start_socat(self) -> subprocess.Popen:
        """Kill the socat recorded in the PID file (if any), start a new one
        and record its PID.

        Does not wait for the devices to appear.
        """
        opts = self.options
        remove_file(opts.output_file)

        pid = read_pid_file(opts.pid_path)
        if pid is not None:
            try:
                if kill_process(pid, signal.SIGKILL):
                    self._log("successfully killed existing socat pid=%d", pid)
            except (OSError, OverflowError) as exc:
                self._log_warning("error killing existing socat: %s", exc)

        cmd = [opts.resolve_socat(), *opts.socat_command_args()]
        self._log("running %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=None if opts.verbose else subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            self._log_error("error: %s", exc)
            raise
        self._process = proc
        self._log("started socat pid=%d", proc.pid)

        write_pid_file(opts.pid_path, proc.pid)
        return proc

    def wait_for_device(self) -> None:
        """Poll until the output device exists.

        Raises the last ``OSError`` from ``os.stat`` if it never appears.
        """
        last_error: Optional[OSError] = None
        for _ in range(DEVICE_POLL_ATTEMPTS):
            try:
                os.stat(self.options.output_file)
                return
            except OSError as exc:
                last_error = exc
                time.sleep(DEVICE_POLL_INTERVAL_S)
        assert last_error is not None
        raise last_error

    def terminate(self) -> None:
        """Send SIGTERM to socat and remove the PID file.

        The PID file is removed even when no socat was started or signalling
        fails.
        """
        try:
            if self._process is not None:
                self._process.send_signal(signal.SIGTERM)
                self._log("terminated socat pid=%d", self._process.pid)
                self._process = None
            self.port = None
        finally:
            remove_file(self.options.pid_path)

    # =========================================================================
    # Read/process loop
    # =========================================================================

    def read(self) -> None:
        """Open the output device and process incoming bytes.

        Returns on a zero-length read. Open and read errors propagate.
        """
        opts = self.options
        opener = opts.open or open_serial_port
        port = opener(opts.output_file, opts.baud_rate)
        self.port = port
        self._port_ready.set()
        self._log("reading data from %s", opts.output_file)

        data = b""
        while True:
            try:
                chunk = port.read(READ_SIZE)
            except Exception as exc:
                self._log_error("error: %s", exc)
                raise
            if not chunk:
                break
            if opts.process is None:
                self._log("<= received %s", _hex(chunk))
                continue
            data += chunk
            data = opts.process(self, data) or b""

    def read_in_background(self) -> threading.Thread:
        """Run ``read()`` on a daemon thread.

        The loop's terminal exception, if any, is stored on ``read_error``.
        """
        self.read_error = None
        self._port_ready.clear()
        self._reader = threading.Thread(
            target=self._read_worker,
            daemon=True,
            name="mockserialport-reader",
        )
        self._reader.start()
        return self._reader

    def _read_worker(self) -> None:
        try:
            self.read()
        except Exception as exc:
            self.read_error = exc
        finally:
            self._port_ready.set()

    def wait_for_port(self, timeout: float = PORT_OPEN_TIMEOUT_S) -> bool:
        """Wait until the read loop has opened the output device (or failed).

        Returns ``True`` if the port is open.
        """
        self._port_ready.wait(timeout)
        return self.port is not None

    def write(self, data: bytes) -> None:
        """Write *data* to the output device.

        Raises:
            PortNotOpenError: ``read()`` has not opened the device yet.
        """
        if self.port is None:
            raise PortNotOpenError("write before port was opened")
        try:
            self.port.write(data)
        except Exception as exc:
            self._log_error("error: %s", exc)
            raise
        self._log("=> sent     %s", _hex(data))

    # =========================================================================
    # Context manager
    # =========================================================================

    def __enter__(self) -> Mock:
        self.start_socat()
        try:
            self.wait_for_device()
            self.read_in_background()
            if not self.wait_for_port() and self.read_error is not None:
                raise self.read_error
        except BaseException:
            self.terminate()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.terminate()
