"""End-to-end tests against a real socat pseudo-terminal pair.

Skipped when socat is not installed (see the socat_mock fixture).
"""

from __future__ import annotations

from pathlib import Path

import pytest
import serial

from mockserialport.mock import Mock
from mockserialport.process_utils import pid_alive, read_pid_file

pytestmark = pytest.mark.socat

BAUD = 57600
CASES = [(b"hello", b"world"), (b"foo", b"bar")]


def answer(mock: Mock, data: bytes) -> bytes:
    if data == b"hello":
        mock.write(b"world")
        return b""
    if data == b"foo":
        mock.write(b"bar")
        return b""
    return data


def _exchange(port: serial.Serial, send: bytes, expected: bytes) -> bytes:
    port.write(send)
    return port.read(len(expected))


def test_replies_to_tokens(socat_mock):
    mock = socat_mock(process=answer, baud_rate=BAUD)
    port = serial.Serial(mock.options.input_file, BAUD, timeout=1)
    try:
        for send, expected in CASES:
            assert _exchange(port, send, expected) == expected
    finally:
        port.close()


def test_pid_file_tracks_socat(socat_mock):
    mock = socat_mock(baud_rate=BAUD)
    pid = read_pid_file(mock.options.pid_path)
    assert pid == mock.process.pid
    assert pid_alive(pid)
    assert Path(mock.options.input_file).exists()
    assert Path(mock.options.output_file).exists()


def test_restart_replaces_stale_socat(socat_mock, tmp_path):
    pid_file = str(tmp_path / "shared.pid")
    first = socat_mock(baud_rate=BAUD, pid_file=pid_file)
    old = first.process

    second = socat_mock(process=answer, baud_rate=BAUD, pid_file=pid_file,
                        input_file=first.options.input_file,
                        output_file=first.options.output_file)

    assert old.wait(timeout=2) is not None
    assert read_pid_file(pid_file) == second.process.pid

    port = serial.Serial(second.options.input_file, BAUD, timeout=1)
    try:
        assert _exchange(port, b"hello", b"world") == b"world"
    finally:
        port.close()


def test_terminate_stops_socat_and_removes_pid_file(socat_mock):
    mock = socat_mock(baud_rate=BAUD)
    proc = mock.process
    mock.terminate()
    assert proc.wait(timeout=2) is not None
    assert not Path(mock.options.pid_path).exists()
