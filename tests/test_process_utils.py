"""Tests for mockserialport/process_utils.py — PID files and signals."""

from __future__ import annotations

import os
import signal

import pytest

import mockserialport.process_utils as process_utils
from mockserialport.process_utils import (
    PID_MAX,
    kill_process,
    pid_alive,
    read_pid_file,
    remove_file,
    stop_process_graceful,
    write_pid_file,
)


class TestReadPidFile:
    def test_missing_file(self, tmp_path):
        assert read_pid_file(tmp_path / "nope.pid") is None

    def test_valid_pid(self, tmp_path):
        p = tmp_path / "socat.pid"
        p.write_text("1234")
        assert read_pid_file(p) == 1234

    def test_trailing_newline_tolerated(self, tmp_path):
        p = tmp_path / "socat.pid"
        p.write_text("1234\n")
        assert read_pid_file(p) == 1234

    def test_explicit_plus_sign(self, tmp_path):
        p = tmp_path / "socat.pid"
        p.write_text("+77")
        assert read_pid_file(p) == 77

    def test_largest_pid_accepted(self, tmp_path):
        p = tmp_path / "socat.pid"
        p.write_text(str(PID_MAX))
        assert read_pid_file(p) == PID_MAX

    @pytest.mark.parametrize(
        "content",
        ["", "not_a_number", "0", "-5", "12ab", "1_0", " 12", "12 ", "\t12", "2147483648", "99999999999999999999"],
    )
    def test_invalid_content(self, tmp_path, content):
        p = tmp_path / "socat.pid"
        p.write_text(content)
        assert read_pid_file(p) is None


class TestWritePidFile:
    def test_decimal_without_newline(self, tmp_path):
        p = tmp_path / "socat.pid"
        write_pid_file(p, 4321)
        assert p.read_text() == "4321"

    def test_overwrites_previous(self, tmp_path):
        p = tmp_path / "socat.pid"
        p.write_text("999999")
        write_pid_file(p, 7)
        assert p.read_text() == "7"

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            write_pid_file(tmp_path / "missing" / "socat.pid", 1)


class TestRemoveFile:
    def test_removes_file(self, tmp_path):
        p = tmp_path / "socat.pid"
        p.write_text("1")
        remove_file(p)
        assert not p.exists()

    def test_missing_file_is_fine(self, tmp_path):
        remove_file(tmp_path / "socat.pid")


class TestKillProcess:
    def test_delivered(self, monkeypatch):
        calls = []
        monkeypatch.setattr(os, "kill", lambda pid, sig: calls.append((pid, sig)))
        assert kill_process(42) is True
        assert calls == [(42, signal.SIGKILL)]

    def test_no_such_process(self, monkeypatch):
        def fake_kill(pid, sig):
            raise ProcessLookupError(3, "No such process")

        monkeypatch.setattr(os, "kill", fake_kill)
        assert kill_process(42) is False

    def test_other_errors_propagate(self, monkeypatch):
        def fake_kill(pid, sig):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr(os, "kill", fake_kill)
        with pytest.raises(PermissionError):
            kill_process(1)


class TestPidAlive:
    def test_current_process_is_alive(self):
        assert pid_alive(os.getpid()) is True

    def test_nonexistent_pid(self):
        assert pid_alive(999999999) is False

    def test_permission_denied_counts_as_alive(self, monkeypatch):
        def fake_kill(pid, sig):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr(os, "kill", fake_kill)
        assert pid_alive(1) is True


class FakeProcessTable:
    """Stand-in for os.kill that tracks one process and which signals end it."""

    def __init__(self, pid, dies_on=(signal.SIGTERM,)):
        self.pid = pid
        self.alive = True
        self.dies_on = dies_on
        self.signals = []

    def kill(self, pid, sig):
        if pid != self.pid or not self.alive:
            raise ProcessLookupError(3, "No such process")
        if sig != 0:
            self.signals.append(sig)
            if sig in self.dies_on:
                self.alive = False


@pytest.fixture
def clock(monkeypatch):
    """Fake monotonic clock advanced by time.sleep."""
    now = [0.0]
    monkeypatch.setattr(process_utils.time, "monotonic", lambda: now[0])

    def _sleep(s):
        now[0] += s

    monkeypatch.setattr(process_utils.time, "sleep", _sleep)
    return now


class TestStopProcessGraceful:
    def test_sigterm_is_enough(self, monkeypatch, clock):
        table = FakeProcessTable(4242)
        monkeypatch.setattr(os, "kill", table.kill)

        assert stop_process_graceful(4242) is True
        assert table.signals == [signal.SIGTERM]

    def test_escalates_to_sigkill_after_timeout(self, monkeypatch, clock):
        table = FakeProcessTable(4242, dies_on=(signal.SIGKILL,))
        monkeypatch.setattr(os, "kill", table.kill)

        assert stop_process_graceful(4242, timeout_s=1.0) is True
        assert table.signals == [signal.SIGTERM, signal.SIGKILL]
        assert clock[0] >= 1.0

    def test_unkillable_process_reports_failure(self, monkeypatch, clock):
        table = FakeProcessTable(4242, dies_on=())
        monkeypatch.setattr(os, "kill", table.kill)

        assert stop_process_graceful(4242, timeout_s=0.5) is False
        assert table.signals == [signal.SIGTERM, signal.SIGKILL]

    def test_already_gone(self, monkeypatch, clock):
        table = FakeProcessTable(4242)
        table.alive = False
        monkeypatch.setattr(os, "kill", table.kill)

        assert stop_process_graceful(4242) is True
        assert table.signals == []
        assert clock[0] == 0.0

    def test_permission_denied_reports_failure(self, monkeypatch, clock):
        def fake_kill(pid, sig):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr(os, "kill", fake_kill)
        assert stop_process_graceful(1) is False
