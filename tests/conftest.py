"""Shared pytest configuration for mockserialport tests."""

from __future__ import annotations

import pytest

from mockserialport.mocks import FakePort
from mockserialport.options import Options


@pytest.fixture
def fake_port():
    return FakePort()


@pytest.fixture
def options(tmp_path, fake_port):
    """Options with devices and PID file under tmp_path, opening fake_port."""
    return Options(
        input_file=str(tmp_path / "ttyIN"),
        output_file=str(tmp_path / "ttyOUT"),
        pid_file=str(tmp_path / "socat.pid"),
        baud_rate=57600,
        open=fake_port.open,
    )
