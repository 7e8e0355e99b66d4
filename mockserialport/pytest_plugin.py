"""mockserialport pytest plugin — auto-loaded via entry_points pytest11.

Registers:
  - Fixture: socat_mock (function-scoped factory)
  - Marker:  socat
"""

from __future__ import annotations

import shutil
from typing import Callable, Iterator, Optional

import pytest

from .mock import Mock
from .options import Options, ProcessFunc


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "socat: test needs the socat executable on PATH",
    )


@pytest.fixture
def socat_mock(tmp_path) -> Iterator[Callable[..., Mock]]:
    """Factory starting a Mock whose devices and PID file live in tmp_path.

    Usage:
        def test_modem(socat_mock):
            mock = socat_mock(process=answer_at_commands)
            port = serial.Serial(mock.options.input_file, 57600)

    Skips the test when socat is not installed. Every mock started through
    the factory is terminated at teardown.
    """
    if shutil.which("socat") is None:
        pytest.skip("socat not installed")

    started: list[Mock] = []

    def _start(process: Optional[ProcessFunc] = None, baud_rate: int = 57600, **kwargs) -> Mock:
        n = len(started)
        kwargs.setdefault("input_file", str(tmp_path / f"ttyIN{n}"))
        kwargs.setdefault("output_file", str(tmp_path / f"ttyOUT{n}"))
        kwargs.setdefault("pid_file", str(tmp_path / f"socat{n}.pid"))
        mock = Mock(Options(process=process, baud_rate=baud_rate, **kwargs))
        mock.__enter__()
        started.append(mock)
        return mock

    yield _start

    for mock in started:
        mock.terminate()
