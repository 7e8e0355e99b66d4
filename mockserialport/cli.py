"""mockserialport CLI: run a socat-backed serial port mock in the foreground.

Examples:
    mockserialport -i ttyIN -o ttyOUT -baudrate 57600 -v
    mockserialport -i ttyIN -o ttyOUT --echo
    mockserialport -pid socat.pid --stop --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import Any, Optional

from .mock import Mock
from .options import Options
from .process_utils import pid_alive, read_pid_file, remove_file, stop_process_graceful

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


def _print(obj: Any, *, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps(obj, indent=2, sort_keys=True))
    else:
        if isinstance(obj, str):
            print(obj)
        else:
            print(json.dumps(obj, indent=2, sort_keys=True))


def echo(mock: Mock, data: bytes) -> bytes:
    """Process function that writes every received byte straight back."""
    mock.write(data)
    return b""


def _build_parser(defaults: Options) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mockserialport",
        description="Serial port mock backed by a socat pseudo-terminal pair",
    )
    defaults.set_flags(parser)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log lifecycle events and traffic")
    parser.add_argument("--echo", action="store_true", help="Write every received byte back")
    parser.add_argument("--stop", action="store_true", help="Signal the PID recorded in the pid file as-is (SIGTERM, then SIGKILL) and exit")
    parser.add_argument("--json", action="store_true", help="Output machine-parseable JSON")
    return parser


def cmd_stop(*, pid_file: str, json_mode: bool) -> int:
    """Stop the socat recorded in *pid_file* and remove the file."""
    pid = read_pid_file(pid_file)
    running = pid is not None and pid_alive(pid)
    stopped = stop_process_graceful(pid) if running else False
    remove_file(pid_file)

    payload = {
        "schema_version": 1,
        "timestamp": _now_iso(),
        "pid": pid,
        "stopped": stopped,
        "pid_file": pid_file,
    }
    if json_mode:
        _print(payload, json_mode=True)
    elif pid is None:
        _print(f"No socat recorded in {pid_file}", json_mode=False)
    elif not running:
        _print(f"socat pid={pid} was not running", json_mode=False)
    elif stopped:
        _print(f"Stopped socat pid={pid}", json_mode=False)
    else:
        _print(f"Could not stop socat pid={pid}", json_mode=False)
    return 1 if running and not stopped else 0


def cmd_run(opts: Options) -> int:
    """Start socat and run the read loop until Ctrl+C or end of stream."""
    mock = Mock(opts)
    try:
        mock.start()
    except KeyboardInterrupt:
        logger.info("Quitting")
    except OSError as exc:
        logger.error("mock failed: %s", exc)
        return 1
    finally:
        mock.terminate()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the ``mockserialport`` CLI.

    Args:
        argv: Argument list to parse. Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 on success, 1 if socat or the read loop failed.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser(Options())
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    opts = Options(verbose=args.verbose, process=echo if args.echo else None).from_flags(args)

    if args.stop:
        return cmd_stop(pid_file=opts.pid_path, json_mode=args.json)

    if not opts.input_file or not opts.output_file:
        parser.error("-i and -o are required")

    return cmd_run(opts)


if __name__ == "__main__":
    sys.exit(main())
