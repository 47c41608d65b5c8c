from __future__ import annotations

import argparse
import os
import signal
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import QApplication

from replay_overlay import __version__
from replay_overlay.controller import OverlayController
from replay_overlay.debug_config import DEBUG_CONFIG_ENABLED, DEV_MODE_ENV_VAR, load_troubleshooting_config
from replay_overlay.logging_utils import configure_file_logging, get_logger
from replay_overlay.qt_driver import DEFAULT_TICK_MS, OverlayTickDriver

DEFAULT_PIPE_NAME = "ReplayOverlayPipe"
PIPE_ENV_VAR = "REPLAY_OVERLAY_PIPE"
PACKAGE_DIR = Path(__file__).resolve().parent

_LOGGER = get_logger("Launcher")


def resolve_pipe_name(args_pipe: Optional[str]) -> str:
    if args_pipe:
        return args_pipe
    env_override = os.getenv(PIPE_ENV_VAR)
    if env_override and env_override.strip():
        return env_override.strip()
    return DEFAULT_PIPE_NAME


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay overlay logic client")
    parser.add_argument("--pipe", help=f"Channel name the host listens on (default {DEFAULT_PIPE_NAME})")
    parser.add_argument(
        "--tick-ms",
        type=int,
        default=DEFAULT_TICK_MS,
        help="Tick cadence in milliseconds",
    )
    parser.add_argument("--debug-config", help="Path to debug.json (dev builds only)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    pipe_name = resolve_pipe_name(args.pipe)
    debug_config_path = Path(args.debug_config).expanduser() if args.debug_config else PACKAGE_DIR.parent / "debug.json"
    troubleshooting = load_troubleshooting_config(debug_config_path, enabled=DEBUG_CONFIG_ENABLED)
    retention = troubleshooting.overlay_logs_to_keep or 5
    try:
        handler = configure_file_logging(PACKAGE_DIR.parent, retention=retention)
    except OSError as exc:
        handler = None
        _LOGGER.warning("File logging unavailable: %s", exc)
    if not DEBUG_CONFIG_ENABLED:
        _LOGGER.debug(
            "debug.json ignored (release mode). Export %s=1 or use a -dev version to enable troubleshooting.",
            DEV_MODE_ENV_VAR,
        )

    _LOGGER.info("Starting replay overlay %s (pid=%s)", __version__, os.getpid())
    _LOGGER.debug("Channel=%s tick=%dms log_retention=%d", pipe_name, args.tick_ms, retention)

    app = QApplication(sys.argv)
    controller = OverlayController(pipe_name, log_envelopes=troubleshooting.log_inbound_envelopes)
    driver = OverlayTickDriver(controller, tick_ms=args.tick_ms)
    driver.finished.connect(app.quit)
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    driver.start()
    exit_code = app.exec()
    driver.stop()
    _LOGGER.info("Replay overlay exiting with code %s", exit_code)
    if handler is not None:
        handler.close()
    return int(exit_code)


if __name__ == "__main__":
    raise SystemExit(main())
