from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from replay_overlay.debug_config import DEBUG_CONFIG_ENABLED

ROOT_LOGGER_NAME = "ReplayOverlay"
LOG_FILENAME = "overlay.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _ReleaseLogLevelFilter(logging.Filter):
    """Promote debug logs to INFO in release builds so diagnostics stay visible."""

    def __init__(self, release_mode: bool) -> None:
        super().__init__()
        self._release_mode = release_mode

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - logging shim
        if self._release_mode and record.levelno == logging.DEBUG:
            record.levelno = logging.INFO
            record.levelname = "INFO"
        return True


def get_logger(suffix: str) -> logging.Logger:
    """Return a module logger nested under the overlay root logger."""
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{suffix}")
    logger.setLevel(resolve_log_level(DEBUG_CONFIG_ENABLED))
    logger.propagate = True
    if not any(isinstance(existing, _ReleaseLogLevelFilter) for existing in logger.filters):
        logger.addFilter(_ReleaseLogLevelFilter(release_mode=not DEBUG_CONFIG_ENABLED))
    return logger


def resolve_logs_dir(base_path: Path, log_dir_name: str = "ReplayOverlay") -> Path:
    """
    Resolve the directory to store overlay logs.

    Strategy:
    - Use REPLAY_OVERLAY_LOG_DIR if set.
    - Prefer `%LOCALAPPDATA%/<log_dir_name>` on Windows hosts.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    The install directory (`base_path`) is only used to anchor relative overrides.
    """
    candidates = []

    env_override = os.environ.get("REPLAY_OVERLAY_LOG_DIR")
    if env_override:
        try:
            override = Path(env_override).expanduser()
            if not override.is_absolute():
                override = base_path.resolve() / override
            candidates.append(override)
        except Exception:
            pass

    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        candidates.append(Path(local_app_data))

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home)
    candidates.append(cache_home)
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except Exception:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    """Return a log level consistent with dev-mode debug behavior."""
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_file_logging(base_path: Path, *, retention: int = 5) -> logging.Handler:
    """Attach a rotating overlay.log handler to the overlay root logger."""
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(resolve_log_level(DEBUG_CONFIG_ENABLED))
    handler = build_rotating_file_handler(
        resolve_logs_dir(base_path),
        LOG_FILENAME,
        retention=retention,
        formatter=logging.Formatter(LOG_FORMAT),
    )
    root_logger.addHandler(handler)
    return handler
