"""Debug configuration loader for overlay troubleshooting."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from replay_overlay import __version__ as REPLAY_OVERLAY_VERSION

DEV_MODE_ENV_VAR = "REPLAY_OVERLAY_DEV_MODE"
CLIENT_LOG_RETENTION_MIN = 1
CLIENT_LOG_RETENTION_MAX = 20


def is_dev_build(version: Optional[str] = None) -> bool:
    value = os.getenv(DEV_MODE_ENV_VAR)
    if value is not None:
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
    label = (version or "").strip().lower()
    return label.endswith("-dev") or ".dev" in label


DEBUG_CONFIG_ENABLED = is_dev_build(REPLAY_OVERLAY_VERSION)


@dataclass(frozen=True)
class TroubleshootingConfig:
    overlay_logs_to_keep: Optional[int] = None
    log_inbound_envelopes: bool = False


def _coerce_log_retention(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return None
    if numeric <= 0:
        return CLIENT_LOG_RETENTION_MIN
    if numeric > CLIENT_LOG_RETENTION_MAX:
        return CLIENT_LOG_RETENTION_MAX
    return numeric


def load_troubleshooting_config(path: Path, *, enabled: bool) -> TroubleshootingConfig:
    """Read user-facing troubleshooting flags (log retention, envelope tracing) from debug.json."""

    if not enabled:
        return TroubleshootingConfig()
    try:
        raw_text = path.read_text(encoding="utf-8")
        data = json.loads(raw_text)
    except (FileNotFoundError, OSError, json.JSONDecodeError):
        data = {}
    overlay_logs_to_keep = None
    log_inbound = False
    if isinstance(data, dict):
        overlay_logs_to_keep = _coerce_log_retention(data.get("overlay_logs_to_keep"))
        log_inbound = bool(data.get("log_inbound_envelopes", False))
    return TroubleshootingConfig(overlay_logs_to_keep=overlay_logs_to_keep, log_inbound_envelopes=log_inbound)
