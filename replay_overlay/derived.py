"""Pure conversions from raw host values into display-ready values."""
from __future__ import annotations

import math
import re
from typing import Iterable, List, Tuple

FADER_MIN_DB = -96.0
FADER_MAX_DB = 6.0
FADER_RANGE_DB = FADER_MAX_DB - FADER_MIN_DB

GLOBAL_ACTION_NAMESPACE = "OBSBasic"

COLOR_GOOD = "#4ecca3"
COLOR_WARN = "#f0c040"
COLOR_BAD = "#e94560"
COLOR_NEUTRAL = "#eaeaea"

_KIND_VERSION_SUFFIX = re.compile(r"_v\d+$")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def db_to_fader(db: float) -> int:
    if db < FADER_MIN_DB:
        return 0
    if db > FADER_MAX_DB:
        return 100
    normalized = (db - FADER_MIN_DB) / FADER_RANGE_DB
    return _round_half_up(normalized ** (1.0 / 3.0) * 100.0)


def fader_to_db(fader: float) -> float:
    clamped = min(100.0, max(0.0, float(fader)))
    return (clamped / 100.0) ** 3 * FADER_RANGE_DB + FADER_MIN_DB


def mul_to_fader(mul: float) -> int:
    """Linear amplitude multiplier to the 0-100 perceptual fader position."""
    if mul <= 0.0:
        return 0
    return db_to_fader(20.0 * math.log10(mul))


def fader_to_mul(fader: float) -> float:
    if fader <= 0:
        return 0.0
    if fader >= 100:
        return 10.0 ** (FADER_MAX_DB / 20.0)
    return 10.0 ** (fader_to_db(fader) / 20.0)


def humanize_hotkey_name(raw: str) -> str:
    """``OBSBasic.StartStreaming`` -> ``Start Streaming``."""
    name = raw.rsplit(".", 1)[-1]
    pieces: List[str] = []
    for idx, char in enumerate(name):
        if idx > 0 and char.isupper() and not name[idx - 1].isupper():
            pieces.append(" ")
        pieces.append(char)
    spaced = "".join(pieces).replace("-", " ").replace("_", " ")
    collapsed = " ".join(spaced.split())
    return collapsed[:1].upper() + collapsed[1:]


def humanize_kind_name(kind: str) -> str:
    """``color_source_v3`` -> ``Color Source``."""
    base = _KIND_VERSION_SUFFIX.sub("", kind)
    words = [word for word in base.split("_") if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def hotkey_namespace(raw: str) -> str:
    if "." not in raw:
        return ""
    return raw.split(".", 1)[0]


def filter_hotkeys(raw_names: Iterable[str]) -> List[Tuple[str, str]]:
    """Return ``(raw, display)`` pairs for global actions, de-duplicated by display name."""
    seen: set[str] = set()
    entries: List[Tuple[str, str]] = []
    for raw in raw_names:
        if hotkey_namespace(raw) != GLOBAL_ACTION_NAMESPACE:
            continue
        display = humanize_hotkey_name(raw)
        if not display or display.replace(" ", "").isdigit():
            continue
        if display in seen:
            continue
        seen.add(display)
        entries.append((raw, display))
    return entries


def fps_color(fps: float) -> str:
    if fps > 55:
        return COLOR_GOOD
    if fps > 30:
        return COLOR_WARN
    return COLOR_BAD


def cpu_color(cpu_percent: float) -> str:
    if cpu_percent < 50:
        return COLOR_GOOD
    if cpu_percent < 80:
        return COLOR_WARN
    return COLOR_BAD


def disk_color(disk_gb: float) -> str:
    if disk_gb < 1.0:
        return COLOR_BAD
    if disk_gb < 5.0:
        return COLOR_WARN
    return COLOR_NEUTRAL


def skip_color(skipped_frames: int) -> str:
    return COLOR_BAD if skipped_frames != 0 else COLOR_NEUTRAL


def disk_megabytes_to_gigabytes(megabytes: float) -> float:
    return megabytes / 1024.0


def format_fps(fps: float) -> str:
    return f"{fps:.1f}"


def format_cpu(cpu_percent: float) -> str:
    return f"{cpu_percent:.1f}%"


def format_memory(megabytes: float) -> str:
    return f"{megabytes:.0f} MB"


def format_frame_time(milliseconds: float) -> str:
    return f"{milliseconds:.2f} ms"


def format_disk(disk_gb: float) -> str:
    return f"{disk_gb:.1f} GB"


def format_frames(skipped: int, total: int) -> str:
    return f"{skipped}/{total}"
