"""UI-facing projection of the host state with per-field dirty markers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from replay_overlay.derived import COLOR_GOOD, COLOR_NEUTRAL

TAB_MAIN = "main"
TAB_SCENES = "scenes"
TAB_SOURCES = "sources"
TAB_AUDIO = "audio"
TAB_FILTERS = "filters"
TAB_TRANSITIONS = "transitions"
TAB_STATS = "stats"
TAB_SETTINGS = "settings"
TABS: Tuple[str, ...] = (
    TAB_MAIN,
    TAB_SCENES,
    TAB_SOURCES,
    TAB_AUDIO,
    TAB_FILTERS,
    TAB_TRANSITIONS,
    TAB_STATS,
    TAB_SETTINGS,
)

REC_POSITIONS: Tuple[str, ...] = (
    "top-left",
    "top-center",
    "top-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
)


@dataclass(frozen=True)
class SourceEntry:
    id: int
    name: str
    visible: bool
    locked: bool
    kind: str
    kind_label: str


@dataclass(frozen=True)
class AudioEntry:
    name: str
    volume_mul: float
    muted: bool
    fader: int


@dataclass(frozen=True)
class FilterEntry:
    name: str
    kind: str
    enabled: bool
    kind_label: str


@dataclass(frozen=True)
class HotkeyEntry:
    raw_name: str
    display_name: str


@dataclass(frozen=True)
class KindEntry:
    kind: str
    label: str


_DEFAULTS: Dict[str, Any] = {
    # UI-local
    "active_tab": TAB_MAIN,
    "selected_source_id": -1,
    "selected_source_name": "",
    "expanded_audio": "",
    "form_mode": "",
    "form_name": "",
    "form_kind": "",
    "form_target": "",
    "filter_selected_source": "",
    "filter_selected_idx": -1,
    "hotkey_filter": "",
    # Host projection
    "connected": False,
    "connection_text": "Disconnected",
    "current_scene": "",
    "is_streaming": False,
    "is_recording": False,
    "is_recording_paused": False,
    "is_buffer_active": False,
    "is_virtual_cam_active": False,
    "has_active_capture": None,
    "current_profile": "",
    "current_collection": "",
    "current_transition": "",
    "transition_dur_ms": 300,
    "studio_mode": False,
    "preview_scene": "",
    "toggle_hotkey": "",
    "save_hotkey": "",
    "overlay_visible": False,
    "topmost": False,
    "preview_image": "",
    "preview_serial": 0,
    # Lists
    "scenes": (),
    "sources": (),
    "audio_items": (),
    "profiles": (),
    "collections": (),
    "transitions_list": (),
    "filters": (),
    "filter_sources": (),
    "input_kinds": (),
    "filter_kinds": (),
    "hotkeys": (),
    # Stats
    "stat_fps": "",
    "stat_cpu": "",
    "stat_memory": "",
    "stat_frame_time": "",
    "stat_disk": "",
    "stat_render_skip": "",
    "stat_output_skip": "",
    "fps_color": COLOR_NEUTRAL,
    "cpu_color": COLOR_NEUTRAL,
    "disk_color": COLOR_NEUTRAL,
    "render_skip_color": COLOR_NEUTRAL,
    "output_skip_color": COLOR_NEUTRAL,
    # Expanded audio channel
    "has_advanced": False,
    "adv_sync_ms": 0,
    "adv_balance": 0.5,
    "adv_monitor_type": 0,
    "adv_tracks": (False,) * 6,
    # Notification and REC indicator
    "notif_active": False,
    "notif_text": "",
    "notif_color": COLOR_GOOD,
    "notif_alpha": 0.0,
    "rec_active": False,
    "rec_dot_visible": True,
    "rec_position": REC_POSITIONS[0],
    # Settings form
    "settings_show_notif": True,
    "settings_notif_msg": "REPLAY SAVED",
    "settings_notif_dur": 3.0,
    "settings_show_rec": True,
    "settings_rec_pos_idx": 0,
}

FIELD_NAMES: FrozenSet[str] = frozenset(_DEFAULTS)


class ViewModel:
    """Named fields; a change in value marks the field dirty until the renderer consumes it."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = dict(_DEFAULTS)
        self._dirty: set[str] = set()

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def get(self, name: str, default: Optional[Any] = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> bool:
        if name not in self._values:
            raise KeyError(f"Unknown view-model field {name!r}")
        if isinstance(value, list):
            value = tuple(value)
        current = self._values[name]
        if type(current) is type(value) and current == value:
            return False
        if current is None and value is None:
            return False
        self._values[name] = value
        self._dirty.add(name)
        return True

    def mark_dirty(self, name: str) -> None:
        if name not in self._values:
            raise KeyError(f"Unknown view-model field {name!r}")
        self._dirty.add(name)

    def is_dirty(self, name: str) -> bool:
        return name in self._dirty

    def dirty_fields(self) -> FrozenSet[str]:
        return frozenset(self._dirty)

    def consume_dirty(self) -> List[str]:
        """Hand the dirty set to the renderer and clear it."""
        names = sorted(self._dirty)
        self._dirty.clear()
        return names

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)
