"""Canonical mirror of the host's state, mutated only by inbound dispatch."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

TRACK_COUNT = 6

RESOURCE_STATS = "stats"
RESOURCE_HOTKEYS = "hotkeys"
RESOURCE_FILTERS = "filters"
RESOURCE_AUDIO_ADVANCED = "audio_advanced"
RESOURCE_INPUT_KINDS = "input_kinds"
RESOURCE_FILTER_KINDS = "filter_kinds"
RESOURCE_KINDS: Tuple[str, ...] = (
    RESOURCE_STATS,
    RESOURCE_HOTKEYS,
    RESOURCE_FILTERS,
    RESOURCE_AUDIO_ADVANCED,
    RESOURCE_INPUT_KINDS,
    RESOURCE_FILTER_KINDS,
)


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def _get_str(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _get_bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _get_int(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key)
    return int(value) if _is_number(value) else default


def _get_float(data: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = data.get(key)
    return float(value) if _is_number(value) else default


@dataclass(frozen=True)
class SceneItem:
    id: int
    name: str
    visible: bool = False
    locked: bool = False
    kind: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "SceneItem":
        return cls(
            id=_get_int(data, "id"),
            name=_get_str(data, "name"),
            visible=_get_bool(data, "isVisible"),
            locked=_get_bool(data, "isLocked"),
            kind=_get_str(data, "sourceKind"),
        )


@dataclass(frozen=True)
class AudioChannel:
    name: str
    volume_mul: float = 1.0
    muted: bool = False

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "AudioChannel":
        return cls(
            name=_get_str(data, "name"),
            volume_mul=max(0.0, _get_float(data, "volumeMul", 1.0)),
            muted=_get_bool(data, "isMuted"),
        )


@dataclass(frozen=True)
class FilterInfo:
    name: str
    kind: str = ""
    enabled: bool = False
    index: int = 0

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "FilterInfo":
        return cls(
            name=_get_str(data, "name"),
            kind=_get_str(data, "kind"),
            enabled=_get_bool(data, "enabled"),
            index=_get_int(data, "index"),
        )


def normalize_tracks(raw: Any) -> Tuple[bool, ...]:
    tracks = [False] * TRACK_COUNT
    if isinstance(raw, (list, tuple)):
        for idx, value in enumerate(raw[:TRACK_COUNT]):
            tracks[idx] = bool(value) if isinstance(value, bool) else False
    return tuple(tracks)


@dataclass(frozen=True)
class AudioAdvanced:
    name: str
    sync_offset_ms: int = 0
    balance: float = 0.5
    monitor_type: int = 0
    tracks: Tuple[bool, ...] = (False,) * TRACK_COUNT

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "AudioAdvanced":
        return cls(
            name=_get_str(data, "name"),
            sync_offset_ms=_get_int(data, "syncOffsetMs"),
            balance=min(1.0, max(0.0, _get_float(data, "balance", 0.5))),
            monitor_type=_get_int(data, "monitorType"),
            tracks=normalize_tracks(data.get("tracks")),
        )


@dataclass
class StatsSnapshot:
    cpu_usage: float = 0.0
    memory_usage: float = 0.0
    available_disk_space: float = 0.0
    active_fps: float = 0.0
    average_frame_render_time: float = 0.0
    render_skipped_frames: int = 0
    render_total_frames: int = 0
    output_skipped_frames: int = 0
    output_total_frames: int = 0

    _FLOAT_KEYS = {
        "cpuUsage": "cpu_usage",
        "memoryUsage": "memory_usage",
        "availableDiskSpace": "available_disk_space",
        "activeFps": "active_fps",
        "averageFrameRenderTime": "average_frame_render_time",
    }
    _INT_KEYS = {
        "renderSkippedFrames": "render_skipped_frames",
        "renderTotalFrames": "render_total_frames",
        "outputSkippedFrames": "output_skipped_frames",
        "outputTotalFrames": "output_total_frames",
    }

    def merge(self, data: Mapping[str, Any]) -> None:
        for key, attr in self._FLOAT_KEYS.items():
            if _is_number(data.get(key)):
                setattr(self, attr, float(data[key]))
        for key, attr in self._INT_KEYS.items():
            if _is_number(data.get(key)):
                setattr(self, attr, int(data[key]))


@dataclass
class OverlayConfig:
    toggle_key: str = "F10"
    save_key: str = "F9"
    rec_indicator_position: str = "top-left"
    show_rec_indicator: bool = True
    show_notifications: bool = True
    notif_duration_sec: float = 3.0
    notif_message: str = "REPLAY SAVED"

    def merge(self, data: Mapping[str, Any]) -> None:
        if isinstance(data.get("toggleHotkey"), str):
            self.toggle_key = data["toggleHotkey"]
        if isinstance(data.get("saveHotkey"), str):
            self.save_key = data["saveHotkey"]
        if isinstance(data.get("recIndicatorPosition"), str):
            self.rec_indicator_position = data["recIndicatorPosition"]
        if isinstance(data.get("showRecIndicator"), bool):
            self.show_rec_indicator = data["showRecIndicator"]
        if isinstance(data.get("showNotifications"), bool):
            self.show_notifications = data["showNotifications"]
        if _is_number(data.get("notificationDuration")):
            self.notif_duration_sec = max(0.0, float(data["notificationDuration"]))
        if isinstance(data.get("notificationMessage"), str):
            self.notif_message = data["notificationMessage"]


@dataclass
class PendingRequest:
    """In-flight marker for one on-demand resource."""

    in_flight: bool = False
    last_request: Optional[float] = None

    def mark_sent(self, now: float) -> None:
        self.in_flight = True
        self.last_request = now

    def elapsed(self, now: float) -> float:
        if self.last_request is None:
            return float("inf")
        return now - self.last_request


def _fresh_pending() -> Dict[str, PendingRequest]:
    return {kind: PendingRequest() for kind in RESOURCE_KINDS}


@dataclass
class HostState:
    """Snapshot of the host; inbound dispatch is its only writer."""

    connected: bool = False
    current_scene: str = ""
    scenes: List[str] = field(default_factory=list)
    sources: List[SceneItem] = field(default_factory=list)
    audio: List[AudioChannel] = field(default_factory=list)
    is_streaming: bool = False
    is_recording: bool = False
    is_recording_paused: bool = False
    is_buffer_active: bool = False
    is_virtual_cam_active: bool = False
    has_active_capture: Optional[bool] = None

    current_transition: str = ""
    transition_duration_ms: int = 300
    transitions: List[str] = field(default_factory=list)
    studio_mode_enabled: bool = False
    preview_scene: str = ""

    current_profile: str = ""
    current_scene_collection: str = ""
    profiles: List[str] = field(default_factory=list)
    scene_collections: List[str] = field(default_factory=list)

    audio_advanced: List[AudioAdvanced] = field(default_factory=list)
    input_kinds: List[str] = field(default_factory=list)
    filters: List[FilterInfo] = field(default_factory=list)
    filters_source: str = ""
    filter_kinds: List[str] = field(default_factory=list)
    stats: StatsSnapshot = field(default_factory=StatsSnapshot)
    hotkeys: List[str] = field(default_factory=list)
    config: OverlayConfig = field(default_factory=OverlayConfig)

    overlay_visible: bool = False
    topmost: bool = False
    preview_base64: str = ""
    preview_serial: int = 0

    pending: Dict[str, PendingRequest] = field(default_factory=_fresh_pending)

    # Inbound updates ------------------------------------------------------

    def update_from_state(self, data: Any) -> None:
        if not isinstance(data, Mapping):
            return
        for key, attr in (
            ("connected", "connected"),
            ("isStreaming", "is_streaming"),
            ("isRecording", "is_recording"),
            ("isRecordingPaused", "is_recording_paused"),
            ("isBufferActive", "is_buffer_active"),
            ("isVirtualCamActive", "is_virtual_cam_active"),
            ("studioModeEnabled", "studio_mode_enabled"),
        ):
            if isinstance(data.get(key), bool):
                setattr(self, attr, data[key])
        for key, attr in (
            ("currentScene", "current_scene"),
            ("currentTransition", "current_transition"),
            ("previewScene", "preview_scene"),
            ("currentProfile", "current_profile"),
            ("currentSceneCollection", "current_scene_collection"),
        ):
            if isinstance(data.get(key), str):
                setattr(self, attr, data[key])

        if "hasActiveCapture" in data:
            capture = data["hasActiveCapture"]
            if capture is None:
                self.has_active_capture = None
            elif isinstance(capture, bool):
                self.has_active_capture = capture

        if _is_number(data.get("transitionDuration")):
            self.transition_duration_ms = max(0, int(data["transitionDuration"]))

        scenes = data.get("scenes")
        if isinstance(scenes, list):
            names = [self._scene_name(item) for item in scenes]
            self.scenes = [name for name in names if name is not None]
        sources = data.get("sources")
        if isinstance(sources, list):
            self.sources = [SceneItem.from_json(item) for item in sources if isinstance(item, Mapping)]
        audio = data.get("audio")
        if isinstance(audio, list):
            self.audio = [AudioChannel.from_json(item) for item in audio if isinstance(item, Mapping)]
        for key, attr in (
            ("transitions", "transitions"),
            ("profiles", "profiles"),
            ("sceneCollections", "scene_collections"),
        ):
            values = _string_list(data.get(key))
            if values is not None:
                setattr(self, attr, values)

    @staticmethod
    def _scene_name(item: Any) -> Optional[str]:
        if isinstance(item, str):
            return item
        if isinstance(item, Mapping) and isinstance(item.get("name"), str):
            return item["name"]
        return None

    def update_from_config(self, data: Any) -> None:
        if isinstance(data, Mapping):
            self.config.merge(data)

    def update_audio_advanced(self, data: Any) -> None:
        self.pending[RESOURCE_AUDIO_ADVANCED].in_flight = False
        if isinstance(data, list):
            self.audio_advanced = [AudioAdvanced.from_json(item) for item in data if isinstance(item, Mapping)]

    def update_input_kinds(self, data: Any) -> None:
        self.pending[RESOURCE_INPUT_KINDS].in_flight = False
        values = _string_list(data)
        if values is not None:
            self.input_kinds = values

    def update_filters(self, data: Any) -> None:
        self.pending[RESOURCE_FILTERS].in_flight = False
        if isinstance(data, list):
            self.filters = [FilterInfo.from_json(item) for item in data if isinstance(item, Mapping)]

    def update_filter_kinds(self, data: Any) -> None:
        self.pending[RESOURCE_FILTER_KINDS].in_flight = False
        values = _string_list(data)
        if values is not None:
            self.filter_kinds = values

    def update_stats(self, data: Any) -> None:
        self.pending[RESOURCE_STATS].in_flight = False
        if isinstance(data, Mapping):
            self.stats.merge(data)

    def update_hotkeys(self, data: Any) -> None:
        self.pending[RESOURCE_HOTKEYS].in_flight = False
        values = _string_list(data)
        if values is not None:
            self.hotkeys = values

    def update_preview(self, encoded: Any) -> bool:
        if not isinstance(encoded, str) or not encoded:
            return False
        self.preview_base64 = encoded
        self.preview_serial += 1
        return True

    def reset_session(self) -> None:
        """Forget request bookkeeping; the host may have restarted and lost it."""
        self.pending = _fresh_pending()
        self.filters_source = ""
        self.hotkeys = []
        self.input_kinds = []
        self.filter_kinds = []
        self.preview_base64 = ""
        self.preview_serial = 0

    # Accessors ------------------------------------------------------------

    def request(self, kind: str) -> PendingRequest:
        return self.pending[kind]

    def find_source(self, item_id: int) -> Optional[SceneItem]:
        for item in self.sources:
            if item.id == item_id:
                return item
        return None

    def source_index(self, item_id: int) -> int:
        for idx, item in enumerate(self.sources):
            if item.id == item_id:
                return idx
        return -1

    def find_audio_advanced(self, name: str) -> Optional[AudioAdvanced]:
        for item in self.audio_advanced:
            if item.name == name:
                return item
        return None

    def find_audio(self, name: str) -> Optional[AudioChannel]:
        for item in self.audio:
            if item.name == name:
                return item
        return None

    def filter_source_names(self) -> List[str]:
        return [item.name for item in self.sources] + list(self.scenes)

    @staticmethod
    def tracks_with(base: Sequence[bool], index: int, enabled: bool) -> Tuple[bool, ...]:
        tracks = list(normalize_tracks(list(base)))
        if 0 <= index < TRACK_COUNT:
            tracks[index] = enabled
        return tuple(tracks)
