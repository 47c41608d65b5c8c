"""Envelope codec for the overlay channel.

Each frame is a 4-byte unsigned length prefix (host-native byte order) followed
by that many UTF-8 bytes holding ``{"type": <tag>, "payload": "<json string>"}``.
The payload is double-encoded so the outer document never depends on the
payload's shape.
"""
from __future__ import annotations

import enum
import json
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

LENGTH_PREFIX = struct.Struct("=I")
MAX_FRAME_BYTES = 10 * 1024 * 1024

JsonValue = Any

# Host -> overlay
MSG_STATE_UPDATE = "state_update"
MSG_PREVIEW_FRAME = "preview_frame"
MSG_CONFIG_UPDATE = "config_update"
MSG_SHOW_OVERLAY = "show_overlay"
MSG_HIDE_OVERLAY = "hide_overlay"
MSG_SETTINGS_OPENED = "settings_opened"
MSG_SETTINGS_CLOSED = "settings_closed"
MSG_AUDIO_ADVANCED = "audio_advanced"
MSG_INPUT_KINDS = "input_kinds"
MSG_FILTERS_RESPONSE = "filters_response"
MSG_FILTER_KINDS = "filter_kinds"
MSG_STATS_RESPONSE = "stats_response"
MSG_HOTKEYS_RESPONSE = "hotkeys_response"
MSG_SHOW_NOTIFICATION = "show_notification"
MSG_REC_INDICATOR = "rec_indicator"
MSG_SHUTDOWN = "shutdown"

INBOUND_TYPES = frozenset(
    {
        MSG_STATE_UPDATE,
        MSG_PREVIEW_FRAME,
        MSG_CONFIG_UPDATE,
        MSG_SHOW_OVERLAY,
        MSG_HIDE_OVERLAY,
        MSG_SETTINGS_OPENED,
        MSG_SETTINGS_CLOSED,
        MSG_AUDIO_ADVANCED,
        MSG_INPUT_KINDS,
        MSG_FILTERS_RESPONSE,
        MSG_FILTER_KINDS,
        MSG_STATS_RESPONSE,
        MSG_HOTKEYS_RESPONSE,
        MSG_SHOW_NOTIFICATION,
        MSG_REC_INDICATOR,
        MSG_SHUTDOWN,
    }
)

# Overlay -> host
MSG_READY = "ready"
MSG_TOGGLE_STREAM = "toggle_stream"
MSG_TOGGLE_RECORD = "toggle_record"
MSG_TOGGLE_BUFFER = "toggle_buffer"
MSG_TOGGLE_RECORD_PAUSE = "toggle_record_pause"
MSG_TOGGLE_VIRTUAL_CAM = "toggle_virtual_cam"
MSG_SAVE_REPLAY = "save_replay"
MSG_SWITCH_SCENE = "switch_scene"
MSG_TOGGLE_SOURCE = "toggle_source"
MSG_SET_SOURCE_LOCKED = "set_source_locked"
MSG_REORDER_SOURCE = "reorder_source"
MSG_DUPLICATE_SOURCE = "duplicate_source"
MSG_RENAME_SOURCE = "rename_source"
MSG_REMOVE_SOURCE = "remove_source"
MSG_CREATE_SOURCE = "create_source"
MSG_TOGGLE_MUTE = "toggle_mute"
MSG_SET_VOLUME = "set_volume"
MSG_SET_AUDIO_SYNC_OFFSET = "set_audio_sync_offset"
MSG_SET_AUDIO_BALANCE = "set_audio_balance"
MSG_SET_AUDIO_MONITOR_TYPE = "set_audio_monitor_type"
MSG_SET_AUDIO_TRACKS = "set_audio_tracks"
MSG_GET_FILTERS = "get_filters"
MSG_SET_FILTER_ENABLED = "set_filter_enabled"
MSG_SET_FILTER_INDEX = "set_filter_index"
MSG_REMOVE_FILTER = "remove_filter"
MSG_CREATE_FILTER = "create_filter"
MSG_RENAME_FILTER = "rename_filter"
MSG_SET_TRANSITION = "set_transition"
MSG_SET_TRANSITION_DURATION = "set_transition_duration"
MSG_TOGGLE_STUDIO_MODE = "toggle_studio_mode"
MSG_SET_PREVIEW_SCENE = "set_preview_scene"
MSG_TRIGGER_TRANSITION = "trigger_transition"
MSG_TRIGGER_HOTKEY = "trigger_hotkey"
MSG_GET_STATS = "get_stats"
MSG_GET_HOTKEYS = "get_hotkeys"
MSG_GET_AUDIO_ADVANCED = "get_audio_advanced"
MSG_GET_INPUT_KINDS = "get_input_kinds"
MSG_GET_FILTER_KINDS = "get_filter_kinds"
MSG_SET_PROFILE = "set_profile"
MSG_SET_SCENE_COLLECTION = "set_scene_collection"
MSG_CREATE_SCENE = "create_scene"
MSG_RENAME_SCENE = "rename_scene"
MSG_REMOVE_SCENE = "remove_scene"
MSG_SAVE_SETTINGS = "save_settings"
MSG_OPEN_SETTINGS = "open_settings"
MSG_CLOSE_OVERLAY = "close_overlay"


@dataclass(frozen=True)
class Envelope:
    """Tagged message unit exchanged over the channel."""

    type: str
    payload: JsonValue = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if isinstance(self.payload, dict):
            return self.payload.get(key, default)
        return default


class DecodeErrorKind(enum.Enum):
    INVALID_UTF8 = "invalid_utf8"
    INVALID_JSON = "invalid_json"
    NOT_AN_OBJECT = "not_an_object"
    MISSING_TYPE = "missing_type"
    INVALID_PAYLOAD = "invalid_payload"


@dataclass(frozen=True)
class DecodeResult:
    envelope: Optional[Envelope] = None
    error: Optional[DecodeErrorKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.envelope is not None


def frame_length_valid(length: int) -> bool:
    return 0 < length <= MAX_FRAME_BYTES


def encode_envelope(envelope: Envelope) -> bytes:
    """Serialise an envelope body; raises TypeError/ValueError on unserialisable payloads."""
    payload = envelope.payload if envelope.payload is not None else {}
    outer: Dict[str, str] = {
        "type": envelope.type,
        "payload": json.dumps(payload, ensure_ascii=False),
    }
    return json.dumps(outer, ensure_ascii=False).encode("utf-8")


def encode_frame(envelope: Envelope) -> bytes:
    body = encode_envelope(envelope)
    if not frame_length_valid(len(body)):
        raise ValueError(f"Envelope body of {len(body)} bytes exceeds frame limits")
    return LENGTH_PREFIX.pack(len(body)) + body


def decode_envelope(body: bytes) -> DecodeResult:
    """Decode one frame body. Never raises; failures come back as a DecodeErrorKind."""
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        return DecodeResult(error=DecodeErrorKind.INVALID_UTF8, detail=str(exc))
    try:
        outer = json.loads(text)
    except (ValueError, RecursionError) as exc:
        return DecodeResult(error=DecodeErrorKind.INVALID_JSON, detail=str(exc))
    if not isinstance(outer, dict):
        return DecodeResult(error=DecodeErrorKind.NOT_AN_OBJECT, detail=type(outer).__name__)
    message_type = outer.get("type")
    if not isinstance(message_type, str) or not message_type:
        return DecodeResult(error=DecodeErrorKind.MISSING_TYPE)
    raw_payload = outer.get("payload", "{}")
    if raw_payload is None:
        raw_payload = "{}"
    if not isinstance(raw_payload, str):
        return DecodeResult(error=DecodeErrorKind.INVALID_PAYLOAD, detail=f"{message_type}: payload is not a string")
    try:
        payload = json.loads(raw_payload) if raw_payload.strip() else {}
    except (ValueError, RecursionError) as exc:
        return DecodeResult(error=DecodeErrorKind.INVALID_PAYLOAD, detail=f"{message_type}: {exc}")
    return DecodeResult(envelope=Envelope(message_type, payload))
