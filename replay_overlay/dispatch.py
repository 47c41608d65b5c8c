from __future__ import annotations

from typing import Any, Mapping

from replay_overlay import protocol as msg
from replay_overlay.derived import COLOR_GOOD
from replay_overlay.host_state import HostState
from replay_overlay.logging_utils import get_logger
from replay_overlay.protocol import Envelope
from replay_overlay.sync_engine import SyncEngine

_LOGGER = get_logger("Dispatch")


class InboundDispatcher:
    """Routes inbound envelopes onto HostState updates and engine notifications."""

    def __init__(self, state: HostState, engine: SyncEngine, *, log_envelopes: bool = False) -> None:
        self._state = state
        self._engine = engine
        self._log_envelopes = log_envelopes
        self.shutdown_requested = False

    def dispatch(self, envelope: Envelope) -> bool:
        """Apply one envelope. Returns False for unknown tags and handler failures."""
        if self._log_envelopes:
            _LOGGER.debug("Inbound %s: %s", envelope.type, envelope.payload)
        try:
            return self._dispatch(envelope)
        except Exception as exc:  # pragma: no cover - last-resort guard
            _LOGGER.warning("Handler for %s failed: %s", envelope.type, exc, exc_info=exc)
            return False

    def _dispatch(self, envelope: Envelope) -> bool:
        state = self._state
        message_type = envelope.type
        payload = envelope.payload

        if message_type == msg.MSG_STATE_UPDATE:
            state.update_from_state(payload)
        elif message_type == msg.MSG_PREVIEW_FRAME:
            state.update_preview(envelope.get("base64"))
        elif message_type == msg.MSG_CONFIG_UPDATE:
            state.update_from_config(payload)
            config = state.config
            self._engine.set_rec_indicator(
                config.show_rec_indicator and state.is_buffer_active,
                config.rec_indicator_position,
            )
        elif message_type == msg.MSG_SHOW_OVERLAY:
            state.overlay_visible = True
            state.topmost = True
        elif message_type == msg.MSG_HIDE_OVERLAY:
            state.overlay_visible = False
        elif message_type == msg.MSG_SETTINGS_OPENED:
            state.overlay_visible = False
            state.topmost = False
        elif message_type == msg.MSG_SETTINGS_CLOSED:
            state.topmost = True
        elif message_type == msg.MSG_AUDIO_ADVANCED:
            state.update_audio_advanced(payload)
        elif message_type == msg.MSG_INPUT_KINDS:
            state.update_input_kinds(payload)
        elif message_type == msg.MSG_FILTERS_RESPONSE:
            state.update_filters(payload)
        elif message_type == msg.MSG_FILTER_KINDS:
            state.update_filter_kinds(payload)
        elif message_type == msg.MSG_STATS_RESPONSE:
            state.update_stats(payload)
        elif message_type == msg.MSG_HOTKEYS_RESPONSE:
            state.update_hotkeys(payload)
        elif message_type == msg.MSG_SHOW_NOTIFICATION:
            self._show_notification(payload)
        elif message_type == msg.MSG_REC_INDICATOR:
            self._rec_indicator(payload)
        elif message_type == msg.MSG_SHUTDOWN:
            _LOGGER.info("Host requested shutdown")
            self.shutdown_requested = True
        else:
            _LOGGER.debug("Ignoring unknown message type %s", message_type)
            return False
        return True

    def _show_notification(self, payload: Any) -> None:
        config = self._state.config
        if not config.show_notifications:
            return
        data = payload if isinstance(payload, Mapping) else {}
        text = data.get("text")
        color = data.get("color")
        self._engine.show_notification(
            text if isinstance(text, str) and text else config.notif_message,
            color if isinstance(color, str) and color else COLOR_GOOD,
            config.notif_duration_sec,
        )

    def _rec_indicator(self, payload: Any) -> None:
        config = self._state.config
        if not config.show_rec_indicator:
            return
        data = payload if isinstance(payload, Mapping) else {}
        active = data.get("active")
        position = data.get("position")
        self._engine.set_rec_indicator(
            active if isinstance(active, bool) else False,
            position if isinstance(position, str) and position else config.rec_indicator_position,
        )
