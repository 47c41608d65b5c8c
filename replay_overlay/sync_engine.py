"""Once-per-tick reconciliation of HostState into the ViewModel, plus intent handling."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from replay_overlay import intents as ui
from replay_overlay.debounce import (
    DEBOUNCE_WINDOW_SECONDS,
    ActionThrottle,
    DebounceTracker,
    PendingValue,
    TickClock,
)
from replay_overlay.derived import (
    COLOR_GOOD,
    cpu_color,
    disk_color,
    disk_megabytes_to_gigabytes,
    filter_hotkeys,
    format_cpu,
    format_disk,
    format_fps,
    format_frame_time,
    format_frames,
    format_memory,
    fader_to_mul,
    fps_color,
    humanize_kind_name,
    mul_to_fader,
    skip_color,
)
from replay_overlay.host_state import (
    RESOURCE_AUDIO_ADVANCED,
    RESOURCE_FILTER_KINDS,
    RESOURCE_FILTERS,
    RESOURCE_HOTKEYS,
    RESOURCE_INPUT_KINDS,
    RESOURCE_STATS,
    TRACK_COUNT,
    HostState,
    PendingRequest,
)
from replay_overlay.logging_utils import get_logger
from replay_overlay import protocol as msg
from replay_overlay.protocol import Envelope
from replay_overlay.view_model import (
    REC_POSITIONS,
    TAB_AUDIO,
    TAB_FILTERS,
    TAB_STATS,
    TABS,
    AudioEntry,
    FilterEntry,
    HotkeyEntry,
    KindEntry,
    SourceEntry,
    ViewModel,
)

_LOGGER = get_logger("Sync")

STATS_REFRESH_SECONDS = 1.0
AUDIO_ADVANCED_REFRESH_SECONDS = 5.0
# An unanswered request is retried after this long.
REQUEST_TIMEOUT_SECONDS = 10.0
NOTIFICATION_FADE_FRACTION = 0.3
REC_BLINK_INTERVAL_SECONDS = 0.5

FIELD_VOLUME = "volume"
FIELD_SYNC_OFFSET = "sync_offset"
FIELD_BALANCE = "balance"
FIELD_TRACKS = "tracks"

_BUTTON_ACTIONS: Dict[type, Tuple[str, str]] = {
    ui.ToggleStream: ("stream", msg.MSG_TOGGLE_STREAM),
    ui.ToggleRecord: ("record", msg.MSG_TOGGLE_RECORD),
    ui.ToggleBuffer: ("buffer", msg.MSG_TOGGLE_BUFFER),
    ui.SaveReplay: ("save", msg.MSG_SAVE_REPLAY),
    ui.TogglePause: ("pause", msg.MSG_TOGGLE_RECORD_PAUSE),
    ui.ToggleVirtualCam: ("virtual_cam", msg.MSG_TOGGLE_VIRTUAL_CAM),
}

SettingsSnapshot = Tuple[bool, str, float, bool, str]


class SyncEngine:
    """Projects HostState into the ViewModel and turns intents into outbound envelopes.

    The engine's only outputs are ViewModel dirty markers and the outbound
    queue returned by ``drain_outbound``.
    """

    def __init__(
        self,
        state: HostState,
        clock: TickClock,
        *,
        view: Optional[ViewModel] = None,
        window_seconds: float = DEBOUNCE_WINDOW_SECONDS,
    ) -> None:
        self._state = state
        self._clock = clock
        self.view = view or ViewModel()
        self._debounce = DebounceTracker(window_seconds=window_seconds, time_source=clock.now)
        self._transition_duration = PendingValue(window_seconds=window_seconds, time_source=clock.now)
        self._throttle = ActionThrottle(interval_seconds=window_seconds, time_source=clock.now)
        self._outbound: List[Envelope] = []
        self._filters_stale = False
        self._settings_loaded_from: Optional[SettingsSnapshot] = None
        self._settings_editing = False
        self._notif_timer = 0.0
        self._notif_duration = 0.0
        self._rec_blink_timer = 0.0

    @property
    def state(self) -> HostState:
        return self._state

    @property
    def debounce(self) -> DebounceTracker:
        return self._debounce

    # Outbound queue -------------------------------------------------------

    def _queue(self, message_type: str, payload: Optional[Dict[str, Any]] = None) -> None:
        self._outbound.append(Envelope(message_type, payload if payload is not None else {}))

    def drain_outbound(self) -> List[Envelope]:
        pending = self._outbound
        self._outbound = []
        return pending

    def pending_outbound(self) -> int:
        return len(self._outbound)

    def reset_session(self) -> None:
        self._state.reset_session()
        self._filters_stale = False

    # Tick-time projection -------------------------------------------------

    def sync(self) -> None:
        now = self._clock.now()
        self._debounce.prune()
        self._sync_scalars()
        self._sync_lists()
        self._sync_audio()
        self._sync_audio_advanced()
        self._sync_stats()
        self._sync_settings_form()
        self._issue_requests(now)

    def _sync_scalars(self) -> None:
        state = self._state
        view = self.view
        view.set("connected", state.connected)
        view.set("connection_text", "Connected" if state.connected else "Disconnected")
        view.set("current_scene", state.current_scene)
        view.set("is_streaming", state.is_streaming)
        view.set("is_recording", state.is_recording)
        view.set("is_recording_paused", state.is_recording_paused)
        view.set("is_buffer_active", state.is_buffer_active)
        view.set("is_virtual_cam_active", state.is_virtual_cam_active)
        view.set("has_active_capture", state.has_active_capture)
        view.set("current_profile", state.current_profile)
        view.set("current_collection", state.current_scene_collection)
        view.set("current_transition", state.current_transition)
        view.set("studio_mode", state.studio_mode_enabled)
        view.set("preview_scene", state.preview_scene)
        view.set("toggle_hotkey", state.config.toggle_key)
        view.set("save_hotkey", state.config.save_key)
        view.set("overlay_visible", state.overlay_visible)
        view.set("topmost", state.topmost)
        view.set("preview_image", state.preview_base64)
        view.set("preview_serial", state.preview_serial)
        view.set("transition_dur_ms", self._transition_duration.project(state.transition_duration_ms))

    def _sync_lists(self) -> None:
        state = self._state
        view = self.view
        view.set("scenes", tuple(state.scenes))
        view.set(
            "sources",
            tuple(
                SourceEntry(
                    id=item.id,
                    name=item.name,
                    visible=item.visible,
                    locked=item.locked,
                    kind=item.kind,
                    kind_label=humanize_kind_name(item.kind),
                )
                for item in state.sources
            ),
        )
        view.set("profiles", tuple(state.profiles))
        view.set("collections", tuple(state.scene_collections))
        view.set("transitions_list", tuple(state.transitions))
        view.set(
            "filters",
            tuple(
                FilterEntry(
                    name=item.name,
                    kind=item.kind,
                    enabled=item.enabled,
                    kind_label=humanize_kind_name(item.kind),
                )
                for item in state.filters
            ),
        )
        view.set("filter_sources", tuple(state.filter_source_names()))
        view.set("input_kinds", tuple(KindEntry(kind, humanize_kind_name(kind)) for kind in state.input_kinds))
        view.set("filter_kinds", tuple(KindEntry(kind, humanize_kind_name(kind)) for kind in state.filter_kinds))
        self._sync_hotkeys()

    def _sync_hotkeys(self) -> None:
        needle = self.view["hotkey_filter"].strip().lower()
        entries = [
            HotkeyEntry(raw, display)
            for raw, display in filter_hotkeys(self._state.hotkeys)
            if not needle or needle in display.lower()
        ]
        self.view.set("hotkeys", tuple(entries))

    def _sync_audio(self) -> None:
        entries = []
        for channel in self._state.audio:
            fader = self._debounce.project((channel.name, FIELD_VOLUME), mul_to_fader(channel.volume_mul))
            entries.append(AudioEntry(channel.name, channel.volume_mul, channel.muted, fader))
        self.view.set("audio_items", tuple(entries))

    def _sync_audio_advanced(self) -> None:
        view = self.view
        expanded = view["expanded_audio"]
        advanced = self._state.find_audio_advanced(expanded) if expanded else None
        view.set("has_advanced", advanced is not None)
        if advanced is None:
            return
        view.set("adv_sync_ms", self._debounce.project((expanded, FIELD_SYNC_OFFSET), advanced.sync_offset_ms))
        view.set("adv_balance", self._debounce.project((expanded, FIELD_BALANCE), advanced.balance))
        view.set("adv_monitor_type", advanced.monitor_type)
        view.set("adv_tracks", self._debounce.project((expanded, FIELD_TRACKS), advanced.tracks))

    def _sync_stats(self) -> None:
        stats = self._state.stats
        view = self.view
        disk_gb = disk_megabytes_to_gigabytes(stats.available_disk_space)
        view.set("stat_fps", format_fps(stats.active_fps))
        view.set("stat_cpu", format_cpu(stats.cpu_usage))
        view.set("stat_memory", format_memory(stats.memory_usage))
        view.set("stat_frame_time", format_frame_time(stats.average_frame_render_time))
        view.set("stat_disk", format_disk(disk_gb))
        view.set("stat_render_skip", format_frames(stats.render_skipped_frames, stats.render_total_frames))
        view.set("stat_output_skip", format_frames(stats.output_skipped_frames, stats.output_total_frames))
        view.set("fps_color", fps_color(stats.active_fps))
        view.set("cpu_color", cpu_color(stats.cpu_usage))
        view.set("disk_color", disk_color(disk_gb))
        view.set("render_skip_color", skip_color(stats.render_skipped_frames))
        view.set("output_skip_color", skip_color(stats.output_skipped_frames))

    def _settings_snapshot(self) -> SettingsSnapshot:
        config = self._state.config
        return (
            config.show_notifications,
            config.notif_message,
            config.notif_duration_sec,
            config.show_rec_indicator,
            config.rec_indicator_position,
        )

    def _sync_settings_form(self) -> None:
        """Load the settings form from config on first sync and after host-side changes.

        A form with unapplied local edits is left alone.
        """
        snapshot = self._settings_snapshot()
        if self._settings_loaded_from is not None:
            if self._settings_editing or snapshot == self._settings_loaded_from:
                return
        show_notif, message, duration, show_rec, position = snapshot
        view = self.view
        view.set("settings_show_notif", show_notif)
        view.set("settings_notif_msg", message)
        view.set("settings_notif_dur", float(duration))
        view.set("settings_show_rec", show_rec)
        view.set("settings_rec_pos_idx", REC_POSITIONS.index(position) if position in REC_POSITIONS else 0)
        self._settings_loaded_from = snapshot

    # On-demand requests ---------------------------------------------------

    @staticmethod
    def _can_request(pending: PendingRequest, now: float) -> bool:
        if not pending.in_flight:
            return True
        return pending.elapsed(now) >= REQUEST_TIMEOUT_SECONDS

    def _send_request(self, kind: str, message_type: str, now: float, payload: Optional[Dict[str, Any]] = None) -> bool:
        pending = self._state.request(kind)
        if not self._can_request(pending, now):
            return False
        pending.mark_sent(now)
        self._queue(message_type, payload)
        _LOGGER.debug("Requested %s", kind)
        return True

    def _issue_requests(self, now: float) -> None:
        state = self._state
        view = self.view
        tab = view["active_tab"]
        if tab == TAB_STATS:
            if state.request(RESOURCE_STATS).elapsed(now) >= STATS_REFRESH_SECONDS:
                self._send_request(RESOURCE_STATS, msg.MSG_GET_STATS, now)
            if not state.hotkeys and state.request(RESOURCE_HOTKEYS).last_request is None:
                self._send_request(RESOURCE_HOTKEYS, msg.MSG_GET_HOTKEYS, now)
        if tab == TAB_AUDIO and state.audio:
            if state.request(RESOURCE_AUDIO_ADVANCED).elapsed(now) >= AUDIO_ADVANCED_REFRESH_SECONDS:
                self._send_request(RESOURCE_AUDIO_ADVANCED, msg.MSG_GET_AUDIO_ADVANCED, now)
        if tab == TAB_FILTERS:
            source = view["filter_selected_source"]
            if source and (source != state.filters_source or self._filters_stale):
                self._request_filters(now)
        form_mode = view["form_mode"]
        if form_mode == ui.FORM_CREATE_SOURCE and not state.input_kinds:
            if state.request(RESOURCE_INPUT_KINDS).last_request is None:
                self._send_request(RESOURCE_INPUT_KINDS, msg.MSG_GET_INPUT_KINDS, now)
        if form_mode == ui.FORM_CREATE_FILTER and not state.filter_kinds:
            if state.request(RESOURCE_FILTER_KINDS).last_request is None:
                self._send_request(RESOURCE_FILTER_KINDS, msg.MSG_GET_FILTER_KINDS, now)

    def _request_filters(self, now: float) -> bool:
        source = self.view["filter_selected_source"]
        if not source:
            return False
        if not self._send_request(RESOURCE_FILTERS, msg.MSG_GET_FILTERS, now, {"source": source}):
            # Retried once the outstanding response lands.
            self._filters_stale = True
            return False
        self._state.filters_source = source
        self._filters_stale = False
        return True

    def _refresh_filters_after_mutation(self) -> None:
        self._filters_stale = True
        self._request_filters(self._clock.now())

    # Notification and REC indicator ----------------------------------------

    def show_notification(self, text: str, color: str = COLOR_GOOD, duration: float = 3.0) -> None:
        view = self.view
        view.set("notif_active", True)
        view.set("notif_text", text)
        view.set("notif_color", color)
        view.set("notif_alpha", 1.0)
        self._notif_timer = 0.0
        self._notif_duration = max(0.0, float(duration))

    def set_rec_indicator(self, active: bool, position: str) -> None:
        view = self.view
        if view["rec_active"] != active:
            view.set("rec_active", active)
            view.set("rec_dot_visible", True)
            view.mark_dirty("rec_dot_visible")
            self._rec_blink_timer = 0.0
        view.set("rec_position", position)

    def update_animations(self, delta_seconds: float) -> None:
        dt = max(0.0, float(delta_seconds))
        self._update_notification(dt)
        self._update_rec_indicator(dt)

    def _update_notification(self, dt: float) -> None:
        view = self.view
        if not view["notif_active"]:
            return
        self._notif_timer += dt
        duration = self._notif_duration
        fade_start = duration * (1.0 - NOTIFICATION_FADE_FRACTION)
        if self._notif_timer >= duration:
            view.set("notif_active", False)
            view.set("notif_alpha", 0.0)
        elif self._notif_timer > fade_start:
            progress = (self._notif_timer - fade_start) / (duration - fade_start)
            view.set("notif_alpha", max(0.0, 1.0 - progress))

    def _update_rec_indicator(self, dt: float) -> None:
        view = self.view
        if not view["rec_active"]:
            return
        self._rec_blink_timer += dt
        while self._rec_blink_timer >= REC_BLINK_INTERVAL_SECONDS:
            self._rec_blink_timer -= REC_BLINK_INTERVAL_SECONDS
            view.set("rec_dot_visible", not view["rec_dot_visible"])

    # Intents --------------------------------------------------------------

    def handle(self, intent: ui.Intent) -> None:
        button = _BUTTON_ACTIONS.get(type(intent))
        if button is not None:
            key, message_type = button
            if self._throttle.allow(key):
                self._queue(message_type)
            else:
                _LOGGER.debug("Ignoring repeated %s within throttle window", key)
            return

        state = self._state
        view = self.view
        now = self._clock.now()

        if isinstance(intent, ui.SwitchTab):
            self._switch_tab(intent.tab)
        elif isinstance(intent, ui.SwitchScene):
            self._queue(msg.MSG_SWITCH_SCENE, {"name": intent.name})
        elif isinstance(intent, ui.RemoveScene):
            self._queue(msg.MSG_REMOVE_SCENE, {"name": intent.name})
        elif isinstance(intent, ui.ToggleSourceVisible):
            item = state.find_source(intent.item_id)
            if item is not None:
                self._queue(
                    msg.MSG_TOGGLE_SOURCE,
                    {"scene": state.current_scene, "itemId": item.id, "visible": not item.visible},
                )
        elif isinstance(intent, ui.ToggleSourceLock):
            item = state.find_source(intent.item_id)
            if item is not None:
                self._queue(
                    msg.MSG_SET_SOURCE_LOCKED,
                    {"scene": state.current_scene, "itemId": item.id, "locked": not item.locked},
                )
        elif isinstance(intent, ui.SelectSource):
            self._select_source(intent.item_id)
        elif isinstance(intent, (ui.MoveSourceUp, ui.MoveSourceDown)):
            self._move_source(up=isinstance(intent, ui.MoveSourceUp))
        elif isinstance(intent, ui.DuplicateSource):
            item_id = view["selected_source_id"]
            if item_id >= 0:
                self._queue(msg.MSG_DUPLICATE_SOURCE, {"scene": state.current_scene, "itemId": item_id})
        elif isinstance(intent, ui.DeleteSource):
            item_id = view["selected_source_id"]
            if item_id >= 0:
                self._queue(msg.MSG_REMOVE_SOURCE, {"scene": state.current_scene, "itemId": item_id})
                view.set("selected_source_id", -1)
                view.set("selected_source_name", "")
        elif isinstance(intent, ui.OpenForm):
            self._open_form(intent.mode, intent.target)
        elif isinstance(intent, ui.SetFormName):
            view.set("form_name", intent.name)
        elif isinstance(intent, ui.SetFormKind):
            view.set("form_kind", intent.kind)
        elif isinstance(intent, ui.ConfirmForm):
            self._confirm_form()
        elif isinstance(intent, ui.CancelForm):
            self._clear_form()
        elif isinstance(intent, ui.ToggleMute):
            self._queue(msg.MSG_TOGGLE_MUTE, {"name": intent.name})
        elif isinstance(intent, ui.SetVolume):
            fader = min(100, max(0, int(intent.fader)))
            self._debounce.record_edit((intent.name, FIELD_VOLUME), fader)
            self._queue(msg.MSG_SET_VOLUME, {"name": intent.name, "volumeMul": fader_to_mul(fader)})
            self._sync_audio()
        elif isinstance(intent, ui.ExpandAudio):
            view.set("expanded_audio", "" if view["expanded_audio"] == intent.name else intent.name)
            self._sync_audio_advanced()
        elif isinstance(intent, ui.SetSyncOffset):
            offset = int(intent.offset_ms)
            self._debounce.record_edit((intent.name, FIELD_SYNC_OFFSET), offset)
            self._queue(msg.MSG_SET_AUDIO_SYNC_OFFSET, {"name": intent.name, "offsetMs": offset})
            self._sync_audio_advanced()
        elif isinstance(intent, ui.SetBalance):
            balance = min(1.0, max(0.0, float(intent.balance)))
            self._debounce.record_edit((intent.name, FIELD_BALANCE), balance)
            self._queue(msg.MSG_SET_AUDIO_BALANCE, {"name": intent.name, "balance": balance})
            self._sync_audio_advanced()
        elif isinstance(intent, ui.SetMonitorType):
            self._queue(msg.MSG_SET_AUDIO_MONITOR_TYPE, {"name": intent.name, "monitorType": int(intent.monitor_type)})
        elif isinstance(intent, ui.SetTrack):
            self._set_track(intent.name, intent.index, intent.enabled)
        elif isinstance(intent, ui.SelectFilterSource):
            view.set("filter_selected_source", intent.source)
            view.set("filter_selected_idx", -1)
            self._filters_stale = True
            self._request_filters(now)
        elif isinstance(intent, ui.SelectFilter):
            current = view["filter_selected_idx"]
            view.set("filter_selected_idx", -1 if current == intent.index else intent.index)
        elif isinstance(intent, ui.ToggleFilter):
            self._toggle_filter(intent.name)
        elif isinstance(intent, (ui.MoveFilterUp, ui.MoveFilterDown)):
            self._move_filter(up=isinstance(intent, ui.MoveFilterUp))
        elif isinstance(intent, ui.DeleteFilter):
            self._delete_filter()
        elif isinstance(intent, ui.RefreshFilters):
            self._filters_stale = True
            self._request_filters(now)
        elif isinstance(intent, ui.SetTransition):
            self._queue(msg.MSG_SET_TRANSITION, {"name": intent.name})
        elif isinstance(intent, ui.SetTransitionDuration):
            duration = max(0, int(intent.duration_ms))
            self._transition_duration.record_edit(duration)
            view.set("transition_dur_ms", duration)
            self._queue(msg.MSG_SET_TRANSITION_DURATION, {"duration": duration})
        elif isinstance(intent, ui.ToggleStudioMode):
            self._queue(msg.MSG_TOGGLE_STUDIO_MODE, {"enabled": not state.studio_mode_enabled})
        elif isinstance(intent, ui.SetPreviewScene):
            self._queue(msg.MSG_SET_PREVIEW_SCENE, {"name": intent.name})
        elif isinstance(intent, ui.TriggerTransition):
            self._queue(msg.MSG_TRIGGER_TRANSITION)
        elif isinstance(intent, ui.TriggerHotkey):
            self._queue(msg.MSG_TRIGGER_HOTKEY, {"name": intent.name})
        elif isinstance(intent, ui.SetHotkeyFilter):
            view.set("hotkey_filter", intent.text)
            self._sync_hotkeys()
        elif isinstance(intent, ui.SetProfile):
            self._queue(msg.MSG_SET_PROFILE, {"name": intent.name})
        elif isinstance(intent, ui.SetSceneCollection):
            self._queue(msg.MSG_SET_SCENE_COLLECTION, {"name": intent.name})
        elif isinstance(intent, ui.EditSettings):
            self._edit_settings(intent)
        elif isinstance(intent, ui.ApplySettings):
            self._apply_settings()
        elif isinstance(intent, ui.OpenSettings):
            self._queue(msg.MSG_OPEN_SETTINGS)
        elif isinstance(intent, ui.CloseOverlay):
            self._queue(msg.MSG_CLOSE_OVERLAY)
        else:
            _LOGGER.debug("Ignoring unsupported intent %r", intent)

    def _switch_tab(self, tab: str) -> None:
        if tab not in TABS:
            _LOGGER.debug("Ignoring switch to unknown tab %r", tab)
            return
        view = self.view
        view.set("active_tab", tab)
        if tab == TAB_FILTERS and not view["filter_selected_source"]:
            sources = self._state.filter_source_names()
            if sources:
                view.set("filter_selected_source", sources[0])

    def _select_source(self, item_id: int) -> None:
        view = self.view
        if view["selected_source_id"] == item_id:
            view.set("selected_source_id", -1)
            view.set("selected_source_name", "")
            return
        item = self._state.find_source(item_id)
        view.set("selected_source_id", item_id)
        view.set("selected_source_name", item.name if item is not None else "")

    def _move_source(self, *, up: bool) -> None:
        """Reorder the selected item; the host indexes the list bottom-up."""
        state = self._state
        item_id = self.view["selected_source_id"]
        if item_id < 0:
            return
        position = state.source_index(item_id)
        count = len(state.sources)
        if position < 0:
            return
        if up and position == 0:
            return
        if not up and position >= count - 1:
            return
        host_index = count - 1 - position
        target = host_index + 1 if up else host_index - 1
        self._queue(msg.MSG_REORDER_SOURCE, {"scene": state.current_scene, "itemId": item_id, "index": target})

    def _set_track(self, name: str, index: int, enabled: bool) -> None:
        if not 0 <= index < TRACK_COUNT:
            return
        key = (name, FIELD_TRACKS)
        base = self._debounce.active_value(key)
        if base is None:
            advanced = self._state.find_audio_advanced(name)
            if advanced is None:
                return
            base = advanced.tracks
        tracks = HostState.tracks_with(base, index, bool(enabled))
        self._debounce.record_edit(key, tracks)
        self._queue(msg.MSG_SET_AUDIO_TRACKS, {"name": name, "tracks": list(tracks)})
        self._sync_audio_advanced()

    # Filters

    def _selected_filter(self) -> Tuple[int, Optional[str]]:
        idx = self.view["filter_selected_idx"]
        filters = self._state.filters
        if 0 <= idx < len(filters):
            return idx, filters[idx].name
        return idx, None

    def _toggle_filter(self, name: str) -> None:
        source = self.view["filter_selected_source"]
        if not source:
            return
        for item in self._state.filters:
            if item.name == name:
                self._queue(msg.MSG_SET_FILTER_ENABLED, {"source": source, "filter": name, "enabled": not item.enabled})
                self._refresh_filters_after_mutation()
                return

    def _move_filter(self, *, up: bool) -> None:
        source = self.view["filter_selected_source"]
        idx, name = self._selected_filter()
        if not source or name is None:
            return
        target = idx - 1 if up else idx + 1
        if not 0 <= target < len(self._state.filters):
            return
        self._queue(msg.MSG_SET_FILTER_INDEX, {"source": source, "filter": name, "index": target})
        self.view.set("filter_selected_idx", target)
        self._refresh_filters_after_mutation()

    def _delete_filter(self) -> None:
        source = self.view["filter_selected_source"]
        _, name = self._selected_filter()
        if not source or name is None:
            return
        self._queue(msg.MSG_REMOVE_FILTER, {"source": source, "filter": name})
        self.view.set("filter_selected_idx", -1)
        self._refresh_filters_after_mutation()

    # Forms

    def _open_form(self, mode: str, target: str) -> None:
        if mode not in ui.FORM_MODES:
            _LOGGER.debug("Ignoring unknown form mode %r", mode)
            return
        renaming = mode in (ui.FORM_RENAME_SCENE, ui.FORM_RENAME_SOURCE, ui.FORM_RENAME_FILTER)
        if renaming and not target:
            return
        view = self.view
        view.set("form_mode", mode)
        view.set("form_target", target if renaming else "")
        view.set("form_name", target if renaming else "")
        view.set("form_kind", "")

    def _clear_form(self) -> None:
        view = self.view
        view.set("form_mode", "")
        view.set("form_target", "")
        view.set("form_name", "")
        view.set("form_kind", "")

    def _confirm_form(self) -> None:
        view = self.view
        state = self._state
        mode = view["form_mode"]
        name = view["form_name"].strip()
        kind = view["form_kind"]
        target = view["form_target"]
        source = view["filter_selected_source"]
        if not mode or not name:
            return
        if mode == ui.FORM_CREATE_SCENE:
            self._queue(msg.MSG_CREATE_SCENE, {"name": name})
        elif mode == ui.FORM_RENAME_SCENE:
            self._queue(msg.MSG_RENAME_SCENE, {"name": target, "newName": name})
        elif mode == ui.FORM_CREATE_SOURCE:
            if not kind:
                return
            self._queue(msg.MSG_CREATE_SOURCE, {"scene": state.current_scene, "name": name, "kind": kind})
        elif mode == ui.FORM_RENAME_SOURCE:
            self._queue(msg.MSG_RENAME_SOURCE, {"name": target, "newName": name})
        elif mode == ui.FORM_CREATE_FILTER:
            if not kind or not source:
                return
            self._queue(msg.MSG_CREATE_FILTER, {"source": source, "name": name, "kind": kind})
            self._refresh_filters_after_mutation()
        elif mode == ui.FORM_RENAME_FILTER:
            if not source:
                return
            self._queue(msg.MSG_RENAME_FILTER, {"source": source, "filter": target, "newName": name})
            self._refresh_filters_after_mutation()
        self._clear_form()

    # Settings

    def _edit_settings(self, intent: ui.EditSettings) -> None:
        view = self.view
        if intent.show_notifications is not None:
            view.set("settings_show_notif", bool(intent.show_notifications))
        if intent.notification_message is not None:
            view.set("settings_notif_msg", intent.notification_message)
        if intent.notification_duration is not None:
            view.set("settings_notif_dur", max(0.0, float(intent.notification_duration)))
        if intent.show_rec_indicator is not None:
            view.set("settings_show_rec", bool(intent.show_rec_indicator))
        if intent.rec_position_index is not None:
            index = int(intent.rec_position_index)
            view.set("settings_rec_pos_idx", index if 0 <= index < len(REC_POSITIONS) else 0)
        self._settings_editing = True

    def _apply_settings(self) -> None:
        view = self.view
        index = view["settings_rec_pos_idx"]
        position = REC_POSITIONS[index] if 0 <= index < len(REC_POSITIONS) else REC_POSITIONS[0]
        self._queue(
            msg.MSG_SAVE_SETTINGS,
            {
                "showNotifications": view["settings_show_notif"],
                "notificationMessage": view["settings_notif_msg"],
                "notificationDuration": float(view["settings_notif_dur"]),
                "showRecIndicator": view["settings_show_rec"],
                "recIndicatorPosition": position,
            },
        )
        self._settings_editing = False
