"""User intents produced by the renderer and consumed by ``SyncEngine.handle``."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

FORM_CREATE_SCENE = "create_scene"
FORM_RENAME_SCENE = "rename_scene"
FORM_CREATE_SOURCE = "create_source"
FORM_RENAME_SOURCE = "rename_source"
FORM_CREATE_FILTER = "create_filter"
FORM_RENAME_FILTER = "rename_filter"
FORM_MODES = frozenset(
    {
        FORM_CREATE_SCENE,
        FORM_RENAME_SCENE,
        FORM_CREATE_SOURCE,
        FORM_RENAME_SOURCE,
        FORM_CREATE_FILTER,
        FORM_RENAME_FILTER,
    }
)


# Navigation


@dataclass(frozen=True)
class SwitchTab:
    tab: str


# Output controls (throttled)


@dataclass(frozen=True)
class ToggleStream:
    pass


@dataclass(frozen=True)
class ToggleRecord:
    pass


@dataclass(frozen=True)
class ToggleBuffer:
    pass


@dataclass(frozen=True)
class SaveReplay:
    pass


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class ToggleVirtualCam:
    pass


# Scenes and sources


@dataclass(frozen=True)
class SwitchScene:
    name: str


@dataclass(frozen=True)
class RemoveScene:
    name: str


@dataclass(frozen=True)
class ToggleSourceVisible:
    item_id: int


@dataclass(frozen=True)
class ToggleSourceLock:
    item_id: int


@dataclass(frozen=True)
class SelectSource:
    item_id: int


@dataclass(frozen=True)
class MoveSourceUp:
    pass


@dataclass(frozen=True)
class MoveSourceDown:
    pass


@dataclass(frozen=True)
class DuplicateSource:
    pass


@dataclass(frozen=True)
class DeleteSource:
    pass


# Name/kind forms


@dataclass(frozen=True)
class OpenForm:
    """Open a create/rename form; ``target`` names the object being renamed."""

    mode: str
    target: str = ""


@dataclass(frozen=True)
class SetFormName:
    name: str


@dataclass(frozen=True)
class SetFormKind:
    kind: str


@dataclass(frozen=True)
class ConfirmForm:
    pass


@dataclass(frozen=True)
class CancelForm:
    pass


# Audio


@dataclass(frozen=True)
class ToggleMute:
    name: str


@dataclass(frozen=True)
class SetVolume:
    name: str
    fader: int


@dataclass(frozen=True)
class ExpandAudio:
    name: str


@dataclass(frozen=True)
class SetSyncOffset:
    name: str
    offset_ms: int


@dataclass(frozen=True)
class SetBalance:
    name: str
    balance: float


@dataclass(frozen=True)
class SetMonitorType:
    name: str
    monitor_type: int


@dataclass(frozen=True)
class SetTrack:
    name: str
    index: int
    enabled: bool


# Filters


@dataclass(frozen=True)
class SelectFilterSource:
    source: str


@dataclass(frozen=True)
class SelectFilter:
    index: int


@dataclass(frozen=True)
class ToggleFilter:
    name: str


@dataclass(frozen=True)
class MoveFilterUp:
    pass


@dataclass(frozen=True)
class MoveFilterDown:
    pass


@dataclass(frozen=True)
class DeleteFilter:
    pass


@dataclass(frozen=True)
class RefreshFilters:
    pass


# Transitions and studio mode


@dataclass(frozen=True)
class SetTransition:
    name: str


@dataclass(frozen=True)
class SetTransitionDuration:
    duration_ms: int


@dataclass(frozen=True)
class ToggleStudioMode:
    pass


@dataclass(frozen=True)
class SetPreviewScene:
    name: str


@dataclass(frozen=True)
class TriggerTransition:
    pass


# Hotkeys, profiles, settings


@dataclass(frozen=True)
class TriggerHotkey:
    name: str


@dataclass(frozen=True)
class SetHotkeyFilter:
    text: str


@dataclass(frozen=True)
class SetProfile:
    name: str


@dataclass(frozen=True)
class SetSceneCollection:
    name: str


@dataclass(frozen=True)
class EditSettings:
    """Change one or more settings-form fields; ``None`` leaves a field as is."""

    show_notifications: Optional[bool] = None
    notification_message: Optional[str] = None
    notification_duration: Optional[float] = None
    show_rec_indicator: Optional[bool] = None
    rec_position_index: Optional[int] = None


@dataclass(frozen=True)
class ApplySettings:
    pass


@dataclass(frozen=True)
class OpenSettings:
    pass


@dataclass(frozen=True)
class CloseOverlay:
    pass


Intent = Union[
    SwitchTab,
    ToggleStream,
    ToggleRecord,
    ToggleBuffer,
    SaveReplay,
    TogglePause,
    ToggleVirtualCam,
    SwitchScene,
    RemoveScene,
    ToggleSourceVisible,
    ToggleSourceLock,
    SelectSource,
    MoveSourceUp,
    MoveSourceDown,
    DuplicateSource,
    DeleteSource,
    OpenForm,
    SetFormName,
    SetFormKind,
    ConfirmForm,
    CancelForm,
    ToggleMute,
    SetVolume,
    ExpandAudio,
    SetSyncOffset,
    SetBalance,
    SetMonitorType,
    SetTrack,
    SelectFilterSource,
    SelectFilter,
    ToggleFilter,
    MoveFilterUp,
    MoveFilterDown,
    DeleteFilter,
    RefreshFilters,
    SetTransition,
    SetTransitionDuration,
    ToggleStudioMode,
    SetPreviewScene,
    TriggerTransition,
    TriggerHotkey,
    SetHotkeyFilter,
    SetProfile,
    SetSceneCollection,
    EditSettings,
    ApplySettings,
    OpenSettings,
    CloseOverlay,
]
