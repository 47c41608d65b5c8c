"""Qt event-loop driver that ticks the overlay controller at a fixed cadence."""
from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QElapsedTimer, QObject, QTimer, pyqtSignal

from replay_overlay.controller import OverlayController
from replay_overlay.intents import Intent
from replay_overlay.logging_utils import get_logger

_LOGGER = get_logger("QtDriver")

DEFAULT_TICK_MS = 16


class OverlayTickDriver(QObject):
    """Forwards controller output to the Qt thread as signals."""

    fields_changed = pyqtSignal(list)
    visibility_changed = pyqtSignal(bool)
    finished = pyqtSignal()

    def __init__(
        self,
        controller: OverlayController,
        *,
        tick_ms: int = DEFAULT_TICK_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._timer = QTimer(self)
        self._timer.setInterval(max(1, int(tick_ms)))
        self._timer.timeout.connect(self._on_timeout)
        self._elapsed = QElapsedTimer()
        self._last_visible: Optional[bool] = None

    @property
    def controller(self) -> OverlayController:
        return self._controller

    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        if self._timer.isActive():
            return
        self._elapsed.start()
        self._timer.start()
        _LOGGER.debug("Tick driver started (interval=%dms)", self._timer.interval())

    def stop(self) -> None:
        self._timer.stop()
        self._controller.close()

    def submit(self, intent: Intent) -> None:
        self._controller.submit(intent)

    def tick_once(self, delta_seconds: float) -> bool:
        """Run one controller tick and publish its results."""
        keep_running = self._controller.tick(delta_seconds)
        dirty = self._controller.consume_dirty()
        if dirty:
            self.fields_changed.emit(dirty)
        visible = self._controller.state.overlay_visible
        if visible != self._last_visible:
            self._last_visible = visible
            self.visibility_changed.emit(visible)
        if not keep_running:
            self.stop()
            self.finished.emit()
        return keep_running

    def _on_timeout(self) -> None:
        delta_ms = self._elapsed.restart()
        self.tick_once(delta_ms / 1000.0)
