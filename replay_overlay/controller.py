"""Single owner of the overlay session and its per-tick ordering."""
from __future__ import annotations

from typing import List, Optional

from replay_overlay.debounce import TickClock
from replay_overlay.dispatch import InboundDispatcher
from replay_overlay.host_state import HostState
from replay_overlay.intents import Intent
from replay_overlay.logging_utils import get_logger
from replay_overlay.panel_geometry import ClickThroughTracker, PanelRect
from replay_overlay.reconnect import RECONNECT_INTERVAL_SECONDS, ConnectionState, ReconnectionController
from replay_overlay.sync_engine import SyncEngine
from replay_overlay.transport import ChannelTransport
from replay_overlay.view_model import ViewModel

_LOGGER = get_logger("Controller")

MAX_INBOUND_PER_TICK = 100


class OverlayController:
    """Drives one overlay session through ``tick``.

    Each tick runs, in order: a reconnection step, a bounded inbound drain,
    the sync pass, notification/REC animation, and the outbound flush.
    """

    def __init__(
        self,
        channel_name: str,
        *,
        transport: Optional[ChannelTransport] = None,
        reconnect_interval: float = RECONNECT_INTERVAL_SECONDS,
        max_inbound_per_tick: int = MAX_INBOUND_PER_TICK,
        log_envelopes: bool = False,
    ) -> None:
        self.clock = TickClock()
        self.state = HostState()
        self.engine = SyncEngine(self.state, self.clock)
        self.dispatcher = InboundDispatcher(self.state, self.engine, log_envelopes=log_envelopes)
        self.transport = transport or ChannelTransport()
        self.reconnect = ReconnectionController(
            self.transport,
            channel_name,
            interval_seconds=reconnect_interval,
            on_connected=self._on_connected,
            on_disconnected=self._on_disconnected,
        )
        self.click_through = ClickThroughTracker()
        self._max_inbound = max(1, int(max_inbound_per_tick))
        self._closed = False
        self.dropped_outbound = 0

    @property
    def view(self) -> ViewModel:
        return self.engine.view

    @property
    def connection_state(self) -> ConnectionState:
        return self.reconnect.state

    def tick(self, delta_seconds: float) -> bool:
        """Advance the session; returns False once the host asked the overlay to exit."""
        if self._closed:
            return False
        dt = max(0.0, float(delta_seconds))
        self.clock.advance(dt)
        self.reconnect.step(dt)
        self._drain_inbound()
        self.engine.sync()
        self.engine.update_animations(dt)
        self._flush_outbound()
        self.click_through.set_panel_visible(self.state.overlay_visible)
        if self.dispatcher.shutdown_requested:
            _LOGGER.info("Stopping after host shutdown request")
            return False
        return True

    def submit(self, intent: Intent) -> None:
        if self._closed:
            return
        self.engine.handle(intent)

    def set_panel_rect(self, x: int, y: int, width: int, height: int) -> None:
        self.click_through.set_panel_rect(PanelRect(x, y, width, height))

    def update_pointer(self, x: int, y: int, *, hovering_element: bool = False) -> Optional[bool]:
        return self.click_through.update(x, y, hovering_element=hovering_element)

    def consume_dirty(self) -> List[str]:
        return self.view.consume_dirty()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.transport.disconnect()
        _LOGGER.info("Overlay session closed")

    def _drain_inbound(self) -> int:
        handled = 0
        while handled < self._max_inbound:
            envelope = self.transport.try_receive()
            if envelope is None:
                break
            handled += 1
            self.dispatcher.dispatch(envelope)
            if self.dispatcher.shutdown_requested:
                break
        return handled

    def _flush_outbound(self) -> None:
        outbound = self.engine.drain_outbound()
        if not outbound:
            return
        dropped = 0
        for envelope in outbound:
            if not self.transport.is_connected() or not self.transport.send(envelope):
                dropped += 1
        if dropped:
            self.dropped_outbound += dropped
            _LOGGER.debug("Dropped %d outbound envelope(s) while disconnected", dropped)

    def _on_connected(self) -> None:
        self.engine.reset_session()

    def _on_disconnected(self) -> None:
        self.state.connected = False
