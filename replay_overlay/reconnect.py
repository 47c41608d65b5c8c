"""Fixed-interval reconnection state machine around the channel transport."""
from __future__ import annotations

import enum
from typing import Callable, Optional

from replay_overlay.logging_utils import get_logger
from replay_overlay.protocol import MSG_READY, Envelope
from replay_overlay.transport import ChannelTransport

_LOGGER = get_logger("Reconnect")

RECONNECT_INTERVAL_SECONDS = 2.0


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    ATTEMPTING = "attempting"
    CONNECTED = "connected"


def _noop() -> None:
    return None


class ReconnectionController:
    """Retries the channel every ``interval`` seconds of tick time, without backoff.

    Entering CONNECTED runs ``on_connected`` (session reset) and sends one
    ``ready`` envelope. Losing the channel runs ``on_disconnected``.
    """

    def __init__(
        self,
        transport: ChannelTransport,
        channel_name: str,
        *,
        interval_seconds: float = RECONNECT_INTERVAL_SECONDS,
        on_connected: Optional[Callable[[], None]] = None,
        on_disconnected: Optional[Callable[[], None]] = None,
        attempt_immediately: bool = True,
    ) -> None:
        self._transport = transport
        self._channel_name = channel_name
        self._interval = max(0.0, float(interval_seconds))
        self._on_connected = on_connected or _noop
        self._on_disconnected = on_disconnected or _noop
        self._state = ConnectionState.DISCONNECTED
        self._elapsed = 0.0
        self._attempt_pending = attempt_immediately
        self.attempts = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def channel_name(self) -> str:
        return self._channel_name

    def step(self, delta_seconds: float) -> bool:
        """Advance by one tick. Returns True when this step established a connection."""
        if self._state is ConnectionState.CONNECTED:
            if self._transport.is_connected():
                return False
            self._mark_disconnected("channel lost")
        self._elapsed += max(0.0, float(delta_seconds))
        if self._attempt_pending:
            self._attempt_pending = False
            self._elapsed = 0.0
        elif self._elapsed >= self._interval:
            # One attempt per step even after a long stall.
            self._elapsed = self._elapsed % self._interval if self._interval > 0 else 0.0
        else:
            return False
        return self._attempt()

    def _attempt(self) -> bool:
        self._state = ConnectionState.ATTEMPTING
        self.attempts += 1
        if not self._transport.connect(self._channel_name):
            self._state = ConnectionState.DISCONNECTED
            return False
        self._state = ConnectionState.CONNECTED
        self._on_connected()
        if not self._transport.send(Envelope(MSG_READY, {})):
            self._mark_disconnected("ready handshake failed")
            return False
        _LOGGER.info("Session started on %s (attempt %d)", self._channel_name, self.attempts)
        return True

    def _mark_disconnected(self, reason: str) -> None:
        _LOGGER.info("Disconnected from %s: %s; retrying every %.1fs", self._channel_name, reason, self._interval)
        self._state = ConnectionState.DISCONNECTED
        self._elapsed = 0.0
        self._on_disconnected()
