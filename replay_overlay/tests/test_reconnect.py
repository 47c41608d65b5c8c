from __future__ import annotations

from typing import List

from replay_overlay.protocol import Envelope
from replay_overlay.reconnect import ConnectionState, ReconnectionController


class FakeTransport:
    def __init__(self, *, accept: bool = True) -> None:
        self.accept = accept
        self.fail_send = False
        self.connected = False
        self.connect_calls: List[str] = []
        self.sent: List[Envelope] = []

    def connect(self, name: str) -> bool:
        self.connect_calls.append(name)
        self.connected = self.accept
        return self.accept

    def is_connected(self) -> bool:
        return self.connected

    def send(self, envelope: Envelope) -> bool:
        if self.fail_send:
            self.connected = False
            return False
        self.sent.append(envelope)
        return True


def test_first_step_attempts_immediately_and_sends_ready() -> None:
    transport = FakeTransport()
    events: List[str] = []
    controller = ReconnectionController(
        transport,
        "ReplayOverlayPipe",
        on_connected=lambda: events.append("connected"),
    )

    assert controller.step(0.016) is True

    assert controller.state is ConnectionState.CONNECTED
    assert transport.connect_calls == ["ReplayOverlayPipe"]
    assert transport.sent == [Envelope("ready", {})]
    assert events == ["connected"]


def test_ready_is_sent_once_per_session() -> None:
    transport = FakeTransport()
    controller = ReconnectionController(transport, "pipe")
    for _ in range(20):
        controller.step(0.5)
    assert transport.sent == [Envelope("ready", {})]
    assert controller.attempts == 1


def test_failed_attempts_are_spaced_by_the_interval() -> None:
    transport = FakeTransport(accept=False)
    controller = ReconnectionController(transport, "pipe")

    controller.step(0.5)
    assert controller.attempts == 1
    for _ in range(3):
        controller.step(0.5)
    assert controller.attempts == 1
    controller.step(0.5)
    assert controller.attempts == 2
    for _ in range(8):
        controller.step(0.5)
    assert controller.attempts == 4
    assert controller.state is ConnectionState.DISCONNECTED


def test_long_stall_still_attempts_only_once() -> None:
    transport = FakeTransport(accept=False)
    controller = ReconnectionController(transport, "pipe", attempt_immediately=False)
    controller.step(9.0)
    assert controller.attempts == 1


def test_channel_loss_triggers_hook_and_retry_after_interval() -> None:
    transport = FakeTransport()
    events: List[str] = []
    controller = ReconnectionController(
        transport,
        "pipe",
        on_connected=lambda: events.append("connected"),
        on_disconnected=lambda: events.append("disconnected"),
    )
    controller.step(0.0)
    transport.connected = False

    assert controller.step(1.0) is False
    assert controller.state is ConnectionState.DISCONNECTED
    assert events == ["connected", "disconnected"]

    assert controller.step(0.5) is False
    assert controller.step(0.5) is True
    assert events == ["connected", "disconnected", "connected"]
    assert transport.sent == [Envelope("ready", {}), Envelope("ready", {})]


def test_ready_send_failure_counts_as_disconnect() -> None:
    transport = FakeTransport()
    transport.fail_send = True
    events: List[str] = []
    controller = ReconnectionController(
        transport,
        "pipe",
        on_disconnected=lambda: events.append("disconnected"),
    )

    assert controller.step(0.0) is False
    assert controller.state is ConnectionState.DISCONNECTED
    assert events == ["disconnected"]

    transport.fail_send = False
    controller.step(2.0)
    assert controller.state is ConnectionState.CONNECTED
