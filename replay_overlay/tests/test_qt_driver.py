from __future__ import annotations

import os

import pytest

pytest.importorskip("PyQt6.QtWidgets")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from replay_overlay.controller import OverlayController  # noqa: E402
from replay_overlay.protocol import Envelope, encode_frame  # noqa: E402
from replay_overlay.qt_driver import OverlayTickDriver  # noqa: E402
from replay_overlay.transport import ChannelTransport  # noqa: E402

pytestmark = pytest.mark.pyqt_required


@pytest.fixture
def qt_app(monkeypatch):
    monkeypatch.setenv("QT_QPA_PLATFORM", os.getenv("QT_QPA_PLATFORM", "offscreen"))
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


class HostSocket:
    def __init__(self) -> None:
        self.incoming = bytearray()
        self.sent = bytearray()
        self.closed = False

    def recv(self, bufsize: int) -> bytes:
        if not self.incoming:
            raise BlockingIOError()
        chunk = bytes(self.incoming[:bufsize])
        del self.incoming[:bufsize]
        return chunk

    def send(self, data) -> int:
        self.sent.extend(bytes(data))
        return len(data)

    def close(self) -> None:
        self.closed = True


def _driver(sock: HostSocket) -> OverlayTickDriver:
    transport = ChannelTransport(connect=lambda _name: sock)
    return OverlayTickDriver(OverlayController("pipe", transport=transport))


def test_tick_emits_dirty_fields_and_visibility(qt_app):
    sock = HostSocket()
    driver = _driver(sock)
    fields: list = []
    visibility: list = []
    driver.fields_changed.connect(fields.append)
    driver.visibility_changed.connect(visibility.append)

    sock.incoming.extend(encode_frame(Envelope("state_update", {"currentScene": "Game"})))
    sock.incoming.extend(encode_frame(Envelope("show_overlay", {})))
    assert driver.tick_once(0.016) is True

    assert "current_scene" in fields[0]
    assert visibility == [True]

    assert driver.tick_once(0.016) is True
    assert visibility == [True]


def test_shutdown_stops_driver_and_emits_finished(qt_app):
    sock = HostSocket()
    driver = _driver(sock)
    finished: list = []
    driver.finished.connect(lambda: finished.append(True))
    driver.start()
    assert driver.is_running() is True

    sock.incoming.extend(encode_frame(Envelope("shutdown", {})))
    assert driver.tick_once(0.016) is False

    assert finished == [True]
    assert driver.is_running() is False
    assert sock.closed is True
