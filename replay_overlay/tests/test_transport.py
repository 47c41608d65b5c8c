import json
from pathlib import Path

from replay_overlay.errors import TransportError
from replay_overlay.protocol import LENGTH_PREFIX, MAX_FRAME_BYTES, Envelope, decode_envelope, encode_frame
from replay_overlay.transport import ChannelTransport, resolve_channel_path


class FakeSocket:
    def __init__(self, incoming: bytes = b"", *, max_send: int | None = None) -> None:
        self.incoming = bytearray(incoming)
        self.sent = bytearray()
        self.closed = False
        self.eof = False
        self.max_send = max_send
        self.fail_send = False
        self.fail_recv = False
        self.send_calls = 0

    def feed(self, data: bytes) -> None:
        self.incoming.extend(data)

    def recv(self, bufsize: int) -> bytes:
        if self.fail_recv:
            raise ConnectionResetError("reset by peer")
        if not self.incoming:
            if self.eof:
                return b""
            raise BlockingIOError()
        chunk = bytes(self.incoming[:bufsize])
        del self.incoming[:bufsize]
        return chunk

    def send(self, data) -> int:
        self.send_calls += 1
        if self.fail_send:
            raise BrokenPipeError("broken pipe")
        payload = bytes(data)
        if self.max_send is not None:
            payload = payload[: self.max_send]
        self.sent.extend(payload)
        return len(payload)

    def close(self) -> None:
        self.closed = True


def sent_envelopes(sock: FakeSocket) -> list[Envelope]:
    data = bytes(sock.sent)
    envelopes = []
    offset = 0
    while offset < len(data):
        (length,) = LENGTH_PREFIX.unpack_from(data, offset)
        offset += LENGTH_PREFIX.size
        envelopes.append(decode_envelope(data[offset : offset + length]).envelope)
        offset += length
    return envelopes


def _connected(sock: FakeSocket, **kwargs) -> ChannelTransport:
    transport = ChannelTransport(connect=lambda name: sock, **kwargs)
    assert transport.connect("TestPipe") is True
    return transport


def test_connect_failure_reports_false_without_raising() -> None:
    def refuse(name):
        raise TransportError("no listener")

    transport = ChannelTransport(connect=refuse)
    assert transport.connect("TestPipe") is False
    assert transport.is_connected() is False
    assert transport.channel_name == "TestPipe"


def test_connect_oserror_is_contained() -> None:
    def refuse(name):
        raise FileNotFoundError(name)

    transport = ChannelTransport(connect=refuse)
    assert transport.connect("TestPipe") is False


def test_send_writes_length_prefixed_double_encoded_body() -> None:
    sock = FakeSocket()
    transport = _connected(sock)

    assert transport.send(Envelope("switch_scene", {"name": "Game"})) is True

    data = bytes(sock.sent)
    (length,) = LENGTH_PREFIX.unpack_from(data, 0)
    assert length == len(data) - LENGTH_PREFIX.size
    outer = json.loads(data[LENGTH_PREFIX.size :].decode("utf-8"))
    assert outer["type"] == "switch_scene"
    assert isinstance(outer["payload"], str)
    assert json.loads(outer["payload"]) == {"name": "Game"}


def test_send_loops_over_partial_writes() -> None:
    sock = FakeSocket(max_send=3)
    transport = _connected(sock)

    assert transport.send(Envelope("toggle_mute", {"name": "Mic/Aux"})) is True

    assert sock.send_calls > 1
    assert sent_envelopes(sock) == [Envelope("toggle_mute", {"name": "Mic/Aux"})]


def test_send_failure_disconnects() -> None:
    sock = FakeSocket()
    transport = _connected(sock)
    sock.fail_send = True

    assert transport.send(Envelope("toggle_stream")) is False
    assert transport.is_connected() is False
    assert sock.closed is True


def test_send_without_connection_returns_false() -> None:
    transport = ChannelTransport(connect=lambda name: FakeSocket())
    assert transport.send(Envelope("ready")) is False


def test_try_receive_without_data_returns_none_and_stays_connected() -> None:
    sock = FakeSocket()
    transport = _connected(sock)
    assert transport.try_receive() is None
    assert transport.is_connected() is True


def test_try_receive_waits_for_the_whole_frame() -> None:
    frame = encode_frame(Envelope("state_update", {"currentScene": "Game"}))
    sock = FakeSocket(frame[:7])
    transport = _connected(sock)

    assert transport.try_receive() is None
    sock.feed(frame[7:])
    assert transport.try_receive() == Envelope("state_update", {"currentScene": "Game"})


def test_multiple_buffered_frames_come_out_one_at_a_time() -> None:
    first = encode_frame(Envelope("show_overlay"))
    second = encode_frame(Envelope("hide_overlay"))
    sock = FakeSocket(first + second)
    transport = _connected(sock, recv_chunk=4)

    assert transport.try_receive().type == "show_overlay"
    assert transport.try_receive().type == "hide_overlay"
    assert transport.try_receive() is None


def test_oversized_length_prefix_disconnects_without_dispatch() -> None:
    sock = FakeSocket(LENGTH_PREFIX.pack(MAX_FRAME_BYTES + 1) + b"{}")
    transport = _connected(sock)

    assert transport.try_receive() is None
    assert transport.is_connected() is False
    assert sock.closed is True


def test_zero_length_prefix_is_corruption() -> None:
    sock = FakeSocket(LENGTH_PREFIX.pack(0))
    transport = _connected(sock)

    assert transport.try_receive() is None
    assert transport.is_connected() is False


def test_undecodable_frame_is_skipped() -> None:
    bad_body = b"not json"
    good = encode_frame(Envelope("shutdown"))
    sock = FakeSocket(LENGTH_PREFIX.pack(len(bad_body)) + bad_body + good)
    transport = _connected(sock)

    assert transport.try_receive() == Envelope("shutdown", {})
    assert transport.is_connected() is True


def test_peer_closure_delivers_buffered_frames_then_disconnects() -> None:
    sock = FakeSocket(encode_frame(Envelope("show_overlay")))
    sock.eof = True
    transport = _connected(sock)

    assert transport.try_receive() == Envelope("show_overlay", {})
    assert transport.try_receive() is None
    assert transport.is_connected() is False


def test_peer_closure_mid_frame_disconnects() -> None:
    frame = encode_frame(Envelope("state_update", {"connected": True}))
    sock = FakeSocket(frame[:-2])
    sock.eof = True
    transport = _connected(sock)

    assert transport.try_receive() is None
    assert transport.is_connected() is False


def test_read_error_disconnects() -> None:
    sock = FakeSocket()
    transport = _connected(sock)
    sock.fail_recv = True

    assert transport.try_receive() is None
    assert transport.is_connected() is False


def test_reconnect_drops_stale_buffer() -> None:
    frame = encode_frame(Envelope("show_overlay"))
    sockets = [FakeSocket(frame[:5]), FakeSocket(frame)]
    transport = ChannelTransport(connect=lambda name: sockets.pop(0))

    assert transport.connect("TestPipe") is True
    assert transport.try_receive() is None
    assert transport.connect("TestPipe") is True
    assert transport.try_receive() == Envelope("show_overlay", {})


def test_channel_path_uses_runtime_dir(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path))
    assert resolve_channel_path("ReplayOverlayPipe") == tmp_path / "ReplayOverlayPipe.sock"


def test_channel_path_with_separator_is_used_verbatim(tmp_path: Path) -> None:
    target = tmp_path / "custom.sock"
    assert resolve_channel_path(str(target)) == target
