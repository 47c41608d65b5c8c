"""Length-prefixed duplex channel to the host process."""
from __future__ import annotations

import os
import select
import socket
import tempfile
from pathlib import Path
from typing import Callable, Optional, Protocol

from replay_overlay.errors import FramingError, TransportError
from replay_overlay.logging_utils import get_logger
from replay_overlay.protocol import (
    LENGTH_PREFIX,
    MAX_FRAME_BYTES,
    Envelope,
    decode_envelope,
    encode_frame,
    frame_length_valid,
)

_LOGGER = get_logger("Transport")

RECV_CHUNK_BYTES = 64 * 1024
CONNECT_TIMEOUT_SECONDS = 1.0
SEND_STALL_TIMEOUT_SECONDS = 2.0


class SocketLike(Protocol):
    def send(self, data: bytes) -> int: ...
    def recv(self, bufsize: int) -> bytes: ...
    def close(self) -> None: ...


ConnectFn = Callable[[str], SocketLike]


def resolve_channel_path(name: str) -> Path:
    """Map a channel name onto the Unix socket path the host listens on."""
    if os.sep in name or (os.altsep and os.altsep in name):
        return Path(name).expanduser()
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR") or tempfile.gettempdir()
    return Path(runtime_dir) / f"{name}.sock"


def connect_unix_channel(name: str) -> SocketLike:
    family = getattr(socket, "AF_UNIX", None)
    if family is None:
        raise TransportError("Unix domain sockets are not available on this platform")
    path = resolve_channel_path(name)
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.settimeout(CONNECT_TIMEOUT_SECONDS)
        sock.connect(str(path))
        sock.setblocking(False)
    except OSError as exc:
        sock.close()
        raise TransportError(f"Connect to {path} failed: {exc}") from exc
    return sock


class ChannelTransport:
    """Owns the socket and the receive buffer, and finds message boundaries.

    Nothing raised by the socket or the codec escapes ``connect``, ``send`` or
    ``try_receive``; failures disconnect and are reported through return values.
    """

    def __init__(
        self,
        *,
        connect: Optional[ConnectFn] = None,
        recv_chunk: int = RECV_CHUNK_BYTES,
        send_stall_timeout: float = SEND_STALL_TIMEOUT_SECONDS,
    ) -> None:
        self._connect = connect or connect_unix_channel
        self._recv_chunk = max(1, int(recv_chunk))
        self._send_stall_timeout = send_stall_timeout
        self._sock: Optional[SocketLike] = None
        self._buffer = bytearray()
        self._peer_closed = False
        self._channel_name = ""

    @property
    def channel_name(self) -> str:
        return self._channel_name

    def is_connected(self) -> bool:
        return self._sock is not None

    def connect(self, name: str) -> bool:
        self.disconnect()
        self._channel_name = name
        try:
            sock = self._connect(name)
        except (TransportError, OSError) as exc:
            _LOGGER.debug("Channel %s unavailable: %s", name, exc)
            return False
        self._sock = sock
        self._peer_closed = False
        _LOGGER.info("Connected to channel %s", name)
        return True

    def disconnect(self) -> None:
        sock = self._sock
        self._sock = None
        self._buffer.clear()
        self._peer_closed = False
        if sock is None:
            return
        try:
            sock.close()
        except OSError as exc:
            _LOGGER.debug("Error closing channel socket: %s", exc)

    def send(self, envelope: Envelope) -> bool:
        if self._sock is None:
            return False
        try:
            frame = encode_frame(envelope)
        except (TypeError, ValueError) as exc:
            _LOGGER.warning("Failed to encode outbound %s envelope: %s", envelope.type, exc)
            return False
        try:
            self._write_all(frame)
        except TransportError as exc:
            _LOGGER.warning("Send of %s failed; disconnecting: %s", envelope.type, exc)
            self.disconnect()
            return False
        return True

    def try_receive(self) -> Optional[Envelope]:
        """Return the next buffered envelope, or None when no complete frame is available."""
        if self._sock is None:
            return None
        try:
            self._fill_buffer()
        except TransportError as exc:
            _LOGGER.warning("Receive failed; disconnecting: %s", exc)
            self.disconnect()
            return None
        while True:
            try:
                body = self._next_frame()
            except FramingError as exc:
                _LOGGER.warning("Channel corrupted (%s); dropping %d buffered bytes", exc, len(self._buffer))
                self.disconnect()
                return None
            if body is None:
                if self._peer_closed:
                    _LOGGER.info("Host closed the channel")
                    self.disconnect()
                return None
            result = decode_envelope(body)
            if result.ok:
                return result.envelope
            _LOGGER.warning("Dropped undecodable envelope (%s) %s", result.error.value if result.error else "?", result.detail)

    def _next_frame(self) -> Optional[bytes]:
        header_size = LENGTH_PREFIX.size
        if len(self._buffer) < header_size:
            return None
        (length,) = LENGTH_PREFIX.unpack_from(self._buffer, 0)
        if not frame_length_valid(length):
            raise FramingError(length)
        end = header_size + length
        if len(self._buffer) < end:
            return None
        body = bytes(self._buffer[header_size:end])
        del self._buffer[:end]
        return body

    def _fill_buffer(self) -> None:
        sock = self._sock
        if sock is None or self._peer_closed:
            return
        limit = LENGTH_PREFIX.size + MAX_FRAME_BYTES
        while len(self._buffer) < limit:
            try:
                chunk = sock.recv(self._recv_chunk)
            except (BlockingIOError, socket.timeout):
                return
            except InterruptedError:
                continue
            except OSError as exc:
                raise TransportError(f"read failed: {exc}") from exc
            if not chunk:
                self._peer_closed = True
                return
            self._buffer.extend(chunk)

    def _write_all(self, data: bytes) -> None:
        sock = self._sock
        if sock is None:
            raise TransportError("not connected")
        view = memoryview(data)
        offset = 0
        while offset < len(view):
            try:
                written = sock.send(view[offset:])
            except (BlockingIOError, socket.timeout):
                self._wait_writable(sock)
                continue
            except InterruptedError:
                continue
            except OSError as exc:
                raise TransportError(f"write failed: {exc}") from exc
            if written <= 0:
                raise TransportError("short write; channel closed")
            offset += written

    def _wait_writable(self, sock: SocketLike) -> None:
        try:
            _, writable, _ = select.select([], [sock], [], self._send_stall_timeout)
        except (OSError, ValueError, TypeError) as exc:
            raise TransportError(f"write wait failed: {exc}") from exc
        if not writable:
            raise TransportError("write stalled")
