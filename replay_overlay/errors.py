"""Error taxonomy for the overlay channel."""
from __future__ import annotations


class OverlayChannelError(Exception):
    """Base class for channel failures; never fatal to the tick loop."""


class TransportError(OverlayChannelError):
    """Socket-level failure on the channel."""


class FramingError(TransportError):
    """Length prefix out of range; byte alignment can no longer be trusted."""

    def __init__(self, length: int) -> None:
        super().__init__(f"Invalid frame length {length}")
        self.length = length
