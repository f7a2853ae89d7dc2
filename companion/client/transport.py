"""
Transport and UI Sink Interfaces

The real-time provider's client and the page renderer live outside this
package. These protocols describe the calls the companion makes on them.
"""

import logging
from typing import Protocol


class DataStreamTransport(Protocol):
    """Data channel multiplexed onto the media session."""

    async def send_stream_message(self, data: bytes | str) -> None:
        """Send one message to every participant. Raises on failure."""
        ...


class ChannelTransport(DataStreamTransport, Protocol):
    """A data stream that can also join and leave channels."""

    async def join(self, app_id: str, channel: str, token: str | None, uid: int | str) -> int | str:
        """Join a channel and return the uid actually assigned."""
        ...

    async def leave(self) -> None:
        ...


class RenderSink(Protocol):
    """Receives every transcript line for display."""

    def render(self, speaker: str, text: str, kind: str) -> None:
        ...


class LoggingRenderSink:
    """RenderSink that writes transcript lines to a logger."""

    def __init__(self, name: str = "companion.transcript", level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.level = level

    def render(self, speaker: str, text: str, kind: str) -> None:
        self.logger.log(self.level, f"[{kind}] {speaker}: {text}")
