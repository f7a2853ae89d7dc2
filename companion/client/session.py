"""
Conversation Session

Start/end lifecycle of one companion conversation:

  start: channel info -> join channel -> start agent
  end:   stop agent -> leave channel -> reset state, clear transcript

Inbound data-stream frames go to the TranscriptManager while connected.
"""

import logging
import random
from enum import Enum
from typing import Any

from .agent import AgentServiceClient, AgentSession
from .entry import EntryKind, TranscriptEntry
from .messages import SPEAKER_SYSTEM
from .transcript import TranscriptManager
from .transport import ChannelTransport, RenderSink

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    OFFLINE = "offline"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


def random_uid() -> int:
    """Client uid requested when joining a channel."""
    return random.randint(1000, 100999)


class CompanionSession:
    """
    One conversation with an AI companion.

    Usage:
        session = CompanionSession(transport=rtc_client, sink=ui)
        rtc_client.on_stream_message = session.handle_stream_message

        await session.start("my-channel", "Aiko")
        await session.send_message("hello")
        await session.end()
    """

    def __init__(
        self,
        transport: ChannelTransport,
        agent_client: AgentServiceClient | None = None,
        transcript: TranscriptManager | None = None,
        sink: RenderSink | None = None,
    ):
        self.transport = transport
        self.agent_client = agent_client if agent_client is not None else AgentServiceClient()
        self.transcript = transcript if transcript is not None else TranscriptManager(sink=sink)
        if self.transcript.transport is None:
            self.transcript.transport = transport

        self.state = SessionState.OFFLINE
        self.channel: str | None = None
        self.uid: int | str | None = None
        self.agent: AgentSession | None = None

    @property
    def is_connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    async def start(self, channel: str, agent_name: str, uid: int | None = None) -> AgentSession | None:
        """
        Join the channel and bring the agent in.

        Returns:
            The started AgentSession, or None if a session is active or still ending

        Raises:
            ValueError: if channel or agent name is blank
            AgentServiceError: if the agent service fails
            Exception: whatever the transport raises on join
        """
        if self.state is not SessionState.OFFLINE:
            logger.warning(f"Session {self.state.value}, ignoring start")
            return None

        channel = channel.strip()
        agent_name = agent_name.strip()
        if not channel or not agent_name:
            raise ValueError("Both channel name and companion name are required")

        self.state = SessionState.CONNECTING
        try:
            info = await self.agent_client.get_channel_info(channel, uid or random_uid())
            self.uid = await self.transport.join(info.app_id, info.channel, info.token, info.uid)
            logger.info(f"Joined channel {info.channel} as {self.uid}")

            agent = await self.agent_client.start_conversation(channel, agent_name, self.uid)
        except Exception as e:
            logger.error(f"Failed to start conversation: {e}")
            if self.uid is not None:
                await self._leave_channel()
            self._reset()
            raise

        self.channel = channel
        self.agent = agent
        self.state = SessionState.CONNECTED

        if agent.demo and agent.message:
            self.transcript.add_entry(SPEAKER_SYSTEM, f"Demo mode: {agent.message}", EntryKind.SYSTEM)

        logger.info(f"Conversation started with {agent_name} in {channel}")
        return agent

    async def end(self) -> None:
        """Stop the agent and leave. State is always reset, even on errors."""
        if not self.is_connected:
            return

        self.state = SessionState.DISCONNECTING
        try:
            if self.agent and self.agent.agent_id is not None:
                await self.agent_client.stop_conversation(self.agent.agent_id)
            await self.transport.leave()
            logger.info(f"Left channel {self.channel}")
        except Exception as e:
            logger.error(f"Error ending conversation: {e}")
        finally:
            self._reset()
            self.transcript.clear()

    async def _leave_channel(self) -> None:
        try:
            await self.transport.leave()
        except Exception as e:
            logger.warning(f"Failed to leave channel after start error: {e}")

    def _reset(self) -> None:
        self.state = SessionState.OFFLINE
        self.channel = None
        self.uid = None
        self.agent = None

    def handle_stream_message(self, source_id: Any, payload: Any) -> TranscriptEntry | None:
        """Data-stream callback: feed one frame to the transcript."""
        return self.transcript.handle_stream_message(source_id, payload)

    async def send_message(self, text: str) -> bool:
        return await self.transcript.send_message(text)

    async def close(self) -> None:
        """End any active conversation and release the HTTP client."""
        await self.end()
        await self.agent_client.close()

    def __repr__(self) -> str:
        return f"CompanionSession({self.state.value}, channel={self.channel})"
