"""Async HTTP client for the agent service (channel info, start/stop agent)."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from companion.config.settings import AGENT_SERVICE_TIMEOUT, AGENT_SERVICE_URL

logger = logging.getLogger(__name__)


class AgentServiceError(Exception):
    """The agent service was unreachable or rejected a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ChannelInfo(BaseModel):
    """Connection details for joining a channel."""

    model_config = ConfigDict(populate_by_name=True)

    app_id: str = Field(alias="appId")
    channel: str
    uid: int | str
    token: str | None = None


class AgentSession(BaseModel):
    """Agent started by the service for one conversation."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    agent_id: str | int | None = Field(default=None, alias="agentId")
    demo: bool = False
    message: str | None = None


def _error_message(response: httpx.Response) -> str:
    """Prefer the service's own error text over the bare status."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"


class AgentServiceClient:
    """Async HTTP client for the agent service with connection pooling."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or AGENT_SERVICE_URL).rstrip("/")
        self.timeout = AGENT_SERVICE_TIMEOUT if timeout is None else timeout
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client with connection pooling."""
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
        return self._http

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        http = await self._get_http()
        try:
            return await http.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise AgentServiceError(f"Agent service unreachable: {e}") from e

    async def get_channel_info(self, channel: str, uid: int) -> ChannelInfo:
        """
        Fetch app id and channel details for joining.

        Raises:
            AgentServiceError: on transport failure, non-2xx status or a
                malformed response body
        """
        response = await self._request("GET", "/channel-info", params={"channel": channel, "uid": uid})
        if not response.is_success:
            raise AgentServiceError(
                f"Failed to get channel info: {response.status_code}", response.status_code
            )

        try:
            return ChannelInfo.model_validate(response.json())
        except ValueError as e:
            raise AgentServiceError(f"Invalid channel info response: {e}") from e

    async def start_conversation(self, channel: str, agent_name: str, remote_uid: int | str) -> AgentSession:
        """
        Ask the service to start an agent in the channel.

        Args:
            channel: Channel name
            agent_name: Display name for the agent
            remote_uid: Our uid in the channel, the agent's conversation partner

        Raises:
            AgentServiceError: with the service's error text on failure
        """
        response = await self._request(
            "POST",
            "/start",
            json={"channel": channel, "agentName": agent_name, "remoteUid": remote_uid},
        )
        if not response.is_success:
            raise AgentServiceError(_error_message(response), response.status_code)

        try:
            session = AgentSession.model_validate(response.json())
        except ValueError as e:
            raise AgentServiceError(f"Invalid start response: {e}") from e

        logger.info(f"Agent started in {channel}: {session.agent_id}")
        return session

    async def stop_conversation(self, agent_id: str | int) -> bool:
        """Stop an agent. Failures are logged, not raised."""
        try:
            response = await self._request("POST", f"/stop/{agent_id}")
        except AgentServiceError as e:
            logger.warning(f"Failed to stop AI agent {agent_id}: {e}")
            return False

        if not response.is_success:
            logger.warning(f"Failed to stop AI agent {agent_id}: {response.status_code}")
        return response.is_success

    async def close(self):
        """Close HTTP client."""
        if self._http:
            await self._http.aclose()
            self._http = None
