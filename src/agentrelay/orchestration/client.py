"""HTTP client for agent-to-agent communication.

This module provides the A2AClient class for calling remote agents over
the A2A protocol: fetching agent cards from their well-known location and
sending ``tasks/*`` JSON-RPC requests to their endpoint.
"""

import logging
import uuid
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from agentrelay.agents.errors import (
    A2AError,
    AgentUnavailableError,
    ErrorCode,
    InvalidAgentCardError,
    RemoteAgentError,
)
from agentrelay.agents.models import AgentCard, Message, is_valid_agent_card
from agentrelay.api.jsonrpc import (
    METHOD_CANCEL,
    METHOD_GET,
    METHOD_SEND,
    JSONRPCError,
    JSONRPCRequest,
    JSONRPCResponse,
    error_response,
)
from agentrelay.tasks.models import Task, TaskCancelResult, TaskSendParams

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
WELL_KNOWN_PATH = "/.well-known/agent.json"


def agent_card_url(agent_url: str) -> str:
    """Return the well-known card URL of an agent endpoint."""
    return f"{agent_url.rstrip('/')}{WELL_KNOWN_PATH}"


class A2AClient:
    """HTTP client for agent-to-agent communication.

    Card fetches only accept HTTP 200. JSON-RPC calls never raise transport
    errors at the wire level: a failed POST is turned into an
    InternalError-coded JSON-RPC response, so callers always deal with the
    same error shape. RPC calls are not retried.

    Attributes:
        timeout: Timeout in seconds applied to every request
        _http_client: The underlying HTTP client for making requests

    Example:
        >>> async with A2AClient() as client:
        ...     card = await client.get_agent_card("http://localhost:3333/api/agents/a2a/vuex")
        ...     task = await client.send_task(card, message)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the A2A client.

        Args:
            timeout: Timeout in seconds for HTTP requests
            http_client: Optional pre-configured HTTP client (e.g. one built
                on a mock transport); a new one is created by default
        """
        self.timeout = timeout
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._http_client.aclose()

    async def __aenter__(self) -> "A2AClient":
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        await self.close()

    async def get_agent_card(self, agent_url: str) -> AgentCard:
        """Fetch the agent card of a remote agent.

        Args:
            agent_url: Base URL of the agent endpoint

        Returns:
            The parsed agent card

        Raises:
            AgentUnavailableError: If the card could not be fetched (the
                cause is logged)
            InvalidAgentCardError: If the body is not a valid agent card
        """
        url = agent_card_url(agent_url)
        logger.info("Fetching agent card from: %s", url)

        try:
            response = await self._http_client.get(url, timeout=self.timeout)
        except httpx.ConnectError as e:
            logger.error("Connection refused while fetching agent card from %s", url)
            raise AgentUnavailableError(agent_url, "connection refused") from e
        except httpx.TimeoutException as e:
            logger.error("Connection timed out while fetching agent card from %s", url)
            raise AgentUnavailableError(agent_url, "timed out") from e
        except httpx.HTTPError as e:
            logger.error("No response received while fetching agent card from %s: %s", url, e)
            raise AgentUnavailableError(agent_url, str(e) or "no response") from e

        if response.status_code != 200:
            logger.error(
                "HTTP error %s while fetching agent card from %s: %s",
                response.status_code,
                url,
                response.reason_phrase,
            )
            raise AgentUnavailableError(agent_url, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidAgentCardError("Agent card is not valid JSON", source=url) from e

        if not is_valid_agent_card(data):
            raise InvalidAgentCardError(source=url)

        try:
            card = AgentCard.model_validate(data)
        except ValidationError as e:
            raise InvalidAgentCardError(source=url) from e

        logger.info("Successfully retrieved agent card: %s", card.name)
        return card

    async def is_agent_accessible(self, agent_url: str) -> bool:
        """Check whether an agent serves a card at its well-known URL.

        Args:
            agent_url: Base URL of the agent endpoint

        Returns:
            True if the card could be fetched, False on any error
        """
        try:
            await self.get_agent_card(agent_url)
        except A2AError as e:
            logger.warning("Agent at %s is not accessible: %s", agent_url, e)
            return False
        return True

    async def send_task(
        self,
        agent_card: AgentCard,
        message: Message,
        session_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> Task:
        """Send a message to a remote agent as a new task.

        Args:
            agent_card: Card of the target agent
            message: Message to send
            session_id: Optional session identifier forwarded to the agent
            task_id: Optional task ID (a fresh UUID by default)

        Returns:
            The task as returned by the remote agent

        Raises:
            RemoteAgentError: If the agent (or the transport) reported an error
            A2AError: If the agent returned an empty result
        """
        logger.info("Sending task to agent: %s (%s)", agent_card.name, agent_card.url)

        params = TaskSendParams(
            id=task_id or str(uuid.uuid4()),
            session_id=session_id,
            message=message,
        )
        response = await self._send_jsonrpc_request(
            agent_card.url,
            METHOD_SEND,
            params.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

        if not response.result:
            if response.error is not None:
                raise self._remote_error(agent_card, response.error)
            raise A2AError(f"Agent {agent_card.name} returned empty result")

        return Task.model_validate(response.result)

    async def get_task(self, agent_card: AgentCard, task_id: str) -> Optional[Task]:
        """Fetch a task from a remote agent.

        Args:
            agent_card: Card of the agent owning the task
            task_id: ID of the task

        Returns:
            The task, or None if the agent does not know it

        Raises:
            RemoteAgentError: For any other error reported by the agent
        """
        logger.info("Getting task %s from agent: %s", task_id, agent_card.name)

        response = await self._send_jsonrpc_request(agent_card.url, METHOD_GET, {"id": task_id})
        if response.error is not None:
            if response.error.code == ErrorCode.TASK_NOT_FOUND:
                return None
            raise self._remote_error(agent_card, response.error)

        return Task.model_validate(response.result)

    async def cancel_task(self, agent_card: AgentCard, task_id: str) -> TaskCancelResult:
        """Ask a remote agent to cancel a task.

        Args:
            agent_card: Card of the agent owning the task
            task_id: ID of the task

        Returns:
            The cancel result reported by the agent

        Raises:
            RemoteAgentError: If the agent reported an error
        """
        logger.info("Canceling task %s on agent: %s", task_id, agent_card.name)

        response = await self._send_jsonrpc_request(
            agent_card.url, METHOD_CANCEL, {"id": task_id}
        )
        if response.error is not None:
            raise self._remote_error(agent_card, response.error)

        return TaskCancelResult.model_validate(response.result)

    @staticmethod
    def _remote_error(agent_card: AgentCard, rpc_error: JSONRPCError) -> RemoteAgentError:
        error = RemoteAgentError(
            agent_card.name,
            rpc_error.message,
            code=rpc_error.code,
            data=rpc_error.data,
        )
        logger.error("Error from agent %s: %s", agent_card.name, error)
        return error

    async def _send_jsonrpc_request(
        self, agent_url: str, method: str, params: dict[str, Any]
    ) -> JSONRPCResponse:
        request_id = str(uuid.uuid4())
        payload = JSONRPCRequest(id=request_id, method=method, params=params).model_dump()
        logger.debug("Sending JSON-RPC request to %s: %s", agent_url, method)

        try:
            response = await self._http_client.post(agent_url, json=payload, timeout=self.timeout)
        except httpx.ConnectError as e:
            logger.error("Connection refused when sending JSON-RPC request to %s", agent_url)
            reason = str(e) or "connection refused"
            return error_response(ErrorCode.INTERNAL_ERROR, reason, request_id)
        except httpx.TimeoutException as e:
            logger.error("Request timed out when sending JSON-RPC request to %s", agent_url)
            reason = str(e) or "request timed out"
            return error_response(ErrorCode.INTERNAL_ERROR, reason, request_id)
        except httpx.HTTPError as e:
            logger.error("No response received from %s for JSON-RPC request: %s", agent_url, e)
            return error_response(ErrorCode.INTERNAL_ERROR, str(e) or "no response", request_id)

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            logger.error(
                "HTTP error %s from %s: %s", response.status_code, agent_url, response.reason_phrase
            )
            if isinstance(body, dict) and body.get("error"):
                try:
                    return JSONRPCResponse.model_validate(body)
                except ValidationError:
                    pass
            return error_response(
                ErrorCode.INTERNAL_ERROR,
                f"HTTP {response.status_code} from {agent_url}",
                request_id,
            )

        if not isinstance(body, dict):
            return error_response(
                ErrorCode.INTERNAL_ERROR, f"Invalid JSON-RPC response from {agent_url}", request_id
            )

        try:
            return JSONRPCResponse.model_validate(body)
        except ValidationError:
            return error_response(
                ErrorCode.INTERNAL_ERROR, f"Invalid JSON-RPC response from {agent_url}", request_id
            )
