"""Custom exceptions for the A2A protocol layer.

This module defines the error codes used on the JSON-RPC wire and the
exception hierarchy raised by agents, the task runner and the client.
Every exception carries the JSON-RPC code it maps to, so the transport
layer can convert it without inspecting the exception type.
"""

from enum import IntEnum
from typing import Any, Optional


class ErrorCode(IntEnum):
    """JSON-RPC and A2A error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    TASK_NOT_FOUND = 404
    TASK_CANCELED = 499


class A2AError(Exception):
    """Base exception for all A2A protocol errors.

    Attributes:
        code: JSON-RPC error code
        message: Human-readable error message
        data: Optional additional error data
    """

    def __init__(
        self,
        message: str,
        code: int = ErrorCode.INTERNAL_ERROR,
        data: Optional[Any] = None,
    ) -> None:
        """Initialize A2A error.

        Args:
            message: Human-readable error description
            code: JSON-RPC error code
            data: Optional additional error data
        """
        super().__init__(message)
        self.message = message
        self.code = int(code)
        self.data = data

    def to_jsonrpc_error(self) -> dict[str, Any]:
        """Convert the error to a JSON-RPC error object.

        Returns:
            Dictionary with code, message and (if present) data
        """
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class TaskNotFoundError(A2AError):
    """Raised when a task cannot be found in the task store."""

    def __init__(self, task_id: str) -> None:
        """Initialize task not found error.

        Args:
            task_id: The ID of the task that was not found
        """
        super().__init__(
            message=f"Task not found: {task_id}",
            code=ErrorCode.TASK_NOT_FOUND,
        )
        self.task_id = task_id


class InvalidAgentCardError(A2AError):
    """Raised when an agent card lacks required fields."""

    def __init__(self, message: str = "Invalid agent card", source: Optional[str] = None) -> None:
        """Initialize invalid agent card error.

        Args:
            message: Description of the validation failure
            source: Optional URL the card was fetched from
        """
        if source:
            message = f"{message} received from {source}"
        super().__init__(message=message, code=ErrorCode.INVALID_PARAMS)
        self.source = source


class AgentUnavailableError(A2AError):
    """Raised when a remote agent cannot be reached over HTTP.

    The cause (connection refused, timeout, HTTP status) is logged where
    the failure happens; callers only ever see this single error type.
    """

    def __init__(self, url: str, reason: str) -> None:
        """Initialize agent unavailable error.

        Args:
            url: URL that could not be reached
            reason: Short description of the transport failure
        """
        super().__init__(
            message=f"Agent at {url} is not accessible: {reason}",
            code=ErrorCode.INTERNAL_ERROR,
        )
        self.url = url
        self.reason = reason


class RemoteAgentError(A2AError):
    """Raised when a remote agent answers with a JSON-RPC error.

    Carries the remote code and message so the failure looks the same
    whether it happened locally or on the remote side.
    """

    def __init__(
        self,
        agent_name: str,
        message: str,
        code: int = ErrorCode.INTERNAL_ERROR,
        data: Optional[Any] = None,
    ) -> None:
        """Initialize remote agent error.

        Args:
            agent_name: Name of the agent that returned the error
            message: Remote error message
            code: Remote error code
            data: Optional remote error data
        """
        super().__init__(
            message=f"Agent {agent_name} returned error: {message} (code: {int(code)})",
            code=code,
            data=data,
        )
        self.agent_name = agent_name
        self.remote_message = message
