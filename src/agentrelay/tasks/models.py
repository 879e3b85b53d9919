"""Task lifecycle models and state management.

This module defines the core models for tasks exchanged over the A2A
protocol: task states, task status, the task itself and the parameter
objects of the ``tasks/*`` JSON-RPC methods.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentrelay.agents.models import Artifact, Message


def utc_timestamp() -> str:
    """Return the current time as an ISO 8601 string in UTC."""
    return datetime.now(timezone.utc).isoformat()


class TaskState(str, Enum):
    """Possible states in a task lifecycle.

    State transitions:
        submitted -> working | canceled
        working -> completed | failed | canceled
        completed (terminal)
        failed (terminal)
        canceled (terminal)

    ``input_required`` and ``unknown`` are part of the protocol but are
    never entered by this implementation.
    """

    UNKNOWN = "unknown"
    SUBMITTED = "submitted"
    WORKING = "working"
    INPUT_REQUIRED = "input_required"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"

    @classmethod
    def terminal_states(cls) -> set["TaskState"]:
        """Return set of terminal states that cannot be transitioned from.

        Returns:
            Set of terminal TaskState values
        """
        return {cls.COMPLETED, cls.FAILED, cls.CANCELED}

    def is_terminal(self) -> bool:
        """Check if this state is terminal.

        Returns:
            True if state is terminal, False otherwise
        """
        return self in self.terminal_states()


class TaskStatus(BaseModel):
    """Status of a task at a point in time.

    Attributes:
        state: Current state of the task
        message: Optional message attached to this status update; when set,
            it is also the last message appended to the task history
        timestamp: ISO 8601 timestamp of the status update
    """

    state: TaskState
    message: Optional[Message] = None
    timestamp: str = Field(default_factory=utc_timestamp)

    model_config = ConfigDict(frozen=True)


class Task(BaseModel):
    """A unit of work owned by the task store of one agent.

    Attributes:
        id: Caller-assigned task identifier
        session_id: Optional identifier grouping a conversation
        status: Current status of the task
        history: Append-only list of messages
        artifacts: Side-channel outputs (e.g. which agent was picked)
        metadata: Optional task metadata
    """

    id: str = Field(..., min_length=1)
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    status: TaskStatus
    history: list[Message] = Field(default_factory=list)
    artifacts: list[Artifact] = Field(default_factory=list)
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize the task with camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


class PushNotificationConfig(BaseModel):
    """Push notification target, validated as part of ``tasks/send`` params.

    Notifications are never sent; the config is only carried on the request.
    """

    url: str
    token: Optional[str] = None
    authentication: Optional[dict[str, Any]] = None


class TaskSendParams(BaseModel):
    """Parameters for the ``tasks/send`` JSON-RPC method.

    Attributes:
        id: Caller-assigned task identifier
        session_id: Optional session identifier
        message: The message to process
        accepted_output_modes: Optional output modes the caller accepts
        push_notification: Optional push notification config
        metadata: Optional task metadata
    """

    id: str = Field(..., min_length=1)
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    message: Message
    accepted_output_modes: Optional[list[str]] = Field(default=None, alias="acceptedOutputModes")
    push_notification: Optional[PushNotificationConfig] = Field(
        default=None, alias="pushNotification"
    )
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("message")
    @classmethod
    def validate_message_has_parts(cls, value: Message) -> Message:
        """Validate that the message carries at least one part.

        Args:
            value: The message to validate

        Returns:
            The validated message

        Raises:
            ValueError: If the message has no parts
        """
        if not value.parts:
            raise ValueError("Message must have at least one part")
        return value


class TaskIdParams(BaseModel):
    """Parameters for the ``tasks/get`` and ``tasks/cancel`` methods."""

    id: str = Field(..., min_length=1)


class TaskCancelResult(BaseModel):
    """Result of the ``tasks/cancel`` method.

    Attributes:
        id: ID of the task
        canceled: Whether this call moved the task to the canceled state
    """

    id: str
    canceled: bool
