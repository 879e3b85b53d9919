"""Capability contract implemented by every agent.

An agent is anything that can describe itself with an AgentCard and turn
an incoming message into a response message. The protocol state machine
(task creation, working/completed/failed transitions, cancellation) lives
once in :class:`agentrelay.tasks.runner.ProtocolRunner`, which is
parameterized over any implementation of this contract.
"""

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from agentrelay.agents.models import AgentCard, Artifact, Message

if TYPE_CHECKING:
    from agentrelay.tasks.models import Task


class TaskContext(Protocol):
    """Handle on the task an agent is currently processing.

    Lets an agent record artifacts on its own task without depending on
    the task store. The actual implementation is provided by the
    ProtocolRunner.
    """

    task_id: str

    async def add_artifact(self, artifact: Artifact) -> Optional["Task"]:
        """Append an artifact to the task being processed.

        Args:
            artifact: The artifact to record

        Returns:
            The updated task, or None if the task no longer exists
        """
        ...


@runtime_checkable
class A2AAgent(Protocol):
    """Structural interface for A2A agents.

    Example:
        >>> class EchoAgent:
        ...     def get_agent_card(self) -> AgentCard:
        ...         return card
        ...
        ...     async def process_message(self, message, task_id, session_id=None, context=None):
        ...         return message
        >>> isinstance(EchoAgent(), A2AAgent)
        True
    """

    def get_agent_card(self) -> AgentCard:
        """Return the static descriptor of this agent."""
        ...

    async def process_message(
        self,
        message: Message,
        task_id: str,
        session_id: Optional[str] = None,
        context: Optional[TaskContext] = None,
    ) -> Message:
        """Process a message and return the agent's response.

        Args:
            message: The incoming message
            task_id: ID of the task being processed
            session_id: Optional session identifier
            context: Optional handle on the task for recording artifacts

        Returns:
            The response message

        Raises:
            Exception: Any error; the runner records it on the task and
                re-raises it to the transport layer
        """
        ...
