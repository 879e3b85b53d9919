"""Protocol runner driving the A2A task state machine.

This module provides the ProtocolRunner class, which binds one agent to
one task store and implements the ``tasks/send``, ``tasks/get`` and
``tasks/cancel`` behaviour shared by every agent.
"""

import logging
from typing import Optional

from agentrelay.agents.base import A2AAgent
from agentrelay.agents.helpers import create_response_message
from agentrelay.agents.models import AgentCard, Artifact, Message
from agentrelay.tasks.models import Task, TaskCancelResult, TaskSendParams, TaskState
from agentrelay.tasks.store import InMemoryTaskStore

logger = logging.getLogger(__name__)

WORKING_MESSAGE_TEXT = "Processing your request..."


class _RunnerTaskContext:
    """TaskContext implementation bound to one task of one runner."""

    def __init__(self, runner: "ProtocolRunner", task_id: str) -> None:
        self.task_id = task_id
        self._runner = runner

    async def add_artifact(self, artifact: Artifact) -> Optional[Task]:
        return await self._runner.add_artifact(self.task_id, artifact)


class ProtocolRunner:
    """Runs the A2A task lifecycle for a single agent.

    The runner is responsible for:
    - Creating (or re-using) the task for an incoming ``tasks/send``
    - Recording the working state before the agent starts
    - Recording completion, or failure followed by re-raising the error
    - Answering ``tasks/get`` and ``tasks/cancel``

    Attributes:
        agent: The agent whose messages are processed
        store: Task store owned by this agent

    Example:
        >>> runner = ProtocolRunner(agent=my_agent)
        >>> task = await runner.handle_task_send(params)
        >>> task.status.state
        <TaskState.COMPLETED: 'completed'>
    """

    def __init__(self, agent: A2AAgent, store: Optional[InMemoryTaskStore] = None) -> None:
        """Initialize the runner.

        Args:
            agent: Agent implementing the A2AAgent contract
            store: Optional task store (a new in-memory store by default)
        """
        self.agent = agent
        self.store = store if store is not None else InMemoryTaskStore()

    def get_agent_card(self) -> AgentCard:
        """Return the card of the wrapped agent."""
        return self.agent.get_agent_card()

    async def handle_task_send(self, params: TaskSendParams) -> Task:
        """Handle a ``tasks/send`` request.

        The task is created (or fetched), moved to ``working`` with a
        progress message, and handed to the agent. The agent's reply
        completes the task. If the agent raises, the task is marked
        ``failed`` with the error text and the original exception is
        re-raised.

        Args:
            params: Validated task send parameters

        Returns:
            The task in its final state

        Raises:
            Exception: Whatever the agent raised while processing
        """
        task_id = params.id
        logger.info("Handling task send for task %s", task_id)

        await self.store.create_or_get_task(
            task_id,
            params.message,
            params.session_id,
            params.metadata,
        )

        try:
            working = await self.store.update_task_status(
                task_id,
                TaskState.WORKING,
                create_response_message(WORKING_MESSAGE_TEXT),
            )
            if working is None:
                raise RuntimeError(f"Task {task_id} not found")

            response = await self.agent.process_message(
                params.message,
                task_id,
                params.session_id,
                _RunnerTaskContext(self, task_id),
            )
        except Exception as e:
            logger.error("Task %s failed: %s", task_id, e)
            await self._mark_failed(task_id, e)
            raise

        current = await self.store.get_task(task_id)
        if current is not None and current.status.state.is_terminal():
            # Canceled while the agent was working; keep the terminal state
            logger.info(
                "Task %s reached %s before completion, dropping response",
                task_id,
                current.status.state.value,
            )
            return current

        completed = await self.store.update_task_status(task_id, TaskState.COMPLETED, response)
        if completed is None:
            raise RuntimeError(f"Failed to update task {task_id}")
        return completed

    async def handle_task_get(self, task_id: str) -> Optional[Task]:
        """Handle a ``tasks/get`` request.

        Args:
            task_id: ID of the task to retrieve

        Returns:
            The task, or None if it does not exist
        """
        logger.info("Handling task get for task %s", task_id)
        return await self.store.get_task(task_id)

    async def handle_task_cancel(self, task_id: str) -> TaskCancelResult:
        """Handle a ``tasks/cancel`` request.

        Cancellation only marks the final state; it does not interrupt an
        agent that is still processing the task.

        Args:
            task_id: ID of the task to cancel

        Returns:
            Result with ``canceled`` False when the task is unknown or
            already terminal, True otherwise
        """
        logger.info("Handling task cancel for task %s", task_id)

        task = await self.store.get_task(task_id)
        if task is None or task.status.state.is_terminal():
            return TaskCancelResult(id=task_id, canceled=False)

        updated = await self.store.update_task_status(task_id, TaskState.CANCELED)
        return TaskCancelResult(id=task_id, canceled=updated is not None)

    async def add_artifact(self, task_id: str, artifact: Artifact) -> Optional[Task]:
        """Append an artifact to a task owned by this runner."""
        return await self.store.add_task_artifact(task_id, artifact)

    async def _mark_failed(self, task_id: str, error: BaseException) -> Optional[Task]:
        failed_message: Message = create_response_message(f"Task failed: {error}")
        return await self.store.update_task_status(task_id, TaskState.FAILED, failed_message)
