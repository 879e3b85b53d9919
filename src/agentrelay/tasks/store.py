"""In-memory task store.

This module provides the task store owned by a single agent process.
Tasks are kept in a dictionary keyed by the caller-assigned task ID; all
updates are copy-on-write so that Task objects handed out earlier are
never mutated, and updates to the same task are serialized by a per-task
asyncio lock.
"""

import asyncio
import logging
from typing import Any, Optional

from agentrelay.agents.models import Artifact, Message
from agentrelay.tasks.models import Task, TaskState, TaskStatus, utc_timestamp

logger = logging.getLogger(__name__)


class InMemoryTaskStore:
    """Dictionary-based task store for one agent process.

    Suitable for development, testing, and single-instance deployments;
    nothing survives a restart.

    Attributes:
        _tasks: Dictionary mapping task_id to the current Task snapshot
        _locks: Dictionary mapping task_id to the lock serializing its updates
        _registry_lock: Lock guarding creation of tasks and their locks
    """

    def __init__(self) -> None:
        """Initialize an empty task store."""
        self._tasks: dict[str, Task] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._registry_lock = asyncio.Lock()

    def _lock_for(self, task_id: str) -> asyncio.Lock:
        lock = self._locks.get(task_id)
        if lock is None:
            lock = self._locks[task_id] = asyncio.Lock()
        return lock

    async def create_or_get_task(
        self,
        task_id: str,
        message: Optional[Message] = None,
        session_id: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Task:
        """Create a new task or return the existing one with the same ID.

        Creation is idempotent: re-sending an ID returns the stored task
        unchanged, including its original status timestamp.

        Args:
            task_id: Caller-assigned task identifier
            message: Optional initial message
            session_id: Optional session identifier
            metadata: Optional task metadata

        Returns:
            The stored task
        """
        async with self._registry_lock:
            existing = self._tasks.get(task_id)
            if existing is not None:
                return existing

            task = Task(
                id=task_id,
                session_id=session_id,
                status=TaskStatus(state=TaskState.SUBMITTED, message=message),
                history=[message] if message is not None else [],
                artifacts=[],
                metadata=metadata,
            )
            self._tasks[task_id] = task
            self._lock_for(task_id)

        logger.info("Created new task: %s", task_id)
        return task

    async def get_task(self, task_id: str) -> Optional[Task]:
        """Retrieve a task by ID.

        Args:
            task_id: Unique identifier of the task

        Returns:
            Task object if found, None otherwise
        """
        task = self._tasks.get(task_id)
        if task is None:
            logger.warning("Task not found: %s", task_id)
        return task

    async def update_task_status(
        self,
        task_id: str,
        state: TaskState,
        message: Optional[Message] = None,
    ) -> Optional[Task]:
        """Move a task to a new state.

        A new status object is built with the current timestamp. When a
        message is given it is appended to the history and becomes the
        status message; otherwise the previous status message is kept.

        Args:
            task_id: Unique identifier of the task
            state: New task state
            message: Optional message recorded with the update

        Returns:
            The updated Task, or None if the task does not exist
        """
        if task_id not in self._tasks:
            logger.warning("Task not found: %s", task_id)
            return None

        async with self._lock_for(task_id):
            task = self._tasks.get(task_id)
            if task is None:
                return None

            update: dict[str, Any] = {
                "status": TaskStatus(
                    state=state,
                    message=message if message is not None else task.status.message,
                    timestamp=utc_timestamp(),
                )
            }
            if message is not None:
                update["history"] = [*task.history, message]

            updated = task.model_copy(update=update)
            self._tasks[task_id] = updated

        logger.info("Updated task %s to state: %s", task_id, state.value)
        return updated

    async def add_task_artifact(self, task_id: str, artifact: Artifact) -> Optional[Task]:
        """Append an artifact to a task.

        Args:
            task_id: Unique identifier of the task
            artifact: The artifact to add

        Returns:
            The updated Task, or None if the task does not exist
        """
        if task_id not in self._tasks:
            logger.warning("Task not found: %s", task_id)
            return None

        async with self._lock_for(task_id):
            task = self._tasks.get(task_id)
            if task is None:
                return None

            updated = task.model_copy(update={"artifacts": [*task.artifacts, artifact]})
            self._tasks[task_id] = updated

        logger.info("Added artifact to task %s: %s", task_id, artifact.name or "unnamed")
        return updated

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task by ID.

        Args:
            task_id: Unique identifier of the task to delete

        Returns:
            True if the task was deleted, False if it wasn't found
        """
        async with self._registry_lock:
            if task_id not in self._tasks:
                return False
            del self._tasks[task_id]
            self._locks.pop(task_id, None)

        logger.info("Deleted task: %s", task_id)
        return True

    async def list_task_ids(self) -> list[str]:
        """List all task IDs in insertion order."""
        return list(self._tasks.keys())
