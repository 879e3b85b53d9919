"""Task models, storage and the protocol runner."""

from agentrelay.tasks.models import (
    Task,
    TaskCancelResult,
    TaskIdParams,
    TaskSendParams,
    TaskState,
    TaskStatus,
)
from agentrelay.tasks.runner import ProtocolRunner
from agentrelay.tasks.store import InMemoryTaskStore

__all__ = [
    "Task",
    "TaskCancelResult",
    "TaskIdParams",
    "TaskSendParams",
    "TaskState",
    "TaskStatus",
    "InMemoryTaskStore",
    "ProtocolRunner",
]
