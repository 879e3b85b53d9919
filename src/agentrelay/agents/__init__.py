"""A2A agent types, errors and implementations."""

from agentrelay.agents.base import A2AAgent, TaskContext
from agentrelay.agents.errors import (
    A2AError,
    AgentUnavailableError,
    ErrorCode,
    InvalidAgentCardError,
    RemoteAgentError,
    TaskNotFoundError,
)
from agentrelay.agents.models import (
    AgentCapabilities,
    AgentCard,
    AgentSkill,
    Artifact,
    DataPart,
    FilePart,
    Message,
    Part,
    TextPart,
    is_valid_agent_card,
)

__all__ = [
    "A2AAgent",
    "TaskContext",
    "A2AError",
    "AgentUnavailableError",
    "ErrorCode",
    "InvalidAgentCardError",
    "RemoteAgentError",
    "TaskNotFoundError",
    "AgentCapabilities",
    "AgentCard",
    "AgentSkill",
    "Artifact",
    "DataPart",
    "FilePart",
    "Message",
    "Part",
    "TextPart",
    "is_valid_agent_card",
]
