"""Shared fixtures for API tests."""

from typing import Optional

import pytest

from agentrelay.agents.errors import TaskNotFoundError
from agentrelay.agents.helpers import create_response_message, extract_text
from agentrelay.agents.models import AgentCapabilities, AgentCard, AgentSkill, Message
from agentrelay.tasks.runner import ProtocolRunner


class ScriptedAgent:
    """Agent whose behaviour is keyed on the incoming text.

    "boom" raises RuntimeError, "missing" raises TaskNotFoundError and
    anything else is echoed back.
    """

    def get_agent_card(self) -> AgentCard:
        return AgentCard(
            name="Scripted Agent",
            description="Test agent",
            url="http://testserver/agents/scripted",
            version="1.0.0",
            capabilities=AgentCapabilities(state_transition_history=True),
            skills=[AgentSkill(name="scripted")],
        )

    async def process_message(
        self, message: Message, task_id: str, session_id: Optional[str] = None, context=None
    ) -> Message:
        text = extract_text(message)
        if text == "boom":
            raise RuntimeError("boom")
        if text == "missing":
            raise TaskNotFoundError("elsewhere")
        return create_response_message(f"echo: {text}")


@pytest.fixture
def runner() -> ProtocolRunner:
    return ProtocolRunner(ScriptedAgent())


