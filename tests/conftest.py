"""Pytest configuration and shared fixtures for the test suite."""

from typing import Callable, Optional

import pytest

from agentrelay.agents.models import AgentCapabilities, AgentCard, AgentSkill, Message, TextPart

pytest_plugins = ["pytest_asyncio"]


def build_card(
    name: str,
    skills: Optional[list[str]] = None,
    url: Optional[str] = None,
    description: Optional[str] = None,
) -> AgentCard:
    """Build a valid agent card for tests."""
    skill_names = ["general"] if skills is None else skills
    return AgentCard(
        name=name,
        description=description,
        url=url or f"http://agents.test/{name.lower().replace(' ', '-')}",
        version="1.0.0",
        capabilities=AgentCapabilities(),
        skills=[AgentSkill(name=skill) for skill in skill_names],
    )


def user_message(text: str) -> Message:
    """Build a single-part user message."""
    return Message(role="user", parts=[TextPart(text=text)])


@pytest.fixture
def make_card() -> Callable[..., AgentCard]:
    """Factory fixture for agent cards."""
    return build_card


@pytest.fixture
def make_message() -> Callable[[str], Message]:
    """Factory fixture for user messages."""
    return user_message
