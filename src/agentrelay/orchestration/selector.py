"""LLM-based agent selection.

The selector asks the LLM to name the one agent best suited to a query
and maps the answer back onto the known agent cards. Any failure is raised
as AgentSelectionError so the orchestrator can fall back to keyword
routing.
"""

import logging
from typing import Optional, Sequence

from agentrelay.agents.models import AgentCard
from agentrelay.llm.client import LLMCompletion, LLMError

logger = logging.getLogger(__name__)

ROUTER_TEMPERATURE = 0.1
ROUTER_MAX_TOKENS = 50

ROUTER_SYSTEM_PROMPT = """You are an expert agent router for a Vue.js knowledge system.
Your task is to select the most appropriate specialized agent to handle a user query.
Analyze the user's query carefully and match it to the agent whose capabilities best address \
the query.
Consider the description and skills of each agent.
Return ONLY the exact name of the best agent to handle this query - no explanation or other text."""


class AgentSelectionError(Exception):
    """Raised when the LLM could not pick a known agent."""


def format_agent_details(agent: AgentCard) -> str:
    """Describe one agent for the router prompt."""
    skills = "\n".join(
        f"    - {skill.name}: {skill.description or ''}" for skill in agent.skills
    )
    return f'Agent: "{agent.name}"\nDescription: {agent.description or ""}\nSkills:\n{skills}'


def build_router_prompt(query: str, agents: Sequence[AgentCard]) -> str:
    """Build the user prompt asking the LLM to route ``query``.

    Args:
        query: The user query
        agents: Candidate agents

    Returns:
        Prompt embedding the query and each candidate's name, description
        and skills
    """
    agent_details = "\n\n".join(format_agent_details(agent) for agent in agents)
    return (
        f'User Query: "{query}"\n\n'
        f"Available Agents:\n{agent_details}\n\n"
        "Based on the query and agent capabilities, which agent should handle this query? "
        "Return only the exact agent name."
    )


def match_agent_name(answer: str, agents: Sequence[AgentCard]) -> Optional[AgentCard]:
    """Map an LLM answer onto a known agent.

    An exact (case-insensitive) name match wins; otherwise the first agent
    whose name contains the answer, or is contained in it, is returned.
    Surrounding quotes and a trailing period are ignored.

    Args:
        answer: Raw LLM output
        agents: Candidate agents

    Returns:
        The matched agent, or None

    Example:
        >>> match_agent_name('"vuex a2a agent".', agents).name
        'Vuex A2A Agent'
    """
    cleaned = answer.strip().strip("\"'`").rstrip(".").strip().lower()
    if not cleaned:
        return None

    for agent in agents:
        if agent.name.lower() == cleaned:
            return agent

    for agent in agents:
        name = agent.name.lower()
        if cleaned in name or name in cleaned:
            return agent
    return None


class LLMAgentSelector:
    """Picks the agent for a query by asking an LLM.

    Attributes:
        llm: Completion collaborator used as the router
    """

    def __init__(self, llm: LLMCompletion) -> None:
        self.llm = llm

    async def select(self, query: str, agents: Sequence[AgentCard]) -> AgentCard:
        """Select the best agent for ``query``.

        Args:
            query: The user query
            agents: Candidate agents (at least one)

        Returns:
            The selected agent card

        Raises:
            AgentSelectionError: If there are no candidates, the LLM call
                fails, or its answer matches no candidate
        """
        if not agents:
            raise AgentSelectionError("No agents to select from")

        try:
            answer = await self.llm.complete(
                ROUTER_SYSTEM_PROMPT,
                build_router_prompt(query, agents),
                temperature=ROUTER_TEMPERATURE,
                max_tokens=ROUTER_MAX_TOKENS,
            )
        except LLMError as e:
            raise AgentSelectionError(f"LLM agent selection failed: {e}") from e

        if not answer or not answer.strip():
            raise AgentSelectionError("Empty response from LLM for agent selection")

        matched = match_agent_name(answer, agents)
        if matched is None:
            raise AgentSelectionError(f"LLM answer matches no known agent: {answer.strip()}")

        logger.info("LLM selected agent: %s", matched.name)
        return matched
