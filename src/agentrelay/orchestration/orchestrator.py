"""Orchestrator agent routing user queries to specialist agents.

The orchestrator is itself an A2A agent. For each incoming message it
picks a specialist (LLM first, keyword routing second, first available
agent last), delegates the message over A2A and wraps the specialist's
answer in its own reply.
"""

import asyncio
import logging
from typing import Optional

from agentrelay.agents.base import TaskContext
from agentrelay.agents.helpers import (
    create_error_message,
    create_response_message,
    create_text_artifact,
    extract_text,
)
from agentrelay.agents.models import AgentCapabilities, AgentCard, AgentSkill, Message
from agentrelay.config import (
    ORCHESTRATOR_SLUG,
    VUE_CORE_SLUG,
    VUEX_SLUG,
    RelaySettings,
)
from agentrelay.orchestration.client import A2AClient
from agentrelay.orchestration.registry import (
    VUE_CORE_AGENT_NAME,
    VUEX_AGENT_NAME,
    AgentRegistry,
)
from agentrelay.orchestration.selector import LLMAgentSelector
from agentrelay.tasks.models import Task

logger = logging.getLogger(__name__)

ORCHESTRATOR_NAME = "Vue.js Orchestrator Agent"
AGENT_SELECTION_ARTIFACT = "agent_selection"

LIST_AGENTS_COMMAND = "list agents"
DISCOVER_AGENTS_COMMAND = "discover agents"

NO_AGENTS_LISTED_TEXT = (
    'No agents are currently available. Try typing "discover agents" '
    "to initiate agent discovery."
)
DISCOVERY_STARTED_TEXT = (
    "Agent discovery initiated. Please try your query again in a few seconds."
)
NO_AGENTS_AVAILABLE_TEXT = (
    "No agents are currently available. I've initiated agent discovery. "
    'Please try again in a few seconds, or type "list agents" to see if any '
    "agents have been discovered."
)
NO_SUITABLE_AGENT_TEXT = (
    "No suitable agent found for this query. "
    "Try asking about Vue.js core concepts or Vuex state management."
)

VUE_CORE_DESCRIPTION = (
    "Specialized agent for Vue.js core framework concepts, components, templates, "
    "directives, lifecycle hooks, and reactivity. Can answer questions about Vue "
    "instance, component composition, props, slots, events, custom directives, and "
    "Vue template syntax."
)
VUEX_DESCRIPTION = (
    "Specialized agent for Vuex state management in Vue.js applications. Provides "
    "expertise on stores, state, getters, mutations, actions, modules, and plugins. "
    "Can answer questions about state management patterns, data flow, and integrating "
    "Vuex with Vue components."
)

_CAPABILITIES = AgentCapabilities(
    streaming=False, push_notifications=False, state_transition_history=True
)


class OrchestratorAgent:
    """Agent that routes each query to the best specialist.

    Attributes:
        registry: Directory of known specialists
        client: A2A client used for delegation
        selector: Optional LLM selector; without it routing starts at the
            keyword classifier
        settings: Server settings (URLs and fallback timing)

    Example:
        >>> orchestrator = OrchestratorAgent(registry, client, selector, settings)
        >>> reply = await orchestrator.process_message(message, task_id="t-1")
        >>> extract_text(reply).startswith("Vuex A2A Agent responds:")
        True
    """

    def __init__(
        self,
        registry: AgentRegistry,
        client: A2AClient,
        selector: Optional[LLMAgentSelector] = None,
        settings: Optional[RelaySettings] = None,
    ) -> None:
        self.registry = registry
        self.client = client
        self.selector = selector
        self.settings = settings or RelaySettings()

    def get_agent_card(self) -> AgentCard:
        """Return the orchestrator's own agent card."""
        return AgentCard(
            name=ORCHESTRATOR_NAME,
            description="A2A orchestrator agent that coordinates specialized Vue.js agents",
            url=self.settings.agent_url(ORCHESTRATOR_SLUG),
            version="1.0.0",
            capabilities=_CAPABILITIES,
            skills=[
                AgentSkill(
                    name="vue_knowledge_orchestration",
                    description=(
                        "Coordinates specialized Vue.js agents to answer questions "
                        "about Vue.js ecosystem"
                    ),
                    input_modes=["text"],
                    output_modes=["text"],
                )
            ],
        )

    def known_agent_cards(self) -> list[AgentCard]:
        """Return the statically known specialist cards.

        Used when discovery has not found anything in time.
        """
        return [
            AgentCard(
                name=VUE_CORE_AGENT_NAME,
                description=VUE_CORE_DESCRIPTION,
                url=self.settings.agent_url(VUE_CORE_SLUG),
                version="1.0.0",
                capabilities=_CAPABILITIES,
                skills=[
                    AgentSkill(
                        name="vue_core_knowledge",
                        description=(
                            "In-depth knowledge about Vue.js components, templates, "
                            "directives, and core concepts"
                        ),
                    ),
                    AgentSkill(
                        name="vue_template_syntax",
                        description=(
                            "Expertise in Vue template syntax, interpolation, directives, "
                            "and rendering"
                        ),
                    ),
                    AgentSkill(
                        name="vue_component_lifecycle",
                        description=(
                            "Understanding of Vue component lifecycle hooks and their "
                            "usage patterns"
                        ),
                    ),
                ],
            ),
            AgentCard(
                name=VUEX_AGENT_NAME,
                description=VUEX_DESCRIPTION,
                url=self.settings.agent_url(VUEX_SLUG),
                version="1.0.0",
                capabilities=_CAPABILITIES,
                skills=[
                    AgentSkill(
                        name="vuex_knowledge",
                        description=(
                            "Comprehensive knowledge about Vuex state management "
                            "architecture and patterns"
                        ),
                    ),
                    AgentSkill(
                        name="vuex_store_management",
                        description="Expertise in Vuex store configuration, modules, and plugins",
                    ),
                    AgentSkill(
                        name="vuex_data_flow",
                        description=(
                            "Understanding of Vuex state mutations, actions, getters, "
                            "and one-way data flow"
                        ),
                    ),
                ],
            ),
        ]

    def manually_register_agents(self) -> list[AgentCard]:
        """Register the statically known specialists.

        Returns:
            All agents registered afterwards
        """
        logger.info("Manually registering agents...")
        for card in self.known_agent_cards():
            self.registry.add_agent(card)

        agents = self.registry.get_agents()
        logger.info("Manually registered %d agents", len(agents))
        return agents

    async def register_fallback_after_delay(self) -> bool:
        """Register the known specialists if discovery found nothing in time.

        Waits ``registration_fallback_delay`` seconds first.

        Returns:
            True if the manual registration ran
        """
        await asyncio.sleep(self.settings.registration_fallback_delay)
        if self.registry.has_agents():
            return False

        logger.warning("No agents discovered, falling back to manual registration")
        self.manually_register_agents()
        return True

    async def find_best_agent_for_query(self, query: str) -> Optional[AgentCard]:
        """Pick the agent to handle ``query``.

        Zero agents yields None and a single agent is returned outright.
        Otherwise the LLM selector decides; if it fails, the registry's
        keyword classifier is used, and if that finds nothing the first
        registered agent is returned.

        Args:
            query: The user query

        Returns:
            The chosen agent, or None if no agent is registered
        """
        agents = self.registry.get_agents()
        if not agents:
            return None
        if len(agents) == 1:
            return agents[0]

        if self.selector is not None:
            try:
                return await self.selector.select(query, agents)
            except Exception as e:
                logger.warning("LLM agent selection failed, falling back to keywords: %s", e)

        agent = self.registry.find_agent_for_query(query)
        if agent is not None:
            return agent

        logger.warning("Keyword routing found no agent, using first available agent")
        return agents[0]

    async def process_message(
        self,
        message: Message,
        task_id: str,
        session_id: Optional[str] = None,
        context: Optional[TaskContext] = None,
    ) -> Message:
        """Route a message to a specialist and return its wrapped answer.

        Delegation failures are turned into error replies instead of
        propagating, so the orchestrator task still completes.

        Args:
            message: The user message
            task_id: ID of the orchestrator task
            session_id: Optional session ID, forwarded to the specialist
            context: Optional handle for recording the selection artifact

        Returns:
            The reply message
        """
        logger.info("Orchestrator processing message for task %s", task_id)

        query = extract_text(message)
        if not query:
            return create_error_message("No text content found in the message")

        lowered = query.lower()
        try:
            if LIST_AGENTS_COMMAND in lowered:
                return self._agent_list_response()

            if DISCOVER_AGENTS_COMMAND in lowered:
                await self._discover_without_blocking()
                return create_response_message(DISCOVERY_STARTED_TEXT)

            if not self.registry.has_agents():
                logger.info("No agents available, initiating discovery")
                await self._discover_without_blocking()
                return create_response_message(NO_AGENTS_AVAILABLE_TEXT)

            target = await self.find_best_agent_for_query(query)
            if target is None:
                return create_error_message(NO_SUITABLE_AGENT_TEXT)

            if context is not None:
                await context.add_artifact(
                    create_text_artifact(
                        AGENT_SELECTION_ARTIFACT,
                        f"Selected agent: {target.name} "
                        f"({target.description or 'No description'})",
                    )
                )

            logger.info("Delegating task to %s", target.name)
            delegated = await self.client.send_task(target, message, session_id)
            return self._delegated_response(target, delegated)
        except Exception as e:
            logger.error("Error in orchestrator: %s", e)
            return create_error_message(f"Error processing your request: {e}")

    async def _discover_without_blocking(self) -> None:
        # One inline pass; further retries continue in the background.
        await self.registry.discover_agents()
        if not self.registry.has_agents():
            self.registry.schedule_discovery_retry()

    def _agent_list_response(self) -> Message:
        agents = self.registry.get_agents()
        if not agents:
            return create_response_message(NO_AGENTS_LISTED_TEXT)

        lines = ["Available agents:\n\n"]
        for agent in agents:
            lines.append(f"📋 {agent.name}\n")
            lines.append(f"   Description: {agent.description or 'No description'}\n")
            lines.append(f"   Skills: {', '.join(skill.name for skill in agent.skills)}\n\n")
        return create_response_message("".join(lines))

    @staticmethod
    def _delegated_response(agent: AgentCard, task: Task) -> Message:
        reply = task.status.message or (task.history[-1] if task.history else None)
        if reply is None:
            return create_error_message(f"No response received from {agent.name}")

        text = extract_text(reply)
        if not text:
            return create_error_message(f"Empty response received from {agent.name}")

        return create_response_message(f"{agent.name} responds:\n\n{text}")
