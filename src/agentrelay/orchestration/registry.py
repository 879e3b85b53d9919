"""Directory of remote agents known to the orchestrator.

The registry discovers agents by fetching the cards of a fixed list of
candidate endpoints, keeps them keyed by agent name and answers the lookup
queries the orchestrator needs to route a user query.
"""

import asyncio
import logging
from contextlib import suppress
from typing import Iterable, Optional

from agentrelay.agents.errors import A2AError, InvalidAgentCardError
from agentrelay.agents.models import AgentCard, is_valid_agent_card
from agentrelay.orchestration.client import A2AClient
from agentrelay.orchestration.retry import RetryPolicy, SleepFunc, retry_until

logger = logging.getLogger(__name__)

VUE_CORE_AGENT_NAME = "Vue Core A2A Agent"
VUEX_AGENT_NAME = "Vuex A2A Agent"

_STATE_KEYWORDS = ("vuex", "state management", "store")
_MANAGE_KEYWORDS = ("manage", "management")


def classify_query(query: str) -> str:
    """Pick the specialist name for a query by keyword.

    Args:
        query: The user query

    Returns:
        "Vuex A2A Agent" for state-management queries, otherwise
        "Vue Core A2A Agent"

    Example:
        >>> classify_query("How do I use Vuex getters?")
        'Vuex A2A Agent'
        >>> classify_query("Explain component lifecycle hooks")
        'Vue Core A2A Agent'
    """
    lowered = query.lower()
    if any(keyword in lowered for keyword in _STATE_KEYWORDS):
        return VUEX_AGENT_NAME
    if "state" in lowered and any(keyword in lowered for keyword in _MANAGE_KEYWORDS):
        return VUEX_AGENT_NAME
    return VUE_CORE_AGENT_NAME


class AgentRegistry:
    """Name-keyed directory of agent cards.

    Registration is last-write-wins by agent name. Card validation happens
    on every insert; an invalid card never enters the directory.

    Attributes:
        client: A2A client used to fetch agent cards
        candidate_urls: Endpoints probed during discovery
        retry_policy: Limit and spacing of the discovery retry loop
        _agents: Dictionary mapping agent name to its card

    Example:
        >>> registry = AgentRegistry(client, ["http://localhost:3333/api/agents/a2a/vuex"])
        >>> await registry.discover_agents()
        >>> registry.find_agent_for_query("how does the store work?").name
        'Vuex A2A Agent'
    """

    def __init__(
        self,
        client: A2AClient,
        candidate_urls: Iterable[str],
        retry_policy: Optional[RetryPolicy] = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the registry.

        Args:
            client: A2A client used to fetch agent cards
            candidate_urls: Endpoints probed during discovery
            retry_policy: Discovery retry policy (defaults: 5 retries,
                1s initial delay, 2s between attempts)
            sleep: Sleep function, injectable for tests
        """
        self.client = client
        self.candidate_urls = list(candidate_urls)
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._agents: dict[str, AgentCard] = {}
        self._retry_task: Optional[asyncio.Task] = None

    def has_agents(self) -> bool:
        """Return True when at least one agent is registered."""
        return bool(self._agents)

    async def discover_agents(self) -> None:
        """Run one discovery pass over the candidate endpoints.

        Accessibility is checked for every endpoint first; only accessible
        endpoints are then registered. Per-endpoint failures are logged and
        skipped.
        """
        logger.info("Discovering A2A agents...")

        accessible: list[str] = []
        for endpoint in self.candidate_urls:
            if await self.client.is_agent_accessible(endpoint):
                logger.info("Agent at %s is accessible", endpoint)
                accessible.append(endpoint)
            else:
                logger.warning("Agent at %s is not accessible", endpoint)

        for endpoint in accessible:
            try:
                await self.register_agent_from_endpoint(endpoint)
            except A2AError as e:
                logger.error("Error discovering agent at %s: %s", endpoint, e)

        logger.info("Discovery complete, found %d agents", len(self._agents))

    async def register_agent_from_endpoint(self, endpoint: str) -> Optional[AgentCard]:
        """Fetch the card of one endpoint and register it.

        Args:
            endpoint: Base URL of the agent

        Returns:
            The registered card, or None if the card was invalid

        Raises:
            AgentUnavailableError: If the card could not be fetched
        """
        try:
            card = await self.client.get_agent_card(endpoint)
        except InvalidAgentCardError:
            logger.warning("Invalid agent card received from %s", endpoint)
            return None

        if not is_valid_agent_card(card):
            logger.warning("Invalid agent card received from %s", endpoint)
            return None

        logger.info("Registering agent: %s", card.name)
        self._agents[card.name] = card
        return card

    async def discover_agents_with_retry(self, retry_count: int = 0) -> int:
        """Repeat discovery until an agent is known or retries run out.

        At most ``max_retries + 1 - retry_count`` discovery passes are
        made. Giving up is silent apart from a log line.

        Args:
            retry_count: Retries already used

        Returns:
            Number of discovery passes made
        """
        outcome = await retry_until(
            self.discover_agents,
            self.has_agents,
            self.retry_policy,
            sleep=self._sleep,
            start_attempt=retry_count,
        )
        if outcome.succeeded:
            logger.info("Successfully discovered %d agents", len(self._agents))
        else:
            logger.error("Giving up on agent discovery after %d attempts", outcome.attempts)
        return outcome.attempts

    @property
    def discovery_retry_task(self) -> Optional[asyncio.Task]:
        """The background discovery task, if one was scheduled."""
        return self._retry_task

    def schedule_discovery_retry(self) -> asyncio.Task:
        """Continue discovery with retry in a background task.

        Used after a discovery pass made inline by a request found nothing:
        the remaining ``max_retries`` passes run in the background, starting
        after one retry delay. At most one such task runs at a time; while it
        is running, the same task is returned.

        Returns:
            The running background discovery task
        """
        if self._retry_task is not None and not self._retry_task.done():
            return self._retry_task

        async def retry_later() -> int:
            await self._sleep(self.retry_policy.retry_delay)
            return await self.discover_agents_with_retry(retry_count=1)

        logger.info("Scheduling background agent discovery")
        self._retry_task = asyncio.create_task(retry_later(), name="agent-discovery-retry")
        return self._retry_task

    async def stop_discovery_retry(self) -> None:
        """Cancel the background discovery task, if one is running."""
        task, self._retry_task = self._retry_task, None
        if task is None or task.done():
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def bootstrap(self) -> int:
        """Wait for the initial delay, then discover with retry.

        Meant to run as a background task started with the server, so that
        the local agent endpoints are already serving when probed.
        """
        await self._sleep(self.retry_policy.initial_delay)
        return await self.discover_agents_with_retry()

    def add_agent(self, card: AgentCard) -> None:
        """Manually register an agent card.

        Args:
            card: Agent card to add

        Raises:
            InvalidAgentCardError: If the card is invalid (the directory is
                left unchanged)
        """
        if not is_valid_agent_card(card):
            raise InvalidAgentCardError()

        logger.info("Manually adding agent: %s", card.name)
        self._agents[card.name] = card

    def remove_agent(self, name: str) -> bool:
        """Remove an agent by name; returns False if it was not registered."""
        return self._agents.pop(name, None) is not None

    def get_agents(self) -> list[AgentCard]:
        """Return all registered agents in registration order."""
        return list(self._agents.values())

    def get_agent_by_name(self, name: str) -> Optional[AgentCard]:
        return self._agents.get(name)

    def find_agents_by_skill(self, skill_name: str) -> list[AgentCard]:
        """Find agents with a skill whose name contains ``skill_name``.

        Matching is case-insensitive.
        """
        needle = skill_name.lower()
        return [
            card
            for card in self._agents.values()
            if any(needle in skill.name.lower() for skill in card.skills)
        ]

    def find_agent_for_query(self, query: str) -> Optional[AgentCard]:
        """Keyword-route a query to a registered specialist.

        Args:
            query: The user query

        Returns:
            The selected agent, or None if it is not registered
        """
        return self.get_agent_by_name(classify_query(query))

    async def wait_until_ready(
        self,
        expected_names: Iterable[str],
        timeout: float,
        poll_interval: Optional[float] = None,
    ) -> bool:
        """Poll discovery until every expected agent is registered.

        Args:
            expected_names: Names that must all be present
            timeout: Seconds to wait before giving up
            poll_interval: Seconds between discovery passes (defaults to
                the retry delay of the policy)

        Returns:
            True if all expected agents are registered, False on timeout
        """
        expected = set(expected_names)
        interval = poll_interval if poll_interval is not None else self.retry_policy.retry_delay
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            if expected.issubset(self._agents):
                return True
            await self.discover_agents()
            if expected.issubset(self._agents):
                return True

            remaining = deadline - loop.time()
            if remaining <= 0:
                missing = sorted(expected.difference(self._agents))
                logger.warning("Agents not ready after %.1fs: %s", timeout, ", ".join(missing))
                return False
            await self._sleep(min(interval, remaining))
