"""Tests for the orchestrator agent."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from agentrelay.agents.errors import RemoteAgentError
from agentrelay.agents.helpers import create_response_message, extract_text
from agentrelay.agents.models import DataPart, Message
from agentrelay.config import RelaySettings
from agentrelay.llm.client import LLMError
from agentrelay.orchestration.orchestrator import (
    AGENT_SELECTION_ARTIFACT,
    DISCOVERY_STARTED_TEXT,
    NO_AGENTS_AVAILABLE_TEXT,
    NO_AGENTS_LISTED_TEXT,
    OrchestratorAgent,
)
from agentrelay.orchestration.registry import VUE_CORE_AGENT_NAME, VUEX_AGENT_NAME, AgentRegistry
from agentrelay.orchestration.retry import RetryPolicy
from agentrelay.orchestration.selector import LLMAgentSelector
from agentrelay.tasks.models import Task, TaskSendParams, TaskState, TaskStatus
from agentrelay.tasks.runner import ProtocolRunner


async def no_sleep(delay: float) -> None:
    return None


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def completed_task(text: str) -> Task:
    return Task(
        id="remote-1",
        status=TaskStatus(state=TaskState.COMPLETED, message=create_response_message(text)),
    )


def fake_llm(answer=None, error=None) -> AsyncMock:
    llm = AsyncMock()
    if error is not None:
        llm.complete.side_effect = error
    else:
        llm.complete.return_value = answer
    return llm


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.is_agent_accessible = AsyncMock(return_value=False)
    client.send_task = AsyncMock(return_value=completed_task("answer"))
    return client


@pytest.fixture
def registry(client) -> AgentRegistry:
    return AgentRegistry(client, ["http://agents.test/a"], RetryPolicy(max_retries=1), no_sleep)


def build_orchestrator(registry, client, llm=None, **settings) -> OrchestratorAgent:
    return OrchestratorAgent(
        registry=registry,
        client=client,
        selector=LLMAgentSelector(llm) if llm is not None else None,
        settings=RelaySettings(use_llm=False, **settings),
    )


class TestAgentCard:
    def test_card(self, registry, client) -> None:
        card = build_orchestrator(registry, client, base_url="http://relay.test").get_agent_card()

        assert card.name == "Vue.js Orchestrator Agent"
        assert card.url == "http://relay.test/api/agents/a2a/orchestrator"
        assert [skill.name for skill in card.skills] == ["vue_knowledge_orchestration"]

    def test_known_agent_cards_point_at_local_specialists(self, registry, client) -> None:
        cards = build_orchestrator(registry, client).known_agent_cards()

        assert [(card.name, card.url) for card in cards] == [
            (VUE_CORE_AGENT_NAME, "http://localhost:3333/api/agents/a2a/vue-core"),
            (VUEX_AGENT_NAME, "http://localhost:3333/api/agents/a2a/vuex"),
        ]
        assert all(len(card.skills) == 3 for card in cards)


class TestAgentSelection:
    """Tests for find_best_agent_for_query."""

    @pytest.mark.asyncio
    async def test_no_agents(self, registry, client) -> None:
        assert await build_orchestrator(registry, client).find_best_agent_for_query("q") is None

    @pytest.mark.asyncio
    async def test_single_agent_skips_llm(self, registry, client, make_card) -> None:
        registry.add_agent(make_card("Only"))
        llm = fake_llm("Other")

        agent = await build_orchestrator(registry, client, llm).find_best_agent_for_query("q")

        assert agent.name == "Only"
        llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_llm_choice_wins(self, registry, client, make_card) -> None:
        registry.add_agent(make_card(VUE_CORE_AGENT_NAME))
        registry.add_agent(make_card(VUEX_AGENT_NAME))
        orchestrator = build_orchestrator(registry, client, fake_llm(VUE_CORE_AGENT_NAME))

        agent = await orchestrator.find_best_agent_for_query("how does the vuex store work")

        assert agent.name == VUE_CORE_AGENT_NAME

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "llm", [None, fake_llm(error=LLMError("down")), fake_llm("Unknown Agent")]
    )
    async def test_keyword_fallback(self, registry, client, make_card, llm) -> None:
        registry.add_agent(make_card(VUE_CORE_AGENT_NAME))
        registry.add_agent(make_card(VUEX_AGENT_NAME))
        orchestrator = build_orchestrator(registry, client, llm)

        vuex = await orchestrator.find_best_agent_for_query("how do I use Vuex getters")
        core = await orchestrator.find_best_agent_for_query("explain component lifecycle hooks")

        assert vuex.name == VUEX_AGENT_NAME
        assert core.name == VUE_CORE_AGENT_NAME

    @pytest.mark.asyncio
    async def test_first_agent_as_last_resort(self, registry, client, make_card) -> None:
        registry.add_agent(make_card("A"))
        registry.add_agent(make_card("B"))
        orchestrator = build_orchestrator(registry, client, fake_llm(error=LLMError("down")))

        agent = await orchestrator.find_best_agent_for_query("how do I use Vuex getters")

        assert agent.name == "A"


class TestProcessMessage:
    """Tests for OrchestratorAgent.process_message."""

    @pytest.mark.asyncio
    async def test_delegates_to_selected_agent(
        self, registry, client, make_card, make_message
    ) -> None:
        registry.add_agent(make_card("A", description="first"))
        agent_b = make_card("B", description="second")
        registry.add_agent(agent_b)
        orchestrator = build_orchestrator(registry, client, fake_llm("B"))
        message = make_message("which one?")

        reply = await orchestrator.process_message(message, "t-1", session_id="s-1")

        assert reply.role == "agent"
        assert extract_text(reply) == "B responds:\n\nanswer"
        client.send_task.assert_awaited_once_with(agent_b, message, "s-1")

    @pytest.mark.asyncio
    async def test_records_selection_artifact(
        self, registry, client, make_card, make_message
    ) -> None:
        registry.add_agent(make_card("A", description="first"))
        registry.add_agent(make_card("B"))
        context = MagicMock()
        context.add_artifact = AsyncMock()
        orchestrator = build_orchestrator(registry, client, fake_llm("B"))

        await orchestrator.process_message(make_message("q"), "t-1", context=context)

        artifact = context.add_artifact.await_args.args[0]
        assert artifact.name == AGENT_SELECTION_ARTIFACT
        assert artifact.parts[0].text == "Selected agent: B (No description)"

    @pytest.mark.asyncio
    async def test_through_runner(self, registry, client, make_card, make_message) -> None:
        registry.add_agent(make_card(VUE_CORE_AGENT_NAME, description="core"))
        registry.add_agent(make_card(VUEX_AGENT_NAME, description="state"))
        runner = ProtocolRunner(build_orchestrator(registry, client))

        task = await runner.handle_task_send(
            TaskSendParams(id="t-1", message=make_message("What is the Vuex store?"))
        )

        assert task.status.state == TaskState.COMPLETED
        assert extract_text(task.status.message) == f"{VUEX_AGENT_NAME} responds:\n\nanswer"
        assert [artifact.name for artifact in task.artifacts] == [AGENT_SELECTION_ARTIFACT]
        assert task.artifacts[0].parts[0].text == f"Selected agent: {VUEX_AGENT_NAME} (state)"

    @pytest.mark.asyncio
    async def test_delegation_error_becomes_reply(
        self, registry, client, make_card, make_message
    ) -> None:
        registry.add_agent(make_card("B"))
        client.send_task.side_effect = RemoteAgentError("B", "boom")

        reply = await build_orchestrator(registry, client).process_message(
            make_message("q"), "t-1"
        )

        assert extract_text(reply) == (
            "Error: Error processing your request: Agent B returned error: boom (code: -32603)"
        )

    @pytest.mark.asyncio
    async def test_empty_delegated_answer(
        self, registry, client, make_card, make_message
    ) -> None:
        registry.add_agent(make_card("B"))
        client.send_task.return_value = Task(id="r", status=TaskStatus(state=TaskState.COMPLETED))

        reply = await build_orchestrator(registry, client).process_message(
            make_message("q"), "t-1"
        )

        assert extract_text(reply) == "Error: No response received from B"

    @pytest.mark.asyncio
    async def test_no_text(self, registry, client) -> None:
        message = Message(role="user", parts=[DataPart(data={"x": 1})])

        reply = await build_orchestrator(registry, client).process_message(message, "t-1")

        assert extract_text(reply) == "Error: No text content found in the message"

    @pytest.mark.asyncio
    async def test_no_agents_triggers_discovery(self, registry, client, make_message) -> None:
        reply = await build_orchestrator(registry, client).process_message(
            make_message("How do getters work?"), "t-1"
        )

        assert extract_text(reply) == NO_AGENTS_AVAILABLE_TEXT
        assert client.is_agent_accessible.await_count == 1
        client.send_task.assert_not_awaited()

        await registry.discovery_retry_task
        assert client.is_agent_accessible.await_count == 2

    @pytest.mark.asyncio
    async def test_list_agents_command(self, registry, client, make_card, make_message) -> None:
        orchestrator = build_orchestrator(registry, client)
        empty = await orchestrator.process_message(make_message("List Agents"), "t-1")
        registry.add_agent(make_card("A", ["alpha", "beta"], description="Does A"))

        listed = await orchestrator.process_message(make_message("list agents"), "t-2")

        assert extract_text(empty) == NO_AGENTS_LISTED_TEXT
        assert extract_text(listed) == (
            "Available agents:\n\n📋 A\n   Description: Does A\n   Skills: alpha, beta"
        )
        client.send_task.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_discover_agents_command(self, registry, client, make_message) -> None:
        reply = await build_orchestrator(registry, client).process_message(
            make_message("please discover agents"), "t-1"
        )

        assert extract_text(reply) == DISCOVERY_STARTED_TEXT
        assert client.is_agent_accessible.await_count == 1
        await registry.stop_discovery_retry()

    @pytest.mark.asyncio
    async def test_discovery_retries_do_not_delay_the_reply(self, client, make_message) -> None:
        sleep = RecordingSleep()
        registry = AgentRegistry(client, ["http://agents.test/a"], RetryPolicy(), sleep)
        orchestrator = build_orchestrator(registry, client)

        first = await orchestrator.process_message(make_message("What is a ref?"), "t-1")
        retry_task = registry.discovery_retry_task
        second = await orchestrator.process_message(make_message("discover agents"), "t-2")

        assert extract_text(first) == NO_AGENTS_AVAILABLE_TEXT
        assert extract_text(second) == DISCOVERY_STARTED_TEXT
        assert sleep.delays == []
        assert client.is_agent_accessible.await_count == 2
        assert retry_task is not None
        assert registry.discovery_retry_task is retry_task

        await registry.stop_discovery_retry()
        assert retry_task.done()
        assert registry.discovery_retry_task is None

    @pytest.mark.asyncio
    async def test_no_retry_scheduled_once_agents_are_found(
        self, client, make_card, make_message
    ) -> None:
        client.is_agent_accessible.return_value = True
        client.get_agent_card = AsyncMock(return_value=make_card(VUEX_AGENT_NAME, ["vuex"]))
        registry = AgentRegistry(client, ["http://agents.test/a"], RetryPolicy(), no_sleep)

        reply = await build_orchestrator(registry, client).process_message(
            make_message("discover agents"), "t-1"
        )

        assert extract_text(reply) == DISCOVERY_STARTED_TEXT
        assert registry.get_agent_by_name(VUEX_AGENT_NAME) is not None
        assert registry.discovery_retry_task is None


class TestRegistrationFallback:
    """Tests for the manual registration fallback."""

    def test_manually_register_agents(self, registry, client) -> None:
        agents = build_orchestrator(registry, client).manually_register_agents()

        assert [agent.name for agent in agents] == [VUE_CORE_AGENT_NAME, VUEX_AGENT_NAME]

    @pytest.mark.asyncio
    async def test_fallback_registers_when_empty(self, registry, client) -> None:
        orchestrator = build_orchestrator(registry, client, registration_fallback_delay=0)

        assert await orchestrator.register_fallback_after_delay() is True
        assert len(registry.get_agents()) == 2

    @pytest.mark.asyncio
    async def test_fallback_skipped_when_discovered(self, registry, client, make_card) -> None:
        registry.add_agent(make_card("Discovered"))
        orchestrator = build_orchestrator(registry, client, registration_fallback_delay=0)

        assert await orchestrator.register_fallback_after_delay() is False
        assert [agent.name for agent in registry.get_agents()] == ["Discovered"]
