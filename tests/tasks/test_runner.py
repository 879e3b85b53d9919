"""Tests for the protocol runner state machine."""

import asyncio
from typing import Optional

import pytest

from agentrelay.agents.base import A2AAgent, TaskContext
from agentrelay.agents.helpers import create_response_message, create_text_artifact, extract_text
from agentrelay.agents.models import AgentCapabilities, AgentCard, AgentSkill, Message
from agentrelay.tasks.models import TaskSendParams, TaskState
from agentrelay.tasks.runner import WORKING_MESSAGE_TEXT, ProtocolRunner


class EchoAgent:
    """Agent replying with the text it received."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Optional[str]]] = []

    def get_agent_card(self) -> AgentCard:
        return AgentCard(
            name="Echo Agent",
            url="http://agents.test/echo",
            version="1.0.0",
            capabilities=AgentCapabilities(),
            skills=[AgentSkill(name="echo")],
        )

    async def process_message(
        self,
        message: Message,
        task_id: str,
        session_id: Optional[str] = None,
        context: Optional[TaskContext] = None,
    ) -> Message:
        self.calls.append((task_id, session_id))
        if context is not None:
            await context.add_artifact(create_text_artifact("echo", "seen"))
        return create_response_message(f"echo: {extract_text(message)}")


class FailingAgent(EchoAgent):
    """Agent that always raises."""

    async def process_message(self, message, task_id, session_id=None, context=None) -> Message:
        raise RuntimeError("boom")


class SlowAgent(EchoAgent):
    """Agent that waits on an event before replying."""

    def __init__(self) -> None:
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def process_message(self, message, task_id, session_id=None, context=None) -> Message:
        self.started.set()
        await self.release.wait()
        return create_response_message("late answer")


def send_params(make_message, task_id: str = "t-1", text: str = "hello") -> TaskSendParams:
    return TaskSendParams(id=task_id, session_id="s-1", message=make_message(text))


class TestProtocolRunner:
    """Tests for ProtocolRunner."""

    def test_agents_satisfy_protocol(self) -> None:
        assert isinstance(EchoAgent(), A2AAgent)

    def test_agent_card_is_delegated(self) -> None:
        assert ProtocolRunner(EchoAgent()).get_agent_card().name == "Echo Agent"

    @pytest.mark.asyncio
    async def test_send_completes_task(self, make_message) -> None:
        agent = EchoAgent()
        runner = ProtocolRunner(agent)

        task = await runner.handle_task_send(send_params(make_message))

        assert task.status.state == TaskState.COMPLETED
        assert extract_text(task.status.message) == "echo: hello"
        assert agent.calls == [("t-1", "s-1")]

    @pytest.mark.asyncio
    async def test_history_records_working_message_before_reply(self, make_message) -> None:
        runner = ProtocolRunner(EchoAgent())

        task = await runner.handle_task_send(send_params(make_message))

        assert [extract_text(message) for message in task.history] == [
            "hello",
            WORKING_MESSAGE_TEXT,
            "echo: hello",
        ]
        assert [message.role for message in task.history] == ["user", "agent", "agent"]

    @pytest.mark.asyncio
    async def test_agent_can_record_artifacts(self, make_message) -> None:
        runner = ProtocolRunner(EchoAgent())

        task = await runner.handle_task_send(send_params(make_message))

        assert [artifact.name for artifact in task.artifacts] == ["echo"]

    @pytest.mark.asyncio
    async def test_failure_marks_task_failed_and_reraises(self, make_message) -> None:
        runner = ProtocolRunner(FailingAgent())

        with pytest.raises(RuntimeError, match="boom"):
            await runner.handle_task_send(send_params(make_message))

        task = await runner.handle_task_get("t-1")
        assert task.status.state == TaskState.FAILED
        assert extract_text(task.status.message) == "Task failed: boom"

    @pytest.mark.asyncio
    async def test_get_unknown_task(self) -> None:
        assert await ProtocolRunner(EchoAgent()).handle_task_get("missing") is None

    @pytest.mark.asyncio
    async def test_cancel_unknown_task(self) -> None:
        result = await ProtocolRunner(EchoAgent()).handle_task_cancel("missing")

        assert result.id == "missing"
        assert result.canceled is False

    @pytest.mark.asyncio
    async def test_cancel_submitted_task(self, make_message) -> None:
        runner = ProtocolRunner(EchoAgent())
        await runner.store.create_or_get_task("t-1", make_message("hello"))

        result = await runner.handle_task_cancel("t-1")

        assert result.canceled is True
        assert (await runner.handle_task_get("t-1")).status.state == TaskState.CANCELED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("agent_class", [EchoAgent, FailingAgent])
    async def test_cancel_terminal_task_is_refused(self, make_message, agent_class) -> None:
        runner = ProtocolRunner(agent_class())
        try:
            await runner.handle_task_send(send_params(make_message))
        except RuntimeError:
            pass
        before = await runner.handle_task_get("t-1")

        result = await runner.handle_task_cancel("t-1")

        assert result.canceled is False
        assert await runner.handle_task_get("t-1") == before

    @pytest.mark.asyncio
    async def test_late_completion_does_not_overwrite_cancel(self, make_message) -> None:
        agent = SlowAgent()
        runner = ProtocolRunner(agent)

        pending = asyncio.create_task(runner.handle_task_send(send_params(make_message)))
        await agent.started.wait()
        assert (await runner.handle_task_cancel("t-1")).canceled is True

        agent.release.set()
        task = await pending

        assert task.status.state == TaskState.CANCELED
        assert all(extract_text(message) != "late answer" for message in task.history)
