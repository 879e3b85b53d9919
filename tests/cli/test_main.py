"""Tests for the agentrelay CLI."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from click.testing import CliRunner

from agentrelay.agents.errors import AgentUnavailableError
from agentrelay.agents.helpers import create_response_message, create_text_artifact
from agentrelay.agents.models import AgentCapabilities, AgentCard, AgentSkill
from agentrelay.cli.main import cli, local_base_url
from agentrelay.config import load_settings_from_env
from agentrelay.tasks.models import Task, TaskCancelResult, TaskState, TaskStatus

URL = "http://localhost:3333/api/agents/a2a/orchestrator"

CARD = AgentCard(
    name="Vue.js Orchestrator Agent",
    description="Routes queries",
    url=URL,
    version="1.0.0",
    capabilities=AgentCapabilities(),
    skills=[AgentSkill(name="vue_knowledge_orchestration")],
)


class FakeClient:
    """Stand-in for A2AClient recording the calls made by the CLI."""

    instances: list["FakeClient"] = []
    card_error = None
    task_result = None

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self.calls: list[tuple] = []
        FakeClient.instances.append(self)

    async def __aenter__(self) -> "FakeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def get_agent_card(self, url: str) -> AgentCard:
        self.calls.append(("card", url))
        if FakeClient.card_error is not None:
            raise FakeClient.card_error
        return CARD

    async def send_task(self, card, message, session_id=None, task_id=None) -> Task:
        self.calls.append(("send", message.parts[0].text, session_id, task_id))
        return Task(
            id=task_id,
            status=TaskStatus(
                state=TaskState.COMPLETED,
                message=create_response_message("Vuex A2A Agent responds:\n\nUse getters."),
            ),
            artifacts=[create_text_artifact("agent_selection", "Selected agent: Vuex A2A Agent")],
        )

    async def get_task(self, card, task_id):
        self.calls.append(("get", task_id))
        return FakeClient.task_result

    async def cancel_task(self, card, task_id) -> TaskCancelResult:
        self.calls.append(("cancel", task_id))
        return TaskCancelResult(id=task_id, canceled=True)


@pytest.fixture
def fake_client():
    FakeClient.instances = []
    FakeClient.card_error = None
    FakeClient.task_result = None
    with patch("agentrelay.cli.main.A2AClient", FakeClient), patch(
        "agentrelay.cli.task.A2AClient", FakeClient
    ):
        yield FakeClient


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def unset_base_url(monkeypatch):
    # setenv first so that undo also removes values written by serve
    for name in ("AGENTRELAY_BASE_URL", "AGENTRELAY_API_PREFIX", "AGENTRELAY_AGENT_URLS"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestCli:
    """Tests for the top-level commands."""

    def test_version(self, runner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_serve(self, runner, unset_base_url) -> None:
        with patch("agentrelay.cli.main.uvicorn.run") as run:
            result = runner.invoke(cli, ["serve", "--port", "8080"])

        assert result.exit_code == 0
        run.assert_called_once_with(
            "agentrelay.api.app:create_app",
            factory=True,
            host="127.0.0.1",
            port=8080,
            reload=False,
        )

    def test_serve_port_reaches_discovery_urls(self, runner, unset_base_url) -> None:
        seen = {}

        def run(*args, **kwargs) -> None:
            seen["urls"] = load_settings_from_env().candidate_urls

        with patch("agentrelay.cli.main.uvicorn.run", side_effect=run):
            result = runner.invoke(cli, ["serve", "--host", "0.0.0.0", "--port", "8080"])

        assert result.exit_code == 0
        assert seen["urls"] == [
            "http://localhost:8080/api/agents/a2a/vue-core",
            "http://localhost:8080/api/agents/a2a/vuex",
        ]

    def test_serve_keeps_configured_base_url(self, runner, monkeypatch) -> None:
        monkeypatch.setenv("AGENTRELAY_BASE_URL", "https://relay.example.com")

        with patch("agentrelay.cli.main.uvicorn.run"):
            result = runner.invoke(cli, ["serve", "--port", "8080"])

        assert result.exit_code == 0
        assert load_settings_from_env().base_url == "https://relay.example.com"

    @pytest.mark.parametrize(
        "host, expected",
        [
            ("127.0.0.1", "http://127.0.0.1:9000"),
            ("0.0.0.0", "http://localhost:9000"),
            ("::", "http://localhost:9000"),
            ("::1", "http://[::1]:9000"),
        ],
    )
    def test_local_base_url(self, host, expected) -> None:
        assert local_base_url(host, 9000) == expected

    def test_card_json(self, runner, fake_client) -> None:
        result = runner.invoke(cli, ["--timeout", "3", "card", URL, "--json"])

        assert result.exit_code == 0
        assert '"name": "Vue.js Orchestrator Agent"' in result.output
        assert fake_client.instances[0].timeout == 3.0

    def test_card_table(self, runner, fake_client) -> None:
        result = runner.invoke(cli, ["card", URL])

        assert result.exit_code == 0
        assert "vue_knowledge_orchestration" in result.output

    def test_card_unavailable(self, runner, fake_client) -> None:
        fake_client.card_error = AgentUnavailableError(URL, "connection refused")

        result = runner.invoke(cli, ["card", URL])

        assert result.exit_code == 1
        assert "is not accessible: connection refused" in result.output

    def test_ask(self, runner, fake_client) -> None:
        result = runner.invoke(
            cli, ["ask", URL, "What are getters?", "--session", "s-1", "--task-id", "t-1"]
        )

        assert result.exit_code == 0
        assert fake_client.instances[0].calls == [
            ("card", URL),
            ("send", "What are getters?", "s-1", "t-1"),
        ]
        assert "Task t-1: completed" in result.output
        assert "agent_selection" in result.output
        assert result.output.rstrip().endswith("Vuex A2A Agent responds:\n\nUse getters.")

    def test_ask_generates_task_id(self, runner, fake_client) -> None:
        result = runner.invoke(cli, ["ask", URL, "hello"])

        assert result.exit_code == 0
        _, _, _, task_id = fake_client.instances[0].calls[1]
        assert len(task_id) == 36

    def test_agents(self, runner) -> None:
        response = MagicMock()
        response.raise_for_status.return_value = None
        response.json.return_value = {
            "agents": [{"name": "Vuex", "url": "http://a", "skills": [{"name": "vuex_knowledge"}]}],
            "count": 1,
        }

        async def fake_get(self, url, **kwargs):
            assert url == f"{URL}/agents"
            return response

        with patch.object(httpx.AsyncClient, "get", fake_get):
            result = runner.invoke(cli, ["agents", URL])

        assert result.exit_code == 0
        assert "Agents (1)" in result.output
        assert "vuex_knowledge" in result.output

    def test_agents_unreachable(self, runner) -> None:
        async def fake_get(self, url, **kwargs):
            raise httpx.ConnectError("refused")

        with patch.object(httpx.AsyncClient, "get", fake_get):
            result = runner.invoke(cli, ["agents", URL])

        assert result.exit_code == 1
        assert f"Cannot list agents at {URL}" in result.output


class TestTaskCommands:
    """Tests for the task subcommands."""

    def test_get(self, runner, fake_client) -> None:
        fake_client.task_result = Task(
            id="t-1",
            status=TaskStatus(state=TaskState.WORKING),
            history=[create_response_message("Processing your request...")],
        )

        result = runner.invoke(cli, ["task", "get", URL, "t-1"])

        assert result.exit_code == 0
        assert "Task t-1: working" in result.output
        assert "agent: Processing your request..." in result.output

    def test_get_unknown(self, runner, fake_client) -> None:
        result = runner.invoke(cli, ["task", "get", URL, "nope"])

        assert result.exit_code == 1
        assert "Task not found: nope" in result.output

    def test_cancel(self, runner, fake_client) -> None:
        result = runner.invoke(cli, ["task", "cancel", URL, "t-1"])

        assert result.exit_code == 0
        assert "Task t-1 canceled" in result.output
        assert fake_client.instances[0].calls[-1] == ("cancel", "t-1")
