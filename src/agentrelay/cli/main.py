"""Main CLI entry point for agentrelay.

Provides commands to run the server and to talk to any A2A agent over HTTP.
"""

import asyncio
import json
import os
import uuid
from typing import Optional

import click
import httpx
import uvicorn
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from agentrelay.agents.errors import A2AError
from agentrelay.agents.helpers import extract_text
from agentrelay.agents.models import AgentCard, Message, TextPart
from agentrelay.cli import task
from agentrelay.config import load_settings_from_env
from agentrelay.orchestration.client import A2AClient

console = Console()


def print_agent_card(card: AgentCard) -> None:
    """Render an agent card as a table."""
    table = Table(title=card.name, show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Description", card.description or "No description")
    table.add_row("URL", card.url)
    table.add_row("Version", card.version)
    table.add_row("Streaming", str(card.capabilities.streaming))
    table.add_row("Skills", ", ".join(skill.name for skill in card.skills))
    console.print(table)


@click.group()
@click.version_option(version="0.1.0", prog_name="agentrelay")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.pass_context
def cli(ctx: click.Context, timeout: Optional[float]) -> None:
    """agentrelay - A2A multi-agent server and client."""
    ctx.ensure_object(dict)
    ctx.obj["timeout"] = timeout or load_settings_from_env().rpc_timeout


def local_base_url(host: str, port: int) -> str:
    """Base URL clients of this process use to reach a server bound to ``host``."""
    if host in ("", "0.0.0.0", "::"):
        host = "localhost"
    elif ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{port}"


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=3333, show_default=True, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the orchestrator and specialist agents.

    Unless AGENTRELAY_BASE_URL is set, it is derived from the bind address
    so the orchestrator discovers the specialists on the port actually
    served. The variable is inherited by reload workers.

    Examples:
        agentrelay serve
        agentrelay serve --port 8080
    """
    load_dotenv()
    os.environ.setdefault("AGENTRELAY_BASE_URL", local_base_url(host, port))
    uvicorn.run(
        "agentrelay.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@cli.command()
@click.argument("url")
@click.option("--json", "as_json", is_flag=True, help="Print the raw card JSON")
@click.pass_context
def card(ctx: click.Context, url: str, as_json: bool) -> None:
    """Show the agent card of the agent at URL.

    Examples:
        agentrelay card http://localhost:3333/api/agents/a2a/vuex
    """

    async def _card() -> AgentCard:
        async with A2AClient(timeout=ctx.obj["timeout"]) as client:
            return await client.get_agent_card(url)

    try:
        agent_card = asyncio.run(_card())
    except A2AError as e:
        raise click.ClickException(e.message)

    if as_json:
        click.echo(json.dumps(agent_card.to_wire(), indent=2))
    else:
        print_agent_card(agent_card)


@cli.command()
@click.argument("url")
@click.argument("query")
@click.option("--session", "session_id", default=None, help="Session ID to continue")
@click.option("--task-id", default=None, help="Task ID (a new UUID by default)")
@click.pass_context
def ask(
    ctx: click.Context,
    url: str,
    query: str,
    session_id: Optional[str],
    task_id: Optional[str],
) -> None:
    """Send QUERY as a new task to the agent at URL and print the reply.

    Examples:
        agentrelay ask http://localhost:3333/api/agents/a2a/orchestrator "What are Vuex getters?"
    """
    message = Message(role="user", parts=[TextPart(text=query)])

    async def _ask():
        async with A2AClient(timeout=ctx.obj["timeout"]) as client:
            agent_card = await client.get_agent_card(url)
            return await client.send_task(
                agent_card, message, session_id=session_id, task_id=task_id or str(uuid.uuid4())
            )

    try:
        result = asyncio.run(_ask())
    except A2AError as e:
        raise click.ClickException(e.message)

    console.print(f"[dim]Task {result.id}: {result.status.state.value}[/dim]")
    for artifact in result.artifacts:
        texts = [part.text for part in artifact.parts if isinstance(part, TextPart)]
        console.print(f"[blue]{artifact.name}[/blue]: {' '.join(texts)}")
    click.echo(extract_text(result.status.message))


@cli.command()
@click.argument("url")
@click.pass_context
def agents(ctx: click.Context, url: str) -> None:
    """List the agents known to the orchestrator at URL.

    Examples:
        agentrelay agents http://localhost:3333/api/agents/a2a/orchestrator
    """

    async def _agents() -> dict:
        async with httpx.AsyncClient(timeout=ctx.obj["timeout"]) as http:
            response = await http.get(f"{url.rstrip('/')}/agents")
            response.raise_for_status()
            return response.json()

    try:
        directory = asyncio.run(_agents())
    except httpx.HTTPError as e:
        raise click.ClickException(f"Cannot list agents at {url}: {e}")

    table = Table(title=f"Agents ({directory.get('count', 0)})")
    table.add_column("Name", style="green")
    table.add_column("URL", style="cyan")
    table.add_column("Skills")
    for entry in directory.get("agents", []):
        skills = ", ".join(skill.get("name", "") for skill in entry.get("skills", []))
        table.add_row(entry.get("name", ""), entry.get("url", ""), skills)
    console.print(table)

    if not directory.get("agents"):
        console.print("[yellow]No agents registered yet.[/yellow]")


cli.add_command(task.task)


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
