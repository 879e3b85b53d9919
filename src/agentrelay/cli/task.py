"""Task inspection commands."""

import asyncio

import click
from rich.console import Console

from agentrelay.agents.errors import A2AError
from agentrelay.agents.helpers import extract_text
from agentrelay.orchestration.client import A2AClient

console = Console()


@click.group(name="task")
def task() -> None:
    """Inspect and cancel tasks on a remote agent."""


@task.command(name="get")
@click.argument("url")
@click.argument("task_id")
@click.pass_context
def get_task(ctx: click.Context, url: str, task_id: str) -> None:
    """Show the state and history of TASK_ID on the agent at URL."""

    async def _get():
        async with A2AClient(timeout=ctx.obj["timeout"]) as client:
            agent_card = await client.get_agent_card(url)
            return await client.get_task(agent_card, task_id)

    try:
        result = asyncio.run(_get())
    except A2AError as e:
        raise click.ClickException(e.message)

    if result is None:
        raise click.ClickException(f"Task not found: {task_id}")

    console.print(f"Task {result.id}: [bold]{result.status.state.value}[/bold]")
    console.print(f"Updated: {result.status.timestamp}")
    for message in result.history:
        console.print(f"[cyan]{message.role}[/cyan]: {extract_text(message)}")


@task.command(name="cancel")
@click.argument("url")
@click.argument("task_id")
@click.pass_context
def cancel_task(ctx: click.Context, url: str, task_id: str) -> None:
    """Cancel TASK_ID on the agent at URL."""

    async def _cancel():
        async with A2AClient(timeout=ctx.obj["timeout"]) as client:
            agent_card = await client.get_agent_card(url)
            return await client.cancel_task(agent_card, task_id)

    try:
        result = asyncio.run(_cancel())
    except A2AError as e:
        raise click.ClickException(e.message)

    if result.canceled:
        console.print(f"[green]Task {task_id} canceled[/green]")
    else:
        console.print(
            f"[yellow]Task {task_id} was not canceled (unknown or already finished)[/yellow]"
        )
