"""A2A HTTP routes for a single agent.

Each agent gets a router with two routes under its own prefix: the agent
card at ``{prefix}/.well-known/agent.json`` and the JSON-RPC endpoint at
``{prefix}``. The orchestrator additionally exposes a few REST helpers for
inspecting and repairing its agent directory.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from agentrelay.agents.errors import ErrorCode
from agentrelay.api.jsonrpc import JSONRPCDispatcher, error_response
from agentrelay.orchestration.orchestrator import OrchestratorAgent
from agentrelay.tasks.runner import ProtocolRunner

logger = logging.getLogger(__name__)

MAX_READY_TIMEOUT = 60.0


def create_a2a_router(runner: ProtocolRunner, prefix: str) -> APIRouter:
    """Create the A2A router of one agent.

    Args:
        runner: Runner of the agent served under ``prefix``
        prefix: Mount path of the agent (e.g. ``/api/agents/a2a/vuex``)

    Returns:
        APIRouter serving the agent card and the JSON-RPC endpoint

    Example:
        >>> app.include_router(create_a2a_router(runner, "/api/agents/a2a/vuex"))
        >>> # GET  /api/agents/a2a/vuex/.well-known/agent.json
        >>> # POST /api/agents/a2a/vuex  {"jsonrpc": "2.0", "method": "tasks/send", ...}
    """
    router = APIRouter(prefix=prefix, tags=["a2a"])
    dispatcher = JSONRPCDispatcher(runner)

    @router.get("/.well-known/agent.json")
    async def get_agent_card() -> JSONResponse:
        """Serve the agent card."""
        return JSONResponse(content=runner.get_agent_card().to_wire())

    @router.post("")
    async def handle_jsonrpc(request: Request) -> JSONResponse:
        """Handle one JSON-RPC request; always answers HTTP 200."""
        body = await request.body()
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Unparseable JSON-RPC body on %s", prefix)
            response = error_response(ErrorCode.PARSE_ERROR, "Parse error", None)
            return JSONResponse(content=response.to_wire())

        response = await dispatcher.dispatch(payload)
        return JSONResponse(content=response.to_wire())

    return router


def create_orchestrator_router(orchestrator: OrchestratorAgent, prefix: str) -> APIRouter:
    """Create the orchestrator's directory-management routes.

    Args:
        orchestrator: The orchestrator agent
        prefix: Mount path of the orchestrator

    Returns:
        APIRouter with ``GET /agents``, ``POST /register-agents`` and
        ``POST /discover-agents`` under ``prefix``
    """
    router = APIRouter(prefix=prefix, tags=["orchestrator"])
    registry = orchestrator.registry

    def directory() -> dict:
        agents = [card.to_wire() for card in registry.get_agents()]
        return {"agents": agents, "count": len(agents)}

    @router.get("/agents")
    async def list_agents() -> JSONResponse:
        """List the agents currently known to the orchestrator."""
        return JSONResponse(content=directory())

    @router.post("/register-agents")
    async def register_agents() -> JSONResponse:
        """Register the statically known specialists."""
        orchestrator.manually_register_agents()
        content = directory()
        return JSONResponse(
            content={
                "success": True,
                "message": f"Manually registered {content['count']} agents",
                **content,
            }
        )

    @router.post("/discover-agents")
    async def discover_agents(
        timeout: Optional[float] = Query(
            None, ge=0, le=MAX_READY_TIMEOUT, description="Seconds to wait for the specialists"
        ),
    ) -> JSONResponse:
        """Run discovery over the candidate endpoints.

        Without ``timeout`` a single pass is made. With it, discovery is
        repeated until both local specialists are registered or the timeout
        expires, and the response carries ``ready``.
        """
        extra: dict = {}
        if timeout is None:
            await registry.discover_agents()
        else:
            expected = [card.name for card in orchestrator.known_agent_cards()]
            extra["ready"] = await registry.wait_until_ready(expected, timeout)

        content = directory()
        return JSONResponse(
            content={
                "success": True,
                "message": f"Discovery complete, found {content['count']} agents",
                **extra,
                **content,
            }
        )

    return router
