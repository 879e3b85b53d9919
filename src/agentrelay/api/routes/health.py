"""Health check endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    """Health check response.

    Attributes:
        status: "healthy" once at least one agent is registered with the
            orchestrator, "degraded" before that
        agents: Number of agents known to the orchestrator
        version: Application version
    """

    status: str
    agents: int
    version: str = "0.1.0"


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request) -> HealthCheckResponse:
    """Report whether the orchestrator has a usable agent directory."""
    registry = getattr(request.app.state, "registry", None)
    agents = len(registry.get_agents()) if registry is not None else 0
    return HealthCheckResponse(status="healthy" if agents else "degraded", agents=agents)
