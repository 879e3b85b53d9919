"""HTTP route handlers."""

from agentrelay.api.routes.a2a import create_a2a_router, create_orchestrator_router
from agentrelay.api.routes.health import router as health_router

__all__ = ["create_a2a_router", "create_orchestrator_router", "health_router"]
