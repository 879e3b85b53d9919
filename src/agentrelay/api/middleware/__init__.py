"""HTTP middleware and exception handlers."""

from agentrelay.api.middleware.correlation import CorrelationIdMiddleware
from agentrelay.api.middleware.error_handler import setup_error_handlers

__all__ = ["CorrelationIdMiddleware", "setup_error_handlers"]
