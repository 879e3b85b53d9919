"""Logging and request tracing."""

from agentrelay.observability.logging import (
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)

__all__ = ["setup_logging", "get_logger", "set_correlation_id", "get_correlation_id"]
