"""Exception handlers for the HTTP layer.

JSON-RPC endpoints report their own errors inside the JSON-RPC body; these
handlers only cover the REST-style convenience routes and anything that
escapes a handler. Stack traces go to the log, never to the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agentrelay.agents.errors import A2AError, ErrorCode

logger = logging.getLogger(__name__)

_HTTP_STATUS_BY_CODE = {
    ErrorCode.TASK_NOT_FOUND: 404,
    ErrorCode.INVALID_PARAMS: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.PARSE_ERROR: 400,
    ErrorCode.METHOD_NOT_FOUND: 404,
}


def setup_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application.

    Args:
        app: The FastAPI application instance to configure
    """

    @app.exception_handler(A2AError)
    async def handle_a2a_error(request: Request, exc: A2AError) -> JSONResponse:
        """Convert an A2AError into a JSON error body."""
        logger.error("A2A error on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=_HTTP_STATUS_BY_CODE.get(exc.code, 500),
            content={"success": False, "error": exc.to_jsonrpc_error()},
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
        """Log an unexpected exception and return a generic 500 response."""
        logger.exception("Unexpected error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {"code": int(ErrorCode.INTERNAL_ERROR), "message": str(exc)},
            },
        )
