"""JSON-RPC 2.0 envelope models and request dispatcher.

This module maps the A2A JSON-RPC methods onto a ProtocolRunner. It
validates the minimal shape of each request, converts protocol errors
into JSON-RPC error objects and never lets an exception escape to the
HTTP layer.
"""

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from agentrelay.agents.errors import A2AError, ErrorCode
from agentrelay.tasks.models import TaskIdParams, TaskSendParams
from agentrelay.tasks.runner import ProtocolRunner

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

METHOD_SEND = "tasks/send"
METHOD_GET = "tasks/get"
METHOD_CANCEL = "tasks/cancel"


class JSONRPCError(BaseModel):
    """JSON-RPC error object.

    Attributes:
        code: Error code (see ErrorCode)
        message: Human-readable error message
        data: Optional additional error data
    """

    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCRequest(BaseModel):
    """JSON-RPC request envelope.

    ``params`` is left undecoded; each method validates its own parameters.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: Union[str, int]
    method: str
    params: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    """JSON-RPC response envelope.

    Exactly one of ``result`` and ``error`` is set.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[Union[str, int]] = None
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize the response, dropping whichever of result/error is unset."""
        body: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error.model_dump(exclude_none=True)
        else:
            body["result"] = self.result
        return body


def error_response(
    code: int,
    message: str,
    request_id: Optional[Union[str, int]],
    data: Optional[Any] = None,
) -> JSONRPCResponse:
    """Build a JSON-RPC error response.

    Args:
        code: Error code
        message: Error message
        request_id: ID of the request being answered
        data: Optional additional error data

    Returns:
        JSONRPCResponse carrying the error
    """
    return JSONRPCResponse(
        id=request_id,
        error=JSONRPCError(code=int(code), message=message, data=data),
    )


def _parse_request(payload: Any) -> Optional[JSONRPCRequest]:
    if not isinstance(payload, dict) or payload.get("jsonrpc") != JSONRPC_VERSION:
        return None
    request_id = payload.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (str, int)) or not request_id:
        return None
    if not isinstance(payload.get("method"), str):
        return None
    return JSONRPCRequest.model_validate(payload)


def _task_id_param(params: Any) -> Optional[str]:
    try:
        return TaskIdParams.model_validate(params).id
    except ValidationError:
        return None


class JSONRPCDispatcher:
    """Dispatches JSON-RPC requests to a ProtocolRunner.

    Attributes:
        runner: The runner answering the ``tasks/*`` methods

    Example:
        >>> dispatcher = JSONRPCDispatcher(runner)
        >>> response = await dispatcher.dispatch(
        ...     {"jsonrpc": "2.0", "id": "1", "method": "tasks/get", "params": {"id": "t-1"}}
        ... )
        >>> response.error.code
        404
    """

    def __init__(self, runner: ProtocolRunner) -> None:
        """Initialize the dispatcher.

        Args:
            runner: Runner for the agent served by this endpoint
        """
        self.runner = runner

    async def dispatch(self, payload: Any) -> JSONRPCResponse:
        """Handle one decoded JSON-RPC request.

        Args:
            payload: The decoded request body

        Returns:
            The JSON-RPC response (never raises)
        """
        request = _parse_request(payload)
        if request is None:
            raw_id = payload.get("id") if isinstance(payload, dict) else None
            return error_response(
                ErrorCode.INVALID_REQUEST,
                "Invalid JSON-RPC request",
                raw_id if isinstance(raw_id, str) else "0",
            )

        request_id = request.id
        method = request.method
        params = request.params
        logger.info("Processing JSON-RPC request: %s", method)

        try:
            if method == METHOD_SEND:
                return await self._handle_send(request_id, params)
            if method == METHOD_GET:
                return await self._handle_get(request_id, params)
            if method == METHOD_CANCEL:
                return await self._handle_cancel(request_id, params)
            return error_response(
                ErrorCode.METHOD_NOT_FOUND,
                f"Method not supported: {method}",
                request_id,
            )
        except A2AError as e:
            logger.error("A2A error processing JSON-RPC request: %s", e)
            return error_response(e.code, e.message, request_id, e.data)
        except Exception as e:
            logger.exception("Error processing JSON-RPC request: %s", e)
            return error_response(ErrorCode.INTERNAL_ERROR, str(e), request_id)

    async def _handle_send(self, request_id: Union[str, int], params: Any) -> JSONRPCResponse:
        try:
            send_params = TaskSendParams.model_validate(params)
        except ValidationError:
            return error_response(
                ErrorCode.INVALID_PARAMS, "Invalid task send parameters", request_id
            )

        task = await self.runner.handle_task_send(send_params)
        return JSONRPCResponse(id=request_id, result=task.to_wire())

    async def _handle_get(self, request_id: Union[str, int], params: Any) -> JSONRPCResponse:
        task_id = _task_id_param(params)
        if task_id is None:
            return error_response(ErrorCode.INVALID_PARAMS, "Missing task ID", request_id)

        task = await self.runner.handle_task_get(task_id)
        if task is None:
            return error_response(
                ErrorCode.TASK_NOT_FOUND, f"Task not found: {task_id}", request_id
            )
        return JSONRPCResponse(id=request_id, result=task.to_wire())

    async def _handle_cancel(self, request_id: Union[str, int], params: Any) -> JSONRPCResponse:
        task_id = _task_id_param(params)
        if task_id is None:
            return error_response(ErrorCode.INVALID_PARAMS, "Missing task ID", request_id)

        result = await self.runner.handle_task_cancel(task_id)
        return JSONRPCResponse(id=request_id, result=result.model_dump())
