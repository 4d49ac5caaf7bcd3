"""In-process MCP server that dispatches JSON-RPC methods."""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from gateway.actions import ActionRegistry, ActionResult
from gateway.exceptions import (
    ActionNotFoundError,
    InternalRpcError,
    InvalidParamsError,
    InvalidRequestError,
    JsonRpcProtocolError,
    MethodNotFoundError,
)
from gateway.observability import LogContext, get_logger, get_metrics_collector
from gateway.protocol.jsonrpc import (
    JsonRpcRequest,
    error_response,
    parse_request,
    success_response,
)

logger = get_logger(__name__)

MethodHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class McpServer:
    """Answers MCP requests against an action registry.

    Every failure is turned into a JSON-RPC envelope; ``handle`` never raises
    for a bad request.
    """

    def __init__(
        self,
        name: str,
        version: str,
        registry: ActionRegistry,
        protocol_version: str = "2024-11-05",
    ):
        self.name = name
        self.version = version
        self.registry = registry
        self.protocol_version = protocol_version
        self.metrics = get_metrics_collector()
        self._methods: Dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    @property
    def server_info(self) -> Dict[str, str]:
        return {"name": self.name, "version": self.version}

    def describe(self) -> Dict[str, Any]:
        """Capabilities summary for diagnostics."""
        return {
            "serverInfo": self.server_info,
            "protocolVersion": self.protocol_version,
            "methods": sorted(self._methods),
            "tools": self.registry.names(),
        }

    async def handle(self, payload: Any) -> Union[Dict[str, Any], List[Dict[str, Any]], None]:
        """Handle a decoded request body.

        Args:
            payload: a single request object or a batch list

        Returns:
            A response, a list of responses, or None when nothing needs answering
        """
        if isinstance(payload, list):
            if not payload:
                self.metrics.increment_counter("rpc_errors_total", labels={"code": str(InvalidRequestError.code)})
                return error_response(None, InvalidRequestError("Empty batch"))

            responses = []
            for item in payload:
                response = await self.handle_one(item)
                if response is not None:
                    responses.append(response)
            return responses or None

        return await self.handle_one(payload)

    async def handle_one(self, payload: Any) -> Optional[Dict[str, Any]]:
        request_id = payload.get("id") if isinstance(payload, dict) else None

        try:
            request = parse_request(payload)
        except JsonRpcProtocolError as e:
            logger.warning("Rejected request", error=e.message)
            self.metrics.increment_counter("rpc_errors_total", labels={"code": str(e.code)})
            return error_response(request_id, e)

        if request.is_notification or request.method.startswith("notifications/"):
            logger.info("Notification received", method=request.method)
            self.metrics.increment_counter("rpc_notifications_total", labels={"method": request.method})
            return None

        self.metrics.increment_counter("rpc_requests_total", labels={"method": request.method})

        with LogContext(logger, method=request.method, rpc_id=request.id) as log:
            try:
                with self.metrics.time_operation("rpc_duration", {"method": request.method}):
                    result = await self.dispatch(request)
            except JsonRpcProtocolError as e:
                log.warning("Request failed", code=e.code, error=e.message)
                self.metrics.increment_counter("rpc_errors_total", labels={"code": str(e.code)})
                return error_response(request.id, e)
            except Exception as e:
                log.error("Unhandled error in handler", error=str(e), exc_info=True)
                self.metrics.increment_counter("rpc_errors_total", labels={"code": str(InternalRpcError.code)})
                return error_response(request.id, InternalRpcError(f"{type(e).__name__}: {e}"))

            log.debug("Request completed")
            return success_response(request.id, result)

    async def dispatch(self, request: JsonRpcRequest) -> Any:
        handler = self._methods.get(request.method)
        if handler is None:
            raise MethodNotFoundError(f"Method not found: {request.method}")
        return await handler(request.params_dict)

    async def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        client = params.get("clientInfo") or {}
        logger.info(
            "Client initialized",
            client=client.get("name"),
            client_version=client.get("version"),
            requested_protocol=params.get("protocolVersion"),
        )
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": self.server_info,
        }

    async def _ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def _tools_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": self.registry.list()}

    async def _tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("tools/call requires a tool 'name'")

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("'arguments' must be an object")

        try:
            result = await self.registry.call(name, arguments)
        except ActionNotFoundError as e:
            result = ActionResult.text(str(e), is_error=True)
        except InvalidParamsError as e:
            result = ActionResult.text(e.message, is_error=True)
        except Exception as e:
            logger.error("Tool failed", tool=name, error=str(e), exc_info=True)
            result = ActionResult.text(f"{type(e).__name__}: {e}", is_error=True)

        return result.to_dict()
