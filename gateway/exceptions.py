"""Exceptions raised inside the gateway."""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base exception for gateway operations."""
    pass


class JsonRpcProtocolError(GatewayError):
    """An error that maps onto a JSON-RPC error object."""

    code = -32603

    def __init__(self, message: str, data: Optional[Any] = None, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.data = data
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ParseError(JsonRpcProtocolError):
    """Body was not valid JSON."""
    code = -32700


class InvalidRequestError(JsonRpcProtocolError):
    """Body was JSON but not a JSON-RPC request."""
    code = -32600


class MethodNotFoundError(JsonRpcProtocolError):
    """No handler for the requested method."""
    code = -32601


class InvalidParamsError(JsonRpcProtocolError):
    """Method exists but its params are unusable."""
    code = -32602


class InternalRpcError(JsonRpcProtocolError):
    """Handler failed unexpectedly."""
    code = -32603


class ActionNotFoundError(GatewayError):
    """Exception for unknown action names."""

    def __init__(self, name: str):
        super().__init__(f"Unknown action: {name}")
        self.name = name


class SessionNotFoundError(GatewayError):
    """Exception for unknown or expired SSE sessions."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found or expired: {session_id}")
        self.session_id = session_id
