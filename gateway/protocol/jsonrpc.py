"""JSON-RPC 2.0 envelopes."""

import time
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from gateway.exceptions import InvalidRequestError, JsonRpcProtocolError

JSONRPC_VERSION = "2.0"

RequestId = Union[str, int, None]


class JsonRpcRequest(BaseModel):
    """A request or notification from the client."""
    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    method: str = Field(..., min_length=1)
    params: Optional[Union[Dict[str, Any], List[Any]]] = None

    @property
    def is_notification(self) -> bool:
        """Requests sent without an id expect no response."""
        return "id" not in self.model_fields_set

    @property
    def params_dict(self) -> Dict[str, Any]:
        return self.params if isinstance(self.params, dict) else {}


def fallback_id() -> int:
    """Millisecond timestamp used when the client gave no usable id."""
    return int(time.time() * 1000)


def parse_request(payload: Any) -> JsonRpcRequest:
    """Validate a decoded JSON body as a JSON-RPC request.

    Raises:
        InvalidRequestError: if the body is not a request object
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request must be a JSON object")

    try:
        return JsonRpcRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid JSON-RPC request",
            data=[err["msg"] for err in e.errors()],
        )


def success_response(request_id: RequestId, result: Any) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": fallback_id() if request_id is None else request_id,
        "result": result,
    }


def error_response(request_id: RequestId, error: JsonRpcProtocolError) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": fallback_id() if request_id is None else request_id,
        "error": error.to_dict(),
    }


def fallback_response() -> Dict[str, Any]:
    """Envelope injected when a handler wrote nothing."""
    return success_response(None, {"ok": True, "note": "fallback-injected"})
