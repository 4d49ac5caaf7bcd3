"""JSON-RPC protocol handling."""

from .jsonrpc import (
    JsonRpcRequest,
    error_response,
    fallback_response,
    parse_request,
    success_response,
)
from .server import McpServer

__all__ = [
    "JsonRpcRequest",
    "McpServer",
    "error_response",
    "fallback_response",
    "parse_request",
    "success_response",
]
