"""Search gateway: an MCP search tool served over JSON-RPC and SSE."""

__version__ = "1.0.0"
