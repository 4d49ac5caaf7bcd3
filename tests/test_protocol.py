"""Tests for JSON-RPC envelopes and the MCP server."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from gateway.actions import ActionRegistry, ActionSpec, build_registry
from gateway.db import DatabaseClient
from gateway.exceptions import InvalidRequestError, MethodNotFoundError
from gateway.protocol import (
    McpServer,
    error_response,
    fallback_response,
    parse_request,
    success_response,
)


class TestEnvelopes:
    """Test envelope parsing and construction."""

    def test_parse_request(self):
        request = parse_request({"jsonrpc": "2.0", "id": 7, "method": "ping"})

        assert request.id == 7
        assert request.method == "ping"
        assert request.is_notification is False
        assert request.params_dict == {}

    def test_parse_notification(self):
        request = parse_request({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert request.is_notification is True

    def test_explicit_null_id_is_not_a_notification(self):
        request = parse_request({"jsonrpc": "2.0", "id": None, "method": "ping"})
        assert request.is_notification is False

    def test_parse_rejects_non_object(self):
        with pytest.raises(InvalidRequestError):
            parse_request(["ping"])

    def test_parse_rejects_missing_method(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_request({"jsonrpc": "2.0", "id": 1})

        assert exc_info.value.code == -32600
        assert exc_info.value.data

    def test_success_response_keeps_id(self):
        assert success_response("abc", {"ok": True}) == {
            "jsonrpc": "2.0",
            "id": "abc",
            "result": {"ok": True},
        }

    def test_missing_id_gets_timestamp(self):
        response = error_response(None, MethodNotFoundError("Method not found: x"))

        assert isinstance(response["id"], int)
        assert response["id"] > 0
        assert response["error"] == {"code": -32601, "message": "Method not found: x"}

    def test_fallback_response(self):
        response = fallback_response()

        assert response["jsonrpc"] == "2.0"
        assert response["result"] == {"ok": True, "note": "fallback-injected"}


class TestMcpServer:
    """Test method dispatch."""

    @pytest.fixture
    def database(self):
        return DatabaseClient(url=None, service_key=None)

    @pytest.fixture
    def server(self, database):
        return McpServer("supabase-mcp", "1.0.0", build_registry(database), protocol_version="2024-11-05")

    @pytest.mark.asyncio
    async def test_initialize(self, server):
        response = await server.handle({
            "jsonrpc": "2.0",
            "id": 1,
            "method": "initialize",
            "params": {"protocolVersion": "2024-11-05", "clientInfo": {"name": "test", "version": "0"}},
        })

        assert response["id"] == 1
        assert response["result"]["protocolVersion"] == "2024-11-05"
        assert response["result"]["capabilities"] == {"tools": {}}
        assert response["result"]["serverInfo"] == {"name": "supabase-mcp", "version": "1.0.0"}

    @pytest.mark.asyncio
    async def test_ping(self, server):
        response = await server.handle({"jsonrpc": "2.0", "id": 2, "method": "ping"})
        assert response["result"] == {}

    @pytest.mark.asyncio
    async def test_tools_list_has_only_search(self, server):
        response = await server.handle({"jsonrpc": "2.0", "id": 3, "method": "tools/list"})

        tools = response["result"]["tools"]
        assert [tool["name"] for tool in tools] == ["search"]
        assert tools[0]["inputSchema"]["required"] == ["query"]

    @pytest.mark.asyncio
    async def test_tools_call_search_returns_stub(self, server):
        response = await server.handle({
            "jsonrpc": "2.0",
            "id": 4,
            "method": "tools/call",
            "params": {"name": "search", "arguments": {"query": "invoices"}},
        })

        result = response["result"]
        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        assert "invoices" in result["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_tools_call_unknown_tool(self, server):
        response = await server.handle({
            "jsonrpc": "2.0",
            "id": 5,
            "method": "tools/call",
            "params": {"name": "delete_everything", "arguments": {}},
        })

        assert "error" not in response
        assert response["result"]["isError"] is True
        assert "delete_everything" in response["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_tools_call_bad_arguments(self, server):
        response = await server.handle({
            "jsonrpc": "2.0",
            "id": 6,
            "method": "tools/call",
            "params": {"name": "search", "arguments": {"query": ""}},
        })

        assert response["result"]["isError"] is True

    @pytest.mark.asyncio
    async def test_tools_call_without_name(self, server):
        response = await server.handle({"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": {}})
        assert response["error"]["code"] == -32602

    @pytest.mark.asyncio
    async def test_tool_exception_becomes_error_result(self):
        registry = ActionRegistry()
        registry.register(ActionSpec(
            name="broken",
            description="Always fails",
            input_schema={"type": "object"},
            handler=AsyncMock(side_effect=RuntimeError("boom")),
        ))
        server = McpServer("test", "0", registry)

        response = await server.handle({
            "jsonrpc": "2.0", "id": 8, "method": "tools/call", "params": {"name": "broken"},
        })

        assert response["result"]["isError"] is True
        assert "boom" in response["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_unknown_method(self, server):
        response = await server.handle({"jsonrpc": "2.0", "id": 9, "method": "resources/list"})

        assert response["id"] == 9
        assert response["error"]["code"] == -32601
        assert "resources/list" in response["error"]["message"]

    @pytest.mark.asyncio
    async def test_notification_gets_no_response(self, server):
        assert await server.handle({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None

    @pytest.mark.asyncio
    async def test_invalid_request(self, server):
        response = await server.handle({"jsonrpc": "2.0", "id": 10})
        assert response["error"]["code"] == -32600
        assert response["id"] == 10

    @pytest.mark.asyncio
    async def test_internal_error(self, server):
        server._methods["ping"] = AsyncMock(side_effect=ValueError("bad state"))

        response = await server.handle({"jsonrpc": "2.0", "id": 11, "method": "ping"})

        assert response["error"]["code"] == -32603
        assert "bad state" in response["error"]["message"]

    @pytest.mark.asyncio
    async def test_batch(self, server):
        responses = await server.handle([
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "nope"},
        ])

        assert [r["id"] for r in responses] == [1, 2]
        assert "error" in responses[1]

    @pytest.mark.asyncio
    async def test_batch_of_notifications(self, server):
        assert await server.handle([{"jsonrpc": "2.0", "method": "notifications/initialized"}]) is None

    @pytest.mark.asyncio
    async def test_empty_batch_is_invalid_request(self, server):
        response = await server.handle([])

        assert isinstance(response, dict)
        assert response["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_search_never_queries_database(self):
        database = MagicMock(spec=DatabaseClient)
        database.is_configured = True
        server = McpServer("test", "0", build_registry(database))

        await server.handle({
            "jsonrpc": "2.0", "id": 1, "method": "tools/call",
            "params": {"name": "search", "arguments": {"query": "x"}},
        })

        database.get_client.assert_not_called()

    def test_describe(self, server):
        info = server.describe()

        assert info["tools"] == ["search"]
        assert "tools/call" in info["methods"]
        assert info["protocolVersion"] == "2024-11-05"
