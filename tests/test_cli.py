"""Tests for CLI functionality."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from click.testing import CliRunner

from gateway import config as config_module
from gateway.cli.main import GatewayProbe, cli
from gateway.config import Settings


class TestGatewayProbe:
    """Test GatewayProbe against an in-process gateway."""

    @pytest.fixture
    def probe(self, app):
        probe = GatewayProbe("http://gateway.test")
        probe._client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://gateway.test",
        )
        return probe

    @pytest.mark.asyncio
    async def test_rpc(self, probe):
        try:
            response = await probe.rpc("ping")
        finally:
            await probe.close()

        assert response == {"jsonrpc": "2.0", "id": 1, "result": {}}

    @pytest.mark.asyncio
    async def test_full_run(self, probe):
        try:
            report = await probe.run(query="bikes")
        finally:
            await probe.close()

        assert report["ok"] is True
        assert list(report["steps"]) == ["sdk", "initialize", "tools/list", "tools/call"]
        call = report["steps"]["tools/call"]["response"]
        assert "bikes" in call["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_failed_step_is_recorded(self):
        def handler(request):
            return httpx.Response(503, json={"error": "down"})

        probe = GatewayProbe("http://gateway.test")
        probe._client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://gateway.test")
        try:
            report = await probe.run()
        finally:
            await probe.close()

        assert report["ok"] is False
        assert report["steps"]["sdk"]["ok"] is False
        assert "503" in report["steps"]["sdk"]["error"]

    def test_format_report_json(self):
        report = {"url": "http://x", "ok": True, "steps": {}}
        assert json.loads(GatewayProbe().format_report(report, "json")) == report


class TestCommands:
    """Test click commands."""

    def test_version(self):
        result = CliRunner().invoke(cli, ["version"])

        assert result.exit_code == 0
        assert "supabase-mcp" in result.output

    def test_probe_json_output(self):
        report = {"url": "http://127.0.0.1:3000", "ok": True, "steps": {"sdk": {"ok": True, "response": {}}}}

        with patch.object(GatewayProbe, "run", AsyncMock(return_value=report)):
            result = CliRunner().invoke(cli, ["probe", "--output", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == report

    def test_probe_failure_exit_code(self):
        report = {"url": "http://127.0.0.1:3000", "ok": False, "steps": {"sdk": {"ok": False, "error": "ConnectError"}}}

        with patch.object(GatewayProbe, "run", AsyncMock(return_value=report)):
            result = CliRunner().invoke(cli, ["probe"])

        assert result.exit_code == 1
        assert "failed" in result.output

    def test_serve_runs_uvicorn(self):
        with patch("uvicorn.run") as mock_run:
            result = CliRunner().invoke(cli, ["serve", "--port", "4321"])

        assert result.exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == "gateway.web.app:app"
        assert mock_run.call_args.kwargs["port"] == 4321

    def test_log_format_follows_settings(self, monkeypatch):
        monkeypatch.setattr(config_module, "settings", Settings(_env_file=None, log_format="json"))

        with patch("gateway.cli.main.configure_logging") as mock_configure:
            result = CliRunner().invoke(cli, ["version"])

        assert result.exit_code == 0
        assert mock_configure.call_args.kwargs["format_type"] == "json"

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setattr(config_module, "settings", None)
        monkeypatch.setenv("PORT", "99999")

        result = CliRunner().invoke(cli, ["version"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
