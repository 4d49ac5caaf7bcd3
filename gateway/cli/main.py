"""Command line interface for the search gateway."""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

import click
import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gateway import __version__
from gateway.config import get_settings, validate_startup_config
from gateway.observability import configure_logging, get_logger

console = Console()
logger = get_logger(__name__)


class GatewayProbe:
    """Talks to a running gateway the way a chat client would."""

    def __init__(self, base_url: str = "http://127.0.0.1:3000", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        self._next_id = 0

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for gateway communication."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout)
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_json(self, path: str) -> Dict[str, Any]:
        client = await self.get_client()
        response = await client.get(path)
        response.raise_for_status()
        return response.json()

    async def rpc(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send one JSON-RPC request to /messages and return the envelope."""
        self._next_id += 1
        payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": self._next_id, "method": method}
        if params is not None:
            payload["params"] = params

        client = await self.get_client()
        response = await client.post("/messages", json=payload)
        response.raise_for_status()
        return response.json()

    async def run(self, query: Optional[str] = None) -> Dict[str, Any]:
        """Walk through the handshake and collect each step's outcome.

        A failing step is recorded and the remaining steps still run.
        """
        steps = [
            ("sdk", lambda: self.get_json("/debug/sdk")),
            ("initialize", lambda: self.rpc("initialize", {
                "protocolVersion": "2024-11-05",
                "capabilities": {},
                "clientInfo": {"name": "gateway-probe", "version": __version__},
            })),
            ("tools/list", lambda: self.rpc("tools/list")),
        ]
        if query:
            steps.append(("tools/call", lambda: self.rpc(
                "tools/call", {"name": "search", "arguments": {"query": query}}
            )))

        report: Dict[str, Any] = {"url": self.base_url, "steps": {}}
        for name, step in steps:
            try:
                report["steps"][name] = {"ok": True, "response": await step()}
            except (httpx.HTTPError, ValueError) as e:
                logger.error("Probe step failed", step=name, error=str(e))
                report["steps"][name] = {"ok": False, "error": f"{type(e).__name__}: {e}"}

        report["ok"] = all(step["ok"] for step in report["steps"].values())
        return report

    def format_report(self, report: Dict[str, Any], output_format: str = "rich"):
        if output_format == "json":
            return json.dumps(report, indent=2)

        table = Table(title=f"Gateway probe: {report['url']}")
        table.add_column("Step", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Details", style="white")

        for name, step in report["steps"].items():
            if not step["ok"]:
                table.add_row(name, "❌ failed", Text(step["error"]))
                continue

            response = step["response"]
            if "error" in response:
                detail = f"error {response['error'].get('code')}: {response['error'].get('message')}"
                table.add_row(name, "⚠️  rpc error", Text(detail))
            else:
                table.add_row(name, "✅ ok", Text(json.dumps(response.get("result", response))[:120]))

        return table


@click.group()
@click.option("--log-level", default=None, help="Logging level")
@click.pass_context
def cli(ctx, log_level):
    """Search gateway - MCP search tool over JSON-RPC and SSE."""
    try:
        settings = get_settings()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")

    configure_logging(level=log_level or settings.log_level, format_type=settings.log_format)
    ctx.ensure_object(dict)


@cli.command()
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", type=int, default=None, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the gateway with uvicorn."""
    import uvicorn

    settings = get_settings()
    try:
        validate_startup_config()
    except RuntimeError as e:
        raise click.ClickException(str(e))

    host = host or settings.host
    port = port or settings.port
    console.print(f"🚀 {settings.service_name} listening on {host}:{port} (patch {settings.patch})")

    uvicorn.run(
        "gateway.web.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.option("--url", default=None, help="Gateway base URL")
@click.option("--query", "-q", default=None, help="Also call the search tool with this query")
@click.option("--output", "-o", default="rich", type=click.Choice(["rich", "json"]), help="Output format")
def probe(url, query, output):
    """Check a running gateway's protocol handshake."""
    settings = get_settings()
    probe_client = GatewayProbe(url or f"http://127.0.0.1:{settings.port}")

    async def run_probe():
        try:
            return await probe_client.run(query)
        finally:
            await probe_client.close()

    report = asyncio.run(run_probe())
    if output == "json":
        click.echo(probe_client.format_report(report, output))
    else:
        console.print(probe_client.format_report(report, output))

    if not report["ok"]:
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    settings = get_settings()
    console.print(
        Panel(f"{settings.service_name} {__version__} (patch {settings.patch})", border_style="blue")
    )


if __name__ == "__main__":
    cli()
