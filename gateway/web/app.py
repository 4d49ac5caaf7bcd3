"""FastAPI application factory for the search gateway."""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.actions import build_registry
from gateway.config import Settings, get_settings
from gateway.db import DatabaseClient
from gateway.observability import configure_logging, get_logger, get_metrics_collector
from gateway.protocol import McpServer
from gateway.web.middleware import setup_middleware
from gateway.web.models import ErrorResponse
from gateway.web.routes import setup_routes
from gateway.web.streaming import SessionManager

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    configure_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        log_file=settings.log_file,
        context={"service": settings.service_name, "patch": settings.patch},
    )
    metrics = get_metrics_collector()

    logger.info("Starting gateway", port=settings.port, database=app.state.database.describe())
    await app.state.sessions.start()
    metrics.set_gauge("gateway_up", 1.0)

    yield

    logger.info("Shutting down gateway")
    metrics.set_gauge("gateway_up", 0.0)
    await app.state.sessions.stop()
    await app.state.database.aclose()
    logger.info("Gateway shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the process-wide instance

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Search Gateway",
        description="MCP search tool over JSON-RPC with SSE transport",
        version=settings.service_version,
        lifespan=lifespan,
    )

    database = DatabaseClient(settings.supabase_url, settings.supabase_service_key)
    registry = build_registry(database)

    app.state.settings = settings
    app.state.started_at = time.time()
    app.state.database = database
    app.state.registry = registry
    app.state.mcp_server = McpServer(
        name=settings.service_name,
        version=settings.service_version,
        registry=registry,
        protocol_version=settings.protocol_version,
    )
    app.state.sessions = SessionManager(
        keepalive_secs=settings.sse_keepalive_secs,
        session_timeout_secs=settings.session_timeout_secs,
    )

    setup_middleware(app)

    # Placeholder policy; added last so preflight requests are answered first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_parsed,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Session-Id"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.__class__.__name__,
                message=str(exc.detail),
                path=request.url.path,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                message="An unexpected error occurred",
                path=request.url.path,
            ).model_dump(exclude_none=True),
        )

    setup_routes(app)

    logger.info("Application created", actions=registry.names())
    return app


# Create the app instance
app = create_app()
