"""Health and diagnostics endpoints."""

import os
import platform
import time
from importlib import metadata
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends, Request

from gateway.config import Settings
from gateway.db import DatabaseClient
from gateway.observability import get_metrics_collector
from gateway.protocol import McpServer
from gateway.web.dependencies import get_app_settings, get_database, get_mcp_server, get_sessions
from gateway.web.models import HealthCheck, ServiceInfo
from gateway.web.streaming import SessionManager

router = APIRouter()
debug_router = APIRouter()

REPORTED_PACKAGES = ("fastapi", "starlette", "pydantic", "pydantic-settings", "uvicorn", "structlog", "httpx")


def _uptime(request: Request) -> float:
    return round(time.time() - request.app.state.started_at, 3)


def _package_versions() -> Dict[str, str]:
    versions = {}
    for package in REPORTED_PACKAGES:
        try:
            versions[package] = metadata.version(package)
        except metadata.PackageNotFoundError:
            versions[package] = "unavailable"
    return versions


@router.get("/", response_model=ServiceInfo)
async def root(settings: Settings = Depends(get_app_settings)):
    """Service identity."""
    return ServiceInfo(service=settings.service_name, version=settings.service_version, patch=settings.patch)


@router.get("/health", response_model=HealthCheck)
async def health_check(request: Request, sessions: SessionManager = Depends(get_sessions)):
    """Liveness check; if we can answer, we're alive."""
    return HealthCheck(uptime_seconds=_uptime(request), sessions=len(sessions.sessions))


@debug_router.get("/env")
async def debug_env(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    database: DatabaseClient = Depends(get_database),
) -> Dict[str, Any]:
    """Runtime environment summary. Secrets are never included."""
    process = psutil.Process(os.getpid())
    return {
        "python": platform.python_version(),
        "platform": platform.system(),
        "pid": process.pid,
        "memory_rss_bytes": process.memory_info().rss,
        "uptimeSec": _uptime(request),
        "patch": settings.patch,
        "log_level": settings.log_level,
        "database": database.describe(),
    }


@debug_router.get("/sdk")
async def debug_sdk(
    settings: Settings = Depends(get_app_settings),
    server: McpServer = Depends(get_mcp_server),
) -> Dict[str, Any]:
    """Protocol server and library versions."""
    return {
        "python": platform.python_version(),
        "packages": _package_versions(),
        "server": server.describe(),
        "sseResolved": True,
        "ssePath": "/sse",
        "messagePath": settings.sse_endpoint,
    }


@debug_router.get("/sessions")
async def debug_sessions(sessions: SessionManager = Depends(get_sessions)) -> Dict[str, Any]:
    return sessions.describe()


@debug_router.get("/metrics")
async def debug_metrics() -> Dict[str, Any]:
    return get_metrics_collector().get_all_metrics()
