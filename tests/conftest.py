"""Shared fixtures for gateway tests."""

import pytest
from fastapi.testclient import TestClient

from gateway.config import Settings
from gateway.observability import get_metrics_collector
from gateway.web.app import create_app


@pytest.fixture
def settings():
    """Settings with no database credentials and fast keepalives."""
    return Settings(
        port=3000,
        supabase_url=None,
        supabase_service_key=None,
        log_level="INFO",
        log_format="text",
        sse_keepalive_secs=0.05,
    )


@pytest.fixture
def app(settings):
    get_metrics_collector().reset_metrics()
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)
