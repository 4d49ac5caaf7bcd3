"""Request dependencies resolving components stored on the application."""

from fastapi import Request

from gateway.actions import ActionRegistry
from gateway.config import Settings
from gateway.db import DatabaseClient
from gateway.protocol import McpServer
from gateway.web.streaming import SessionManager


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mcp_server(request: Request) -> McpServer:
    return request.app.state.mcp_server


def get_registry(request: Request) -> ActionRegistry:
    return request.app.state.registry


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_database(request: Request) -> DatabaseClient:
    return request.app.state.database
