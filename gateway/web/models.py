"""Pydantic models for REST requests and responses."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Root endpoint response."""
    service: str
    version: str
    patch: str


class HealthCheck(BaseModel):
    status: str = "healthy"
    uptime_seconds: float
    sessions: int


class ActionCallRequest(BaseModel):
    """Body of POST /actions/call."""
    name: str = Field(..., description="Action to call")
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Action arguments")


class ActionError(BaseModel):
    code: str
    message: str


class ActionCallResponse(BaseModel):
    """Envelope returned by the REST action routes, always with status 200."""
    ok: bool
    action: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[ActionError] = None


class ActionListResponse(BaseModel):
    actions: List[Dict[str, Any]]


class ErrorResponse(BaseModel):
    """Plain error response."""
    error: str
    message: Optional[str] = None
    path: Optional[str] = None
