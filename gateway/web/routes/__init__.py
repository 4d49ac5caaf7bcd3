"""HTTP routes for the search gateway."""

from fastapi import FastAPI

from .actions import router as actions_router
from .debug import debug_router
from .debug import router as system_router
from .messages import router as messages_router
from .sse import router as sse_router


def setup_routes(app: FastAPI) -> None:
    """Setup all routes.

    Args:
        app: FastAPI application instance
    """
    app.include_router(system_router, tags=["System"])
    app.include_router(sse_router, tags=["Transport"])
    app.include_router(messages_router, tags=["Transport"])
    app.include_router(actions_router, prefix="/actions", tags=["Actions"])
    app.include_router(debug_router, prefix="/debug", tags=["Debug"])


__all__ = [
    "setup_routes",
    "actions_router",
    "debug_router",
    "messages_router",
    "sse_router",
    "system_router",
]
