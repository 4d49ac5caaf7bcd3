"""HTTP surface of the search gateway."""

from .app import create_app
from .middleware import setup_middleware
from .routes import setup_routes

__all__ = [
    "create_app",
    "setup_middleware",
    "setup_routes",
]
