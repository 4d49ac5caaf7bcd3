"""Database access for the search gateway."""

from .client import DatabaseClient

__all__ = ["DatabaseClient"]
