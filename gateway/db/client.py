"""Supabase REST client.

The gateway holds a configured client so the search action has somewhere to
go once queries are wired up. Nothing in the gateway issues requests through
it yet.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from gateway.observability import get_logger

logger = get_logger(__name__)


class DatabaseClient:
    """Thin holder for a Supabase project connection."""

    def __init__(self, url: Optional[str], service_key: Optional[str], timeout: float = 10.0):
        self.url = url.rstrip("/") if url else None
        self._service_key = service_key
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self._service_key)

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client for the PostgREST endpoint."""
        if not self.is_configured:
            raise RuntimeError("Database client is not configured (SUPABASE_URL / SUPABASE_SERVICE_KEY)")

        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.url}/rest/v1",
                headers={
                    "apikey": self._service_key,
                    "Authorization": f"Bearer {self._service_key}",
                },
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    def describe(self) -> Dict[str, Any]:
        """Connection summary safe to expose on debug endpoints."""
        return {
            "configured": self.is_configured,
            "host": urlparse(self.url).netloc if self.url else None,
            "connected": self._client is not None,
        }

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Database client closed")
