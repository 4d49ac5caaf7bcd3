"""Custom middleware for the gateway application."""

import json
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from gateway.exceptions import InternalRpcError
from gateway.observability import get_logger, get_metrics_collector
from gateway.protocol import error_response, fallback_response

logger = get_logger(__name__)

ENVELOPE_HEADERS = {
    "content-type": "application/json; charset=utf-8",
    "cache-control": "no-store",
}


def is_envelope_route(request: Request) -> bool:
    """Routes whose client rejects anything but a 200 JSON body."""
    path = request.url.path.rstrip("/") or "/"
    return path == "/messages" or (path == "/sse" and request.method == "POST")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        metrics = get_metrics_collector()

        structlog.contextvars.bind_contextvars(request_id=uuid4().hex[:8])
        try:
            logger.info("Request", method=request.method, path=request.url.path)

            response = await call_next(request)

            process_time = time.time() - start_time
            metrics.increment_counter(
                "http_responses_total",
                labels={"method": request.method, "status": str(response.status_code)},
            )
            metrics.record_timer("http_request_duration", process_time, {"method": request.method})

            logger.info(
                "Response",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(process_time * 1000, 2),
            )

            response.headers["X-Process-Time"] = str(process_time)
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")


class MessageEnvelopeMiddleware(BaseHTTPMiddleware):
    """Guarantee a non-empty 200 JSON body on the message routes.

    The chat client treats any other status, or an empty body, as a broken
    transport. Error information travels inside the envelope instead.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not is_envelope_route(request):
            return await call_next(request)

        session_id = (
            request.headers.get("x-session-id")
            or request.query_params.get("sessionId")
            or uuid4().hex[:8]
        )

        try:
            response = await call_next(request)
            body = b"".join([chunk async for chunk in response.body_iterator])
            original_status = response.status_code
            extra_headers = {
                key: value for key, value in response.headers.items()
                if key.lower() not in ("content-length", "content-type", "cache-control")
            }
        except Exception as e:
            logger.error(
                "Message handler failed",
                session_id=session_id,
                error=str(e),
                exc_info=True,
            )
            body = json.dumps(error_response(None, InternalRpcError(str(e)))).encode()
            original_status = 500
            extra_headers = {}

        if not body.strip():
            logger.info("Injecting JSON-RPC fallback", session_id=session_id)
            body = json.dumps(fallback_response()).encode()

        logger.info(
            "Message out",
            session_id=session_id,
            status=200,
            original_status=original_status,
            body_bytes=len(body),
        )

        return Response(content=body, status_code=200, headers={**extra_headers, **ENVELOPE_HEADERS})


def setup_middleware(app: FastAPI) -> None:
    """Setup custom middleware for the application.

    Args:
        app: FastAPI application instance
    """
    # Last added runs first
    app.add_middleware(MessageEnvelopeMiddleware)
    app.add_middleware(LoggingMiddleware)
