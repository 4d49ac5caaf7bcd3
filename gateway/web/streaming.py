"""Server-Sent Events sessions for the MCP transport."""

import asyncio
import json
from datetime import datetime
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

from gateway.exceptions import SessionNotFoundError
from gateway.observability import get_logger, get_metrics_collector

logger = get_logger(__name__)

KEEPALIVE = ": keepalive\n\n"


class SseEvent(BaseModel):
    """A single server-sent event."""
    event: str
    data: Union[str, Dict[str, Any], list]
    id: Optional[str] = None

    def to_sse(self) -> str:
        """Convert to Server-Sent Events wire format."""
        lines = [f"event: {self.event}"]

        if self.id:
            lines.append(f"id: {self.id}")

        payload = self.data if isinstance(self.data, str) else json.dumps(self.data, ensure_ascii=False)
        for line in payload.splitlines() or [""]:
            lines.append(f"data: {line}")

        return "\n".join(lines) + "\n\n"


class SseSession:
    """One open event stream and the messages waiting to be sent on it."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.created_at = datetime.now()
        self.last_activity = datetime.now()
        self.queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()
        self.sent_count = 0

    def touch(self):
        self.last_activity = datetime.now()

    def is_expired(self, timeout_seconds: int = 3600) -> bool:
        """Check if session is expired."""
        return (datetime.now() - self.last_activity).total_seconds() > timeout_seconds

    def describe(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
            "pending": self.queue.qsize(),
            "sent": self.sent_count,
        }


class SessionManager:
    """Process-wide map from session id to open event stream."""

    def __init__(self, keepalive_secs: float = 15.0, session_timeout_secs: int = 3600):
        self.keepalive_secs = keepalive_secs
        self.session_timeout_secs = session_timeout_secs
        self.sessions: Dict[str, SseSession] = {}
        self.cleanup_task: Optional[asyncio.Task] = None
        self.metrics = get_metrics_collector()

    async def start(self):
        """Start periodic cleanup of expired sessions."""
        self.cleanup_task = asyncio.create_task(self._cleanup_sessions())

    async def stop(self):
        """Stop cleanup and end every open stream."""
        if self.cleanup_task:
            self.cleanup_task.cancel()
            try:
                await self.cleanup_task
            except asyncio.CancelledError:
                pass
            self.cleanup_task = None

        for session in list(self.sessions.values()):
            session.queue.put_nowait(None)

    def open(self) -> SseSession:
        """Register a new session with a fresh id."""
        session_id = uuid4().hex
        while session_id in self.sessions:
            session_id = uuid4().hex

        session = SseSession(session_id)
        self.sessions[session_id] = session
        self._update_gauge()
        logger.info("SSE session opened", session_id=session_id)
        return session

    def get(self, session_id: str) -> SseSession:
        try:
            return self.sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def close(self, session_id: str):
        """Remove a session; unknown ids are ignored."""
        if self.sessions.pop(session_id, None) is not None:
            self._update_gauge()
            logger.info("SSE session closed", session_id=session_id)

    def publish(self, session_id: str, message: Any):
        """Queue a JSON-RPC message for delivery on a session's stream.

        Raises:
            SessionNotFoundError: if the session is not open
        """
        session = self.get(session_id)
        session.queue.put_nowait(message)
        session.touch()

    async def stream(
        self,
        session: SseSession,
        endpoint: str,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> AsyncIterator[str]:
        """Yield SSE frames for a session until the client goes away.

        The first frame tells the client where to post messages.
        """
        try:
            yield SseEvent(event="endpoint", data=f"{endpoint}?sessionId={session.session_id}").to_sse()

            while True:
                if is_disconnected is not None and await is_disconnected():
                    break

                try:
                    message = await asyncio.wait_for(session.queue.get(), timeout=self.keepalive_secs)
                except asyncio.TimeoutError:
                    session.touch()
                    yield KEEPALIVE
                    continue

                if message is None:
                    break

                session.sent_count += 1
                session.touch()
                yield SseEvent(event="message", data=message).to_sse()
        finally:
            self.close(session.session_id)

    def describe(self) -> Dict[str, Any]:
        return {
            "count": len(self.sessions),
            "sessions": [session.describe() for session in self.sessions.values()],
        }

    def end_expired(self) -> int:
        """End sessions idle past the timeout. Live streams stay fresh through keepalives."""
        expired = [
            session for session in self.sessions.values()
            if session.is_expired(self.session_timeout_secs)
        ]

        for session in expired:
            logger.info("Ending expired session", session_id=session.session_id)
            session.queue.put_nowait(None)
            self.close(session.session_id)

        return len(expired)

    def _update_gauge(self):
        self.metrics.set_gauge("sse_sessions_open", float(len(self.sessions)))

    async def _cleanup_sessions(self):
        """Periodically end expired sessions."""
        while True:
            try:
                await asyncio.sleep(300)
                self.end_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error in session cleanup", error=str(e))
