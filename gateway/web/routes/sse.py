"""Server-Sent Events transport endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from gateway.config import Settings
from gateway.protocol import McpServer
from gateway.web.dependencies import get_app_settings, get_mcp_server, get_sessions
from gateway.web.routes.messages import answer_rpc, rpc_response
from gateway.web.streaming import SessionManager

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/sse")
async def open_stream(
    request: Request,
    sessions: SessionManager = Depends(get_sessions),
    settings: Settings = Depends(get_app_settings),
):
    """Open an event stream and register a session for it."""
    session = sessions.open()
    return StreamingResponse(
        sessions.stream(session, settings.sse_endpoint, request.is_disconnected),
        media_type="text/event-stream",
        headers={**SSE_HEADERS, "X-Session-Id": session.session_id},
    )


@router.post("/sse")
async def post_to_stream(request: Request, server: McpServer = Depends(get_mcp_server)):
    """Clients that post to the stream URL get their answer inline."""
    return rpc_response(await answer_rpc(request, server))
