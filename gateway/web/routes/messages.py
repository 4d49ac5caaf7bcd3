"""JSON-RPC message endpoint."""

import json
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from gateway.exceptions import InvalidRequestError, ParseError, SessionNotFoundError
from gateway.observability import get_logger
from gateway.protocol import McpServer, error_response
from gateway.web.dependencies import get_mcp_server, get_sessions
from gateway.web.streaming import SessionManager

logger = get_logger(__name__)

router = APIRouter()

RpcReply = Union[Dict[str, Any], List[Dict[str, Any]], None]


async def answer_rpc(request: Request, server: McpServer) -> RpcReply:
    """Decode the request body and run it through the protocol server."""
    raw = await request.body()
    if not raw.strip():
        return error_response(None, InvalidRequestError("Empty request body"))

    try:
        payload = json.loads(raw)
    except ValueError as e:
        logger.warning("Unparseable message body", error=str(e), body_bytes=len(raw))
        return error_response(None, ParseError("Parse error", data=str(e)))

    return await server.handle(payload)


def rpc_response(reply: RpcReply) -> Response:
    # An empty 202 is turned into the fallback envelope by the middleware
    if reply is None:
        return Response(status_code=202)
    return JSONResponse(content=reply)


@router.post("/messages")
async def post_message(
    request: Request,
    sessionId: Optional[str] = None,
    server: McpServer = Depends(get_mcp_server),
    sessions: SessionManager = Depends(get_sessions),
):
    """Answer a JSON-RPC message inline, mirroring it onto the SSE stream if one is open."""
    reply = await answer_rpc(request, server)

    if sessionId and reply is not None:
        try:
            sessions.publish(sessionId, reply)
        except SessionNotFoundError:
            logger.info("No open stream for message", session_id=sessionId)

    return rpc_response(reply)
