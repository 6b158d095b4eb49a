"""
SSE Routes
==========

Legacy MCP over Server-Sent Events. ``GET /sse`` opens a session whose first
event names the endpoint for client messages; messages POSTed there are
acknowledged with 202 and answered on the stream. The session closes when
the stream disconnects.
"""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from md2pdf_mcp.api.routes.mcp import SSE_HEADERS, get_registry, read_json
from md2pdf_mcp.api.sessions.errors import MalformedInitialization
from md2pdf_mcp.api.sessions.events import endpoint_event, event_stream
from md2pdf_mcp.api.sessions.registry import TRANSPORT_SSE
from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.mcp_server.handlers import MessageHandler

logger = get_logger(__name__)

MESSAGES_PATH = "/messages"

router = APIRouter(tags=["SSE"])


@router.get("/sse")
async def open_sse_stream(request: Request) -> StreamingResponse:
    """
    Establish an SSE session.

    Returns:
        Streaming response that starts with the ``endpoint`` event
    """
    registry = get_registry(request)
    handler = MessageHandler(request.app.state.tools, request.app.state.settings)
    session = registry.create(TRANSPORT_SSE, handler)

    return StreamingResponse(
        event_stream(
            session,
            registry,
            request.app.state.settings.sse_heartbeat_interval,
            first_event=endpoint_event(MESSAGES_PATH, session.session_id),
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(registry.close, session.session_id),
    )


@router.post(MESSAGES_PATH)
async def post_sse_message(request: Request, sessionId: Optional[str] = None) -> PlainTextResponse:
    """Accept a client message for an SSE session; the reply goes out on the stream."""
    if not sessionId:
        raise MalformedInitialization("Bad Request: sessionId query parameter is required")
    session = get_registry(request).require(sessionId)
    payload = await read_json(request)
    session.submit(payload)
    return PlainTextResponse("Accepted", status_code=202)
