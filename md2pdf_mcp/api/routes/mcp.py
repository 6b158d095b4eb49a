"""
Streamable HTTP Routes
======================

MCP over Streamable HTTP: JSON-RPC requests are POSTed to ``/mcp`` and
answered in the response body. The session is created by an initialize
request without a session id and identified by the ``Mcp-Session-Id`` header
on every later request.
"""

from typing import Any, Optional
import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from md2pdf_mcp.api.sessions.errors import InvalidHost, MalformedInitialization, ParseError
from md2pdf_mcp.api.sessions.events import event_stream
from md2pdf_mcp.api.sessions.registry import TRANSPORT_STREAMABLE_HTTP, SessionRegistry
from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.mcp_server.handlers import MessageHandler, is_initialize_request

logger = get_logger(__name__)

MCP_SESSION_HEADER = "Mcp-Session-Id"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

router = APIRouter(tags=["MCP"])


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def validate_host(request: Request) -> None:
    """Reject requests whose Host header is not allowed (DNS rebinding protection)."""
    settings = request.app.state.settings
    if not settings.dns_rebinding_protection:
        return

    host = request.headers.get("host", "")
    if host.startswith("["):
        hostname = host[1:].split("]", 1)[0]
    else:
        hostname = host.rsplit(":", 1)[0]

    if host not in settings.allowed_hosts and hostname not in settings.allowed_hosts:
        logger.warning("Rejected request with disallowed Host header", host=host)
        raise InvalidHost(host)


async def read_json(request: Request) -> Any:
    """Decode a JSON request body."""
    body = await request.body()
    try:
        return json.loads(body)
    except ValueError as e:
        raise ParseError(str(e)) from e


@router.post("/mcp", dependencies=[Depends(validate_host)])
async def handle_mcp_post(request: Request) -> Response:
    """
    Handle a JSON-RPC message or batch.

    Returns:
        The JSON-RPC response, or 202 when the payload held only notifications
    """
    registry = get_registry(request)
    payload = await read_json(request)
    session_id: Optional[str] = request.headers.get(MCP_SESSION_HEADER)

    if session_id:
        session = registry.require(session_id)
    elif is_initialize_request(payload):
        handler = MessageHandler(request.app.state.tools, request.app.state.settings)
        session = registry.create(TRANSPORT_STREAMABLE_HTTP, handler)
    else:
        raise MalformedInitialization()

    response = await session.dispatch(payload)

    # A session only survives a successful initialize.
    if not session_id and session.handler.protocol_version is None:
        registry.close(session.session_id)
        if response is None:
            raise MalformedInitialization()
        return JSONResponse(status_code=400, content=response)

    headers = {MCP_SESSION_HEADER: session.session_id}
    if response is None:
        return Response(status_code=202, headers=headers)
    return JSONResponse(content=response, headers=headers)


@router.get("/mcp", dependencies=[Depends(validate_host)])
async def handle_mcp_get(request: Request) -> StreamingResponse:
    """Open the server-to-client event stream for a session."""
    session_id = request.headers.get(MCP_SESSION_HEADER)
    if not session_id:
        raise MalformedInitialization("Bad Request: Mcp-Session-Id header is required")
    registry = get_registry(request)
    session = registry.require(session_id)

    return StreamingResponse(
        event_stream(
            session,
            registry,
            request.app.state.settings.sse_heartbeat_interval,
            close_on_exit=False,
        ),
        media_type="text/event-stream",
        headers={**SSE_HEADERS, MCP_SESSION_HEADER: session.session_id},
    )


@router.delete("/mcp", dependencies=[Depends(validate_host)])
async def handle_mcp_delete(request: Request) -> Response:
    """Terminate a session; its in-flight requests are cancelled."""
    session_id = request.headers.get(MCP_SESSION_HEADER)
    if not session_id:
        raise MalformedInitialization("Bad Request: Mcp-Session-Id header is required")
    registry = get_registry(request)
    registry.require(session_id)
    registry.close(session_id)
    return Response(status_code=200)
