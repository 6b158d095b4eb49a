"""
SSE Events
==========

Server-Sent Events formatting for MCP message streams.
"""

from typing import TYPE_CHECKING, Any, AsyncGenerator, List, Optional, Union
import asyncio
import json

if TYPE_CHECKING:
    from md2pdf_mcp.api.sessions.registry import Session, SessionRegistry

ENDPOINT_EVENT = "endpoint"
MESSAGE_EVENT = "message"

KEEPALIVE_COMMENT = ": keep-alive\n\n"


def format_sse_event(
    event_type: str, data: Union[str, Any], event_id: Optional[str] = None
) -> str:
    """
    Format data for Server-Sent Events protocol.

    Args:
        event_type: Event type identifier
        data: Event data; strings are sent as-is, anything else as compact JSON
        event_id: Optional event ID for client-side event tracking

    Returns:
        Formatted SSE message string
    """
    lines: List[str] = []

    if event_id:
        lines.append(f"id: {event_id}")

    lines.append(f"event: {event_type}")

    payload = data if isinstance(data, str) else json.dumps(data, default=str, separators=(",", ":"))
    for line in payload.splitlines() or [""]:
        lines.append(f"data: {line}")

    # SSE protocol requires double newline at end
    lines.append("")
    lines.append("")

    return "\n".join(lines)


def endpoint_event(messages_path: str, session_id: str) -> str:
    """The first event of a legacy SSE stream: where to POST client messages."""
    return format_sse_event(ENDPOINT_EVENT, f"{messages_path}?sessionId={session_id}")


def message_event(message: Any) -> str:
    return format_sse_event(MESSAGE_EVENT, message)


async def event_stream(
    session: "Session",
    registry: "SessionRegistry",
    heartbeat_interval: float,
    first_event: Optional[str] = None,
    close_on_exit: bool = True,
) -> AsyncGenerator[str, None]:
    """
    Stream a session's outbound messages as SSE ``message`` events.

    A keep-alive comment is sent whenever ``heartbeat_interval`` passes
    without a message. The stream ends when the session closes; with
    ``close_on_exit`` the session is closed when the stream ends for any
    reason, including client disconnect.
    """
    session.streams += 1
    try:
        if first_event is not None:
            yield first_event
        while True:
            try:
                message = await session.receive(timeout=heartbeat_interval)
            except asyncio.TimeoutError:
                yield KEEPALIVE_COMMENT
                continue
            if message is None:
                return
            yield message_event(message)
    finally:
        session.streams -= 1
        if close_on_exit:
            registry.close(session.session_id)
