"""
Session Registry
================

Tracks MCP sessions for the HTTP transports. The registry is a single dict
mutated only by synchronous methods, so every create, lookup and close is
atomic with respect to the event loop. Closing a session removes it in the
same call, cancels its in-flight requests and ends its outbound stream.
Session ids are never reused.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set
import asyncio
import uuid

from md2pdf_mcp.api.sessions.errors import UnknownSession
from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.mcp_server.handlers import MessageHandler, request_id_of

logger = get_logger(__name__)

TRANSPORT_STREAMABLE_HTTP = "streamable-http"
TRANSPORT_SSE = "sse"

SESSION_CLOSED_CODE = -32000


class Session:
    """One client session: its protocol handler, outbound queue and in-flight requests."""

    def __init__(self, session_id: str, transport: str, handler: MessageHandler):
        self.session_id = session_id
        self.transport = transport
        self.handler = handler
        self.created_at = datetime.now(timezone.utc)
        self.outbound: "asyncio.Queue[Optional[Any]]" = asyncio.Queue()
        self.closed = False
        self.streams = 0
        self._tasks: Set["asyncio.Task[Any]"] = set()
        self.logger: Any = logger.bind(session_id=session_id, transport=transport)
        handler.notify = self.notify

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def dispatch(self, payload: Any) -> Any:
        """
        Run a payload through the session's handler as a tracked task.

        If the session is closed while the request is running the request is
        cancelled and a JSON-RPC error is returned in its place.
        """
        task = asyncio.ensure_future(self.handler.handle_payload(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        try:
            return await task
        except asyncio.CancelledError:
            if not self.closed:
                raise
            self.logger.info("Request cancelled by session close")
            return {
                "jsonrpc": "2.0",
                "error": {"code": SESSION_CLOSED_CODE, "message": "Session closed"},
                "id": request_id_of(payload),
            }

    def submit(self, payload: Any) -> None:
        """Dispatch in the background and deliver the response on the event stream."""

        async def deliver() -> None:
            response = await self.dispatch(payload)
            if response is not None:
                self.send(response)

        task = asyncio.ensure_future(deliver())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def send(self, message: Any) -> None:
        """Queue a message for the session's event stream."""
        if not self.closed:
            self.outbound.put_nowait(message)

    def notify(self, message: Any) -> None:
        """Queue a server notification; dropped while no event stream is attached."""
        if self.streams:
            self.send(message)

    async def receive(self, timeout: Optional[float] = None) -> Optional[Any]:
        """
        Wait for the next outbound message; None means the session closed.

        Raises:
            asyncio.TimeoutError: If nothing arrives within ``timeout``
        """
        return await asyncio.wait_for(self.outbound.get(), timeout)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for task in list(self._tasks):
            task.cancel()
        self.outbound.put_nowait(None)


class SessionRegistry:
    """Registry of active sessions keyed by session id."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._retired: Set[str] = set()
        self.logger: Any = logger.bind(component="session_registry")

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _new_id(self) -> str:
        while True:
            session_id = uuid.uuid4().hex
            if session_id not in self._sessions and session_id not in self._retired:
                return session_id

    def create(self, transport: str, handler: MessageHandler) -> Session:
        """Register a new session with a fresh id."""
        session = Session(self._new_id(), transport, handler)
        self._sessions[session.session_id] = session
        self.logger.info(
            "Session created",
            session_id=session.session_id,
            transport=transport,
            active_sessions=len(self._sessions),
        )
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        """
        Look up an active session.

        Raises:
            UnknownSession: If the id was never issued or is closed
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession(session_id)
        return session

    def close(self, session_id: str) -> bool:
        """Remove and close a session. Returns False if it was not registered."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        self._retired.add(session_id)
        session.close()
        self.logger.info(
            "Session closed",
            session_id=session_id,
            transport=session.transport,
            cancelled_requests=session.in_flight,
            active_sessions=len(self._sessions),
        )
        return True

    def close_all(self) -> int:
        session_ids: List[str] = list(self._sessions)
        for session_id in session_ids:
            self.close(session_id)
        return len(session_ids)
