"""
Transport Errors
================

Errors raised by the HTTP transports before a message reaches a session.
Each renders as a JSON-RPC error body with a null id.
"""

from typing import Any, Dict


class TransportError(Exception):
    """Base class for transport-level request rejections."""

    status_code = 400
    code = -32000

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_jsonrpc(self) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "error": {"code": self.code, "message": self.message},
            "id": None,
        }


class UnknownSession(TransportError):
    """The session id is not registered (never created or already closed)."""

    def __init__(self, session_id: str):
        super().__init__(f"Bad Request: Unknown or closed session ID: {session_id}")
        self.session_id = session_id


class MalformedInitialization(TransportError):
    """A request without a session id that is not an initialize request."""

    def __init__(self, message: str = "Bad Request: No valid session ID provided"):
        super().__init__(message)


class InvalidHost(TransportError):
    """The Host header is not allowed (DNS rebinding protection)."""

    status_code = 403

    def __init__(self, host: str):
        super().__init__(f"Invalid Host header: {host}")
        self.host = host


class ParseError(TransportError):
    """The request body is not valid JSON."""

    code = -32700

    def __init__(self, detail: str):
        super().__init__(f"Parse error: {detail}")
