"""
MCP Sessions
============

Session registry and transport errors shared by the Streamable HTTP and SSE
transports.

Components:
- registry: session lifecycle and in-flight request tracking
- errors: transport errors rendered as JSON-RPC error bodies
- events: Server-Sent Events formatting
"""

from .errors import (
    InvalidHost,
    MalformedInitialization,
    ParseError,
    TransportError,
    UnknownSession,
)
from .registry import Session, SessionRegistry

__all__ = [
    "InvalidHost",
    "MalformedInitialization",
    "ParseError",
    "Session",
    "SessionRegistry",
    "TransportError",
    "UnknownSession",
]
