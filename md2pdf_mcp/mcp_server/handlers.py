"""
MCP Server Message Handlers
===========================

JSON-RPC 2.0 message handling for the MCP protocol over HTTP transports.
One MessageHandler serves one session.
"""

from typing import Any, Callable, Dict, List, Optional, Union
from dataclasses import dataclass, field

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.mcp_server.tools import ConversionTools, InvalidToolArguments, UnknownToolError

logger = get_logger(__name__)

SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]

LOGGING_LEVELS = ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency")

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Optional[Union[str, int]]
Payload = Union[Dict[str, Any], List[Any]]
Notifier = Callable[[Dict[str, Any]], None]


@dataclass
class MCPMessage:
    """MCP protocol message structure."""

    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    id: RequestId = None
    jsonrpc: str = "2.0"

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass
class MCPResponse:
    """MCP protocol response structure."""

    result: Optional[Any] = None
    error: Optional[Dict[str, Any]] = None
    id: RequestId = None
    jsonrpc: str = "2.0"

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error
        else:
            body["result"] = self.result if self.result is not None else {}
        return body


class InvalidParams(Exception):
    """Raised by method handlers for malformed params."""

    pass


def error_response(code: int, message: str, request_id: RequestId = None) -> MCPResponse:
    return MCPResponse(error={"code": code, "message": message}, id=request_id)


def is_initialize_request(payload: Any) -> bool:
    """Whether a payload (single message or batch) carries an initialize request."""
    messages = payload if isinstance(payload, list) else [payload]
    return any(isinstance(m, dict) and m.get("method") == "initialize" for m in messages)


def request_id_of(payload: Any) -> RequestId:
    if isinstance(payload, dict):
        return payload.get("id")
    return None


class MessageHandler:
    """Per-session handler for MCP protocol requests."""

    def __init__(self, tools: ConversionTools, settings: Optional[Settings] = None) -> None:
        self.tools = tools
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="message_handler")
        self.initialized = False
        self.protocol_version: Optional[str] = None
        self.client_info: Dict[str, Any] = {}
        self.log_level = "info"
        # Set by the owning session; client log messages are dropped until then.
        self.notify: Optional[Notifier] = None

    async def handle_payload(self, payload: Any) -> Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]:
        """
        Handle a decoded JSON-RPC payload, single or batch.

        Returns:
            A response body, a list of them for batches, or None when the
            payload held only notifications and responses.
        """
        if isinstance(payload, list):
            if not payload:
                return error_response(INVALID_REQUEST, "Invalid Request: empty batch").to_dict()
            responses = []
            for message in payload:
                response = await self.handle_message(message)
                if response is not None:
                    responses.append(response.to_dict())
            return responses or None

        response = await self.handle_message(payload)
        return response.to_dict() if response is not None else None

    async def handle_message(self, message: Any) -> Optional[MCPResponse]:
        """
        Handle one JSON-RPC message.

        Args:
            message: Decoded JSON object

        Returns:
            MCP response, or None for notifications and client responses
        """
        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            return error_response(INVALID_REQUEST, "Invalid Request", request_id_of(message))

        if "method" not in message:
            # Client responses need no reply.
            if "result" in message or "error" in message:
                return None
            return error_response(INVALID_REQUEST, "Invalid Request", message.get("id"))

        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict) or not isinstance(message["method"], str):
            return error_response(INVALID_REQUEST, "Invalid Request", message.get("id"))

        msg = MCPMessage(method=message["method"], params=params, id=message.get("id"))
        self.logger.debug("Processing message", method=msg.method, id=msg.id)

        if msg.is_notification:
            self._handle_notification(msg)
            return None

        try:
            if msg.method == "initialize":
                return self._handle_initialize(msg)
            elif msg.method == "ping":
                return MCPResponse(result={}, id=msg.id)
            elif msg.method == "tools/list":
                return self._handle_tools_list(msg)
            elif msg.method == "tools/call":
                return await self._handle_tool_call(msg)
            elif msg.method == "logging/setLevel":
                return self._handle_set_level(msg)
            else:
                return error_response(METHOD_NOT_FOUND, f"Method not found: {msg.method}", msg.id)

        except InvalidParams as e:
            return error_response(INVALID_PARAMS, str(e), msg.id)
        except Exception as e:
            self.logger.exception("Message handling error", method=msg.method)
            return error_response(INTERNAL_ERROR, f"Internal error: {e}", msg.id)

    def _handle_notification(self, message: MCPMessage) -> None:
        if message.method == "notifications/initialized":
            self.initialized = True
            self.logger.info("Client initialized", protocol_version=self.protocol_version)
        else:
            self.logger.debug("Notification ignored", method=message.method)

    def _handle_initialize(self, message: MCPMessage) -> MCPResponse:
        requested = message.params.get("protocolVersion")
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            self.protocol_version = requested
        else:
            self.protocol_version = LATEST_PROTOCOL_VERSION
        self.client_info = message.params.get("clientInfo") or {}

        self.logger.info(
            "Initialize request",
            requested_version=requested,
            protocol_version=self.protocol_version,
            client=self.client_info.get("name"),
        )
        return MCPResponse(
            result={
                "protocolVersion": self.protocol_version,
                "capabilities": {"tools": {"listChanged": False}, "logging": {}},
                "serverInfo": {
                    "name": self.settings.app_name,
                    "version": self.settings.app_version,
                },
            },
            id=message.id,
        )

    def _handle_tools_list(self, message: MCPMessage) -> MCPResponse:
        tools = [definition.to_dict() for definition in self.tools.list_tools()]
        return MCPResponse(result={"tools": tools}, id=message.id)

    async def _handle_tool_call(self, message: MCPMessage) -> MCPResponse:
        name = message.params.get("name")
        if not isinstance(name, str):
            raise InvalidParams("Missing tool name")
        arguments = message.params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise InvalidParams("Tool arguments must be an object")

        try:
            output = await self.tools.run_tool(name, arguments)
        except (UnknownToolError, InvalidToolArguments) as e:
            raise InvalidParams(str(e)) from e

        result = output.result
        if result.success:
            for warning in result.warnings:
                self.log_to_client("warning", {"tool": name, "warning": warning})
            self.log_to_client("info", {"tool": name, "output": result.output_path})
        else:
            self.log_to_client("error", {"tool": name, "error": result.error})

        return MCPResponse(result={"content": [{"type": "text", "text": output.text}]}, id=message.id)

    def log_to_client(self, level: str, data: Any) -> None:
        """Send a ``notifications/message`` at or above the client's log level."""
        if self.notify is None:
            return
        if LOGGING_LEVELS.index(level) < LOGGING_LEVELS.index(self.log_level):
            return
        self.notify(
            {
                "jsonrpc": "2.0",
                "method": "notifications/message",
                "params": {"level": level, "logger": self.settings.app_name, "data": data},
            }
        )

    def _handle_set_level(self, message: MCPMessage) -> MCPResponse:
        level = message.params.get("level")
        if level not in LOGGING_LEVELS:
            raise InvalidParams(f"Invalid logging level: {level}")
        self.log_level = level
        self.logger.info("Client log level set", level=level)
        return MCPResponse(result={}, id=message.id)
