"""
MCP Server Implementation
========================

Model Context Protocol server over stdio, built on the official MCP SDK.
Exposes the same tool catalogue as the HTTP transports.
"""

from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.mcp_server.tools import ConversionTools

logger = get_logger(__name__)


class MarkdownPdfMCPServer:
    """MCP server for Markdown to PDF conversion."""

    def __init__(
        self, settings: Optional[Settings] = None, tools: Optional[ConversionTools] = None
    ) -> None:
        self.settings = settings or get_settings()
        self.tools = tools or ConversionTools(self.settings)
        self.logger: Any = logger.bind(component="mcp_server")
        self.server: Server = Server(self.settings.app_name)
        self._setup_tools()

    def _setup_tools(self) -> None:
        """Setup MCP tools."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            """List available MCP tools."""
            return [
                types.Tool(
                    name=definition.name,
                    description=definition.description,
                    inputSchema=definition.input_schema(),
                )
                for definition in self.tools.list_tools()
            ]

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
            """Handle tool execution."""
            text = await self.tools.call_tool(name, arguments)
            return [types.TextContent(type="text", text=text)]

        self._list_tools_handler = handle_list_tools
        self._call_tool_handler = handle_call_tool

    def initialization_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=self.settings.app_name,
            server_version=self.settings.app_version,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )

    async def run_stdio(self) -> None:
        """Serve MCP over stdin/stdout until the client disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            self.logger.info("Markdown to PDF MCP Server running on stdio")
            await self.server.run(read_stream, write_stream, self.initialization_options())
