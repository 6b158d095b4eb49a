"""
MCP Server Tools
================

Tool implementations for the MCP (Model Context Protocol) server.
Provides Markdown file and inline Markdown content to PDF conversion.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.core.converter import MarkdownToPdfConverter
from md2pdf_mcp.core.rendering.runtime import RuntimeLauncher
from md2pdf_mcp.models.schemas import ConversionResult, MarginOverrides, PageFormat

logger = get_logger(__name__)


class UnknownToolError(Exception):
    """Raised when a tool name is not in the catalogue."""

    pass


class InvalidToolArguments(Exception):
    """Raised when tool arguments fail validation."""

    def __init__(self, tool_name: str, error: ValidationError):
        super().__init__(f"Invalid arguments for tool {tool_name}: {error}")
        self.tool_name = tool_name
        self.errors = error.errors()


# Tool Arguments
class ConvertMarkdownArgs(BaseModel):
    """Arguments for convert_markdown_to_pdf."""

    markdownPath: str = Field(
        ..., description="Path, URL or object storage URI of the markdown file to convert"
    )
    outputPath: str = Field(..., description="Path where the PDF should be saved")
    format: Optional[PageFormat] = Field(None, description="PDF page format (default: A4)")
    margin: Optional[MarginOverrides] = Field(
        None, description="PDF margins (e.g., '0.5in', '20mm')"
    )

    model_config = ConfigDict(extra="ignore")


class MarkdownContentArgs(BaseModel):
    """Arguments for markdown_content_to_pdf."""

    markdownContent: str = Field(..., description="Markdown content to convert")
    outputPath: str = Field(..., description="Path where the PDF should be saved")
    title: Optional[str] = Field(None, description="Document title for the PDF")
    format: Optional[PageFormat] = Field(None, description="PDF page format (default: A4)")
    margin: Optional[MarginOverrides] = Field(
        None, description="PDF margins (e.g., '0.5in', '20mm')"
    )

    model_config = ConfigDict(extra="ignore")


@dataclass
class ToolOutput:
    """A tool's text for the client and the conversion result behind it."""

    text: str
    result: ConversionResult


ToolHandler = Callable[[Any], Awaitable[ToolOutput]]


@dataclass
class ToolDefinition:
    """A tool in the catalogue: metadata, argument model and handler."""

    name: str
    title: str
    description: str
    arguments: Type[BaseModel]
    handler: ToolHandler

    def input_schema(self) -> Dict[str, Any]:
        return self.arguments.model_json_schema()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


def _with_warnings(text: str, result: ConversionResult) -> ToolOutput:
    if not result.warnings:
        return ToolOutput(text, result)
    lines = [text, "Warnings:"]
    lines.extend(f"- {warning}" for warning in result.warnings)
    return ToolOutput("\n".join(lines), result)


class ConversionTools:
    """The conversion tool catalogue shared by every transport."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        launcher: Optional[RuntimeLauncher] = None,
        converter: Optional[MarkdownToPdfConverter] = None,
    ):
        self.settings = settings or get_settings()
        self.launcher = launcher or RuntimeLauncher(self.settings)
        self.converter = converter or MarkdownToPdfConverter(
            settings=self.settings, launcher=self.launcher
        )
        self.logger: Any = logger.bind(component="conversion_tools")
        self._tools: Dict[str, ToolDefinition] = {}
        self._register_tools()

    def _register_tools(self) -> None:
        for definition in (
            ToolDefinition(
                name="convert_markdown_to_pdf",
                title="Convert Markdown File to PDF",
                description="Convert a markdown file to PDF",
                arguments=ConvertMarkdownArgs,
                handler=self._convert_markdown_to_pdf,
            ),
            ToolDefinition(
                name="markdown_content_to_pdf",
                title="Convert Markdown Content to PDF",
                description="Convert markdown content directly to PDF",
                arguments=MarkdownContentArgs,
                handler=self._markdown_content_to_pdf,
            ),
        ):
            self._tools[definition.name] = definition

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[ToolDefinition]:
        """Return the tool catalogue."""
        return list(self._tools.values())

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> str:
        """Run a tool and return only its text output."""
        output = await self.run_tool(name, arguments)
        return output.text

    async def run_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolOutput:
        """
        Validate arguments and run a tool.

        Args:
            name: Tool name
            arguments: Raw tool arguments

        Returns:
            The tool's text output and conversion result. Conversion failures
            are reported in the output, never raised.

        Raises:
            UnknownToolError: If the tool does not exist
            InvalidToolArguments: If the arguments fail validation
        """
        definition = self._tools.get(name)
        if definition is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        try:
            args = definition.arguments.model_validate(arguments or {})
        except ValidationError as e:
            raise InvalidToolArguments(name, e) from e

        self.logger.info("Tool called", tool=name)
        return await definition.handler(args)

    async def _convert_markdown_to_pdf(self, args: ConvertMarkdownArgs) -> ToolOutput:
        result = await self.converter.convert_file(
            args.markdownPath, args.outputPath, format=args.format, margin=args.margin
        )
        if not result.success:
            return ToolOutput(f"Error converting markdown to PDF: {result.error}", result)
        return _with_warnings(
            "Successfully converted markdown to PDF!\n"
            f"Input: {args.markdownPath}\nOutput: {result.output_path}",
            result,
        )

    async def _markdown_content_to_pdf(self, args: MarkdownContentArgs) -> ToolOutput:
        result = await self.converter.convert_content(
            args.markdownContent,
            args.outputPath,
            title=args.title,
            format=args.format,
            margin=args.margin,
        )
        if not result.success:
            return ToolOutput(f"Error converting markdown content to PDF: {result.error}", result)
        return _with_warnings(
            f"Successfully converted markdown content to PDF!\nOutput: {result.output_path}",
            result,
        )
