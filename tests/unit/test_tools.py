"""
Unit Tests for MCP Tools
========================

Tool catalogue, argument validation and result text.
"""

import pytest

from md2pdf_mcp.mcp_server.tools import ConversionTools, InvalidToolArguments, UnknownToolError
from md2pdf_mcp.core.rendering.runtime import RuntimeLauncher

from tests.utils.fakes import FakeBrowserStack, FakePage, artifact_state


class TestCatalogue:
    """Test tool metadata."""

    def test_tool_names(self, tools):
        assert tools.names == ["convert_markdown_to_pdf", "markdown_content_to_pdf"]

    def test_input_schemas(self, tools):
        schemas = {definition.name: definition.input_schema() for definition in tools.list_tools()}

        file_schema = schemas["convert_markdown_to_pdf"]
        assert set(file_schema["required"]) == {"markdownPath", "outputPath"}
        assert {"format", "margin"} <= set(file_schema["properties"])

        content_schema = schemas["markdown_content_to_pdf"]
        assert set(content_schema["required"]) == {"markdownContent", "outputPath"}
        assert "title" in content_schema["properties"]

    def test_to_dict(self, tools):
        entry = tools.list_tools()[0].to_dict()
        assert entry["name"] == "convert_markdown_to_pdf"
        assert entry["title"] == "Convert Markdown File to PDF"
        assert entry["inputSchema"]["type"] == "object"


class TestCallTool:
    """Test tool execution."""

    @pytest.mark.asyncio
    async def test_convert_markdown_to_pdf(self, tools, markdown_file, tmp_path):
        output = tmp_path / "out.pdf"
        text = await tools.call_tool(
            "convert_markdown_to_pdf",
            {"markdownPath": str(markdown_file), "outputPath": str(output), "format": "A5"},
        )
        assert text == (
            "Successfully converted markdown to PDF!\n"
            f"Input: {markdown_file}\nOutput: {output.resolve()}"
        )
        assert output.exists()

    @pytest.mark.asyncio
    async def test_markdown_content_to_pdf(self, tools, tmp_path):
        output = tmp_path / "content.pdf"
        text = await tools.call_tool(
            "markdown_content_to_pdf",
            {"markdownContent": "# Hi", "outputPath": str(output), "title": "Hi"},
        )
        assert text == f"Successfully converted markdown content to PDF!\nOutput: {output.resolve()}"

    @pytest.mark.asyncio
    async def test_conversion_error_reported_in_text(self, tools, tmp_path):
        text = await tools.call_tool(
            "convert_markdown_to_pdf",
            {"markdownPath": str(tmp_path / "missing.md"), "outputPath": str(tmp_path / "o.pdf")},
        )
        assert text.startswith("Error converting markdown to PDF: File not found")

    @pytest.mark.asyncio
    async def test_content_error_prefix(self, test_settings, tmp_path):
        stack = FakeBrowserStack(fail_on=["launch"])
        tools = ConversionTools(
            test_settings, launcher=RuntimeLauncher(test_settings, playwright_factory=stack.factory)
        )
        text = await tools.call_tool(
            "markdown_content_to_pdf", {"markdownContent": "x", "outputPath": str(tmp_path / "o.pdf")}
        )
        assert text.startswith("Error converting markdown content to PDF: Browser runtime launch failed")

    @pytest.mark.asyncio
    async def test_warnings_appended(self, test_settings, tmp_path):
        stack = FakeBrowserStack(page=FakePage(states=[artifact_state(diagrams=(1, 0, 0))]))
        tools = ConversionTools(
            test_settings, launcher=RuntimeLauncher(test_settings, playwright_factory=stack.factory)
        )
        text = await tools.call_tool(
            "markdown_content_to_pdf",
            {"markdownContent": "```mermaid\nA\n```", "outputPath": str(tmp_path / "o.pdf")},
        )
        lines = text.splitlines()
        assert lines[0] == "Successfully converted markdown content to PDF!"
        assert "Warnings:" in lines
        assert lines[-1].startswith("- Readiness timed out")

    @pytest.mark.asyncio
    async def test_unknown_tool(self, tools):
        with pytest.raises(UnknownToolError):
            await tools.call_tool("delete_everything", {})

    @pytest.mark.asyncio
    async def test_missing_arguments(self, tools):
        with pytest.raises(InvalidToolArguments) as exc_info:
            await tools.call_tool("convert_markdown_to_pdf", {"markdownPath": "doc.md"})
        assert exc_info.value.errors[0]["loc"] == ("outputPath",)

    @pytest.mark.asyncio
    async def test_invalid_format(self, tools):
        with pytest.raises(InvalidToolArguments):
            await tools.call_tool(
                "markdown_content_to_pdf",
                {"markdownContent": "x", "outputPath": "o.pdf", "format": "B5"},
            )
