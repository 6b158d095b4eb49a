"""
Unit Tests for the stdio MCP Server
===================================
"""

import pytest

from md2pdf_mcp.mcp_server.server import MarkdownPdfMCPServer


@pytest.fixture
def server(test_settings, tools):
    return MarkdownPdfMCPServer(test_settings, tools=tools)


@pytest.mark.asyncio
async def test_list_tools(server):
    listed = await server._list_tools_handler()
    assert [tool.name for tool in listed] == ["convert_markdown_to_pdf", "markdown_content_to_pdf"]
    assert "markdownContent" in listed[1].inputSchema["properties"]


@pytest.mark.asyncio
async def test_call_tool(server, tmp_path):
    output = tmp_path / "stdio.pdf"
    content = await server._call_tool_handler(
        "markdown_content_to_pdf", {"markdownContent": "# Hello", "outputPath": str(output)}
    )
    assert content[0].type == "text"
    assert content[0].text.startswith("Successfully converted markdown content to PDF!")
    assert output.exists()


def test_initialization_options(server):
    options = server.initialization_options()
    assert options.server_name == "markdown-pdf-converter"
    assert options.server_version == "1.0.0"
    assert options.capabilities.tools is not None
