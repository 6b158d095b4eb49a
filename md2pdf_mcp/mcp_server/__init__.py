"""
MCP Server Implementation
========================

Model Context Protocol server implementation providing tools for Markdown to PDF conversion.

Tools provided:
- convert_markdown_to_pdf: Convert a Markdown file (path, URL or object storage URI) to PDF
- markdown_content_to_pdf: Convert inline Markdown content to PDF
"""
