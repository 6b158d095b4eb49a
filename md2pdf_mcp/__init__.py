"""
Markdown to PDF MCP Server
==========================

A Model Context Protocol (MCP) server for converting Markdown documents into PDF
files through HTML rendering and browser automation.

This package provides:
- MCP protocol tools over stdio, Streamable HTTP and SSE transports
- Session multiplexing for long-lived HTTP clients
- Markdown assembly with Mermaid diagram and ApexCharts chart placeholders
- Browser automation with Playwright, gated on client-side rendering readiness
"""

__version__ = "1.0.0"
__author__ = "Markdown to PDF MCP Team"
