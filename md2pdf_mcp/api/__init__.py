"""
HTTP API
========

FastAPI application exposing the MCP server over Streamable HTTP and SSE.
"""
