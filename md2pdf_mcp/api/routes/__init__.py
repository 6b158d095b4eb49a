"""
API Routes
==========

Route modules for the MCP transports and health checks.
"""
