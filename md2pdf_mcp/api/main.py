"""
FastAPI Application
==================

HTTP application serving the MCP server over Streamable HTTP, legacy SSE, or
both, plus a health endpoint.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from md2pdf_mcp.api.routes import health, mcp, sse
from md2pdf_mcp.api.sessions.errors import TransportError
from md2pdf_mcp.api.sessions.registry import SessionRegistry
from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.mcp_server.tools import ConversionTools

logger = get_logger(__name__)

APP_MODES = ("http", "sse", "all")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting Markdown to PDF MCP Server", mode=app.state.mode)
    try:
        yield
    finally:
        closed = app.state.registry.close_all()
        logger.info("Shutting down Markdown to PDF MCP Server", closed_sessions=closed)


def create_app(
    mode: str = "all",
    settings: Optional[Settings] = None,
    tools: Optional[ConversionTools] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        mode: "http" for Streamable HTTP, "sse" for legacy SSE, "all" for both
        settings: Application settings
        tools: Tool catalogue shared by every session

    Returns:
        Configured FastAPI application
    """
    if mode not in APP_MODES:
        raise ValueError(f"Unsupported mode: {mode}; expected one of {APP_MODES}")

    settings = settings or get_settings()
    app = FastAPI(
        title="Markdown to PDF MCP Server",
        description="Convert Markdown documents to PDF over the Model Context Protocol",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.mode = mode
    app.state.settings = settings
    app.state.registry = SessionRegistry()
    app.state.tools = tools or ConversionTools(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Mcp-Session-Id", "Mcp-Protocol-Version", "Last-Event-ID"],
        expose_headers=["Mcp-Session-Id"],
    )

    @app.exception_handler(TransportError)
    async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
        """Render transport rejections as JSON-RPC error bodies."""
        logger.warning(
            "Transport error",
            error_type=type(exc).__name__,
            detail=exc.message,
            path=request.url.path,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_jsonrpc())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "jsonrpc": "2.0",
                "error": {"code": -32603, "message": "Internal server error"},
                "id": None,
            },
        )

    app.include_router(health.router)
    if mode in ("http", "all"):
        app.include_router(mcp.router)
    if mode in ("sse", "all"):
        app.include_router(sse.router)

    return app
