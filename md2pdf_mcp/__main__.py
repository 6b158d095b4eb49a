"""
Command line entry point.

    md2pdf-mcp [stdio|http|sse] [port]
"""

from typing import List, Optional
import argparse
import asyncio
import sys

import uvicorn

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import get_settings

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2pdf-mcp", description="Markdown to PDF MCP Server"
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default="stdio",
        choices=["stdio", "http", "sse"],
        help="Transport to serve (default: stdio)",
    )
    parser.add_argument("port", nargs="?", type=int, help="Port for http/sse transports")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    try:
        if args.mode == "stdio":
            from md2pdf_mcp.mcp_server.server import MarkdownPdfMCPServer

            asyncio.run(MarkdownPdfMCPServer(settings).run_stdio())
        else:
            from md2pdf_mcp.api.main import create_app

            default_port = settings.http_port if args.mode == "http" else settings.sse_port
            port = args.port or default_port
            logger.info(
                f"Markdown to PDF MCP Server running on {args.mode.upper()} port {port}",
                host=settings.host,
            )
            uvicorn.run(
                create_app(args.mode, settings),
                host=settings.host,
                port=port,
                log_config=None,
            )
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except Exception as e:
        logger.error("Fatal error in main()", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
