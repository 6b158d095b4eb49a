"""
Output Capture
==============

Prints a settled page to PDF.
"""

from typing import Any, Dict, Optional
import asyncio

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.core.errors import CaptureError
from md2pdf_mcp.core.rendering.runtime import RuntimeInstance
from md2pdf_mcp.models.schemas import RenderOptions

logger = get_logger(__name__)


def build_pdf_options(options: RenderOptions) -> Dict[str, Any]:
    """Translate render options into ``page.pdf`` keyword arguments."""
    return {
        "format": options.format.value,
        "margin": {
            "top": options.margin.top,
            "right": options.margin.right,
            "bottom": options.margin.bottom,
            "left": options.margin.left,
        },
        "display_header_footer": options.display_header_footer,
        "print_background": options.print_background,
        "tagged": True,
        "outline": True,
    }


class OutputCapturer:
    """Captures PDF bytes from a runtime page."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="output_capturer")

    async def capture(self, instance: RuntimeInstance, options: Optional[RenderOptions] = None) -> bytes:
        """
        Print the page to PDF.

        Raises:
            CaptureError: If printing fails or produces no output in time
        """
        pdf_options = build_pdf_options(options or RenderOptions.defaults(self.settings))
        timeout = self.settings.capture_timeout
        try:
            pdf = await asyncio.wait_for(instance.page.pdf(**pdf_options), timeout=timeout)
        except asyncio.TimeoutError as e:
            self.logger.error("PDF capture timed out", timeout=timeout)
            raise CaptureError(f"PDF capture timed out after {timeout}s") from e
        except Exception as e:
            self.logger.error("PDF capture failed", error=str(e))
            raise CaptureError(f"PDF capture failed: {e}") from e

        if not pdf:
            raise CaptureError("PDF capture produced no output")

        self.logger.info("PDF captured", size=len(pdf), format=pdf_options["format"])
        return pdf
