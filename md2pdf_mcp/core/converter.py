"""
Markdown to PDF Converter
=========================

The conversion boundary: resolve, assemble, settle, capture and write. Every
conversion failure is reported through a ConversionResult instead of raised;
only cancellation propagates.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import asyncio
import time

from pydantic import ValidationError

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.core.content.resolver import ContentResolver
from md2pdf_mcp.core.document.assembler import DocumentAssembler
from md2pdf_mcp.core.errors import ConversionError, OutputWriteError
from md2pdf_mcp.core.rendering.capture import OutputCapturer
from md2pdf_mcp.core.rendering.orchestrator import RenderOrchestrator
from md2pdf_mcp.core.rendering.runtime import RuntimeLauncher
from md2pdf_mcp.models.schemas import (
    AssembledDocument,
    ConversionRequest,
    ConversionResult,
    MarginOverrides,
    PageFormat,
    RenderOptions,
)

logger = get_logger(__name__)

FormatArg = Optional[Union[PageFormat, str]]
MarginArg = Optional[Union[MarginOverrides, Dict[str, Any]]]


class MarkdownToPdfConverter:
    """Converts Markdown documents to PDF files."""

    def __init__(
        self,
        options: Optional[RenderOptions] = None,
        settings: Optional[Settings] = None,
        launcher: Optional[RuntimeLauncher] = None,
    ):
        self.settings = settings or get_settings()
        self.options = options or RenderOptions.defaults(self.settings)
        self.resolver = ContentResolver(self.settings)
        self.assembler = DocumentAssembler(self.settings)
        self.orchestrator = RenderOrchestrator(self.settings, launcher=launcher)
        self.capturer = OutputCapturer(self.settings)
        self.logger: Any = logger.bind(component="converter")

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """
        Run one conversion end to end.

        Args:
            request: Conversion request with exactly one content source

        Returns:
            ConversionResult; ``success`` is False when any step failed
        """
        started = time.monotonic()
        output = Path(request.output_path).expanduser().resolve()
        source = request.locator if request.locator is not None else "<inline content>"
        self.logger.info("Conversion started", source=source, output=str(output))

        try:
            if request.locator is not None:
                text = await self.resolver.resolve(request.locator)
            else:
                text = request.content or ""

            document = self.generate_document(text, title=request.title)
            options = self.options.merged(format=request.format, margin=request.margin)
            pdf, warnings = await self.render_pdf(document, options)
            await self._write_output(output, pdf)

        except ConversionError as e:
            self.logger.error(
                "Conversion failed", source=source, error=str(e), error_type=type(e).__name__
            )
            return ConversionResult(
                success=False,
                output_path=str(output),
                error=str(e),
                processing_time=time.monotonic() - started,
            )
        except Exception as e:
            self.logger.exception("Unexpected conversion error", source=source)
            return ConversionResult(
                success=False,
                output_path=str(output),
                error=f"Unexpected error: {e}",
                processing_time=time.monotonic() - started,
            )

        result = ConversionResult(
            success=True,
            output_path=str(output),
            file_size=len(pdf),
            warnings=warnings,
            processing_time=time.monotonic() - started,
        )
        self.logger.info(
            "Conversion completed",
            output=result.output_path,
            file_size=result.file_size,
            warnings=len(warnings),
            processing_time=round(result.processing_time, 3),
        )
        return result

    async def convert_file(
        self, locator: str, output_path: str, format: FormatArg = None, margin: MarginArg = None
    ) -> ConversionResult:
        """Convert the document at ``locator`` to a PDF at ``output_path``."""
        try:
            request = ConversionRequest(
                locator=locator, output_path=output_path, format=format, margin=margin
            )
        except ValidationError as e:
            return ConversionResult(success=False, error=f"Invalid request: {e}")
        return await self.convert(request)

    async def convert_content(
        self,
        content: str,
        output_path: str,
        title: Optional[str] = None,
        format: FormatArg = None,
        margin: MarginArg = None,
    ) -> ConversionResult:
        """Convert inline Markdown ``content`` to a PDF at ``output_path``."""
        try:
            request = ConversionRequest(
                content=content, output_path=output_path, title=title, format=format, margin=margin
            )
        except ValidationError as e:
            return ConversionResult(success=False, error=f"Invalid request: {e}")
        return await self.convert(request)

    def generate_document(
        self,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
        title: Optional[str] = None,
    ) -> AssembledDocument:
        """Assemble Markdown text into a themed HTML document."""
        return self.assembler.assemble_text(text, title=title, metadata=metadata)

    async def render_pdf(
        self, document: AssembledDocument, options: Optional[RenderOptions] = None
    ) -> Tuple[bytes, List[str]]:
        """Render an assembled document to PDF bytes plus readiness warnings."""
        async with self.orchestrator.settle(document) as settled:
            pdf = await self.capturer.capture(settled.instance, options or self.options)
            return pdf, list(settled.report.warnings)

    async def _write_output(self, output: Path, pdf: bytes) -> None:
        def write() -> None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(pdf)

        try:
            await asyncio.to_thread(write)
        except OSError as e:
            raise OutputWriteError(f"Cannot write {output}: {e}") from e
