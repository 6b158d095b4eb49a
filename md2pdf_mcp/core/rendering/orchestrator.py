"""
Render Orchestrator
===================

Drives one assembled document through load and readiness on a freshly
acquired runtime. The settled runtime is handed to the caller inside a scope;
the runtime is released when the scope exits on every path.
"""

from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional
from contextlib import asynccontextmanager
import asyncio
import time

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.core.errors import LoadTimeout
from md2pdf_mcp.core.rendering.readiness import ReadinessGate
from md2pdf_mcp.core.rendering.runtime import RuntimeInstance, RuntimeLauncher
from md2pdf_mcp.models.schemas import AssembledDocument, ReadinessReport

logger = get_logger(__name__)


@dataclass
class SettledRuntime:
    """A runtime whose page has loaded and passed the readiness gate."""

    instance: RuntimeInstance
    report: ReadinessReport


class RenderOrchestrator:
    """Loads a document and waits for it to settle."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        launcher: Optional[RuntimeLauncher] = None,
        gate: Optional[ReadinessGate] = None,
    ):
        self.settings = settings or get_settings()
        self.launcher = launcher or RuntimeLauncher(self.settings)
        self.gate = gate or ReadinessGate(self.settings)
        self.logger: Any = logger.bind(component="render_orchestrator")

    @asynccontextmanager
    async def settle(self, document: AssembledDocument) -> AsyncGenerator[SettledRuntime, None]:
        """
        Load ``document`` into a fresh runtime and wait for readiness.

        Raises:
            RuntimeLaunchError: If no runtime can be started
            LoadTimeout: If the document does not load in time
        """
        started = time.monotonic()
        async with self.launcher.acquire() as instance:
            await self._load(instance, document)

            report = ReadinessReport()
            await self.gate.wait_for_fonts(instance.page, report)

            await self.gate.quiesce(instance.page, report)
            await asyncio.sleep(self.settings.script_settle_delay)

            await self.gate.wait_for_artifacts(instance.page, document, report)
            await asyncio.sleep(self.settings.final_settle_delay)

            report.elapsed = time.monotonic() - started
            self.logger.info(
                "Document settled",
                elapsed=round(report.elapsed, 3),
                degraded=report.degraded,
                diagrams=document.diagram_count,
                charts=document.chart_count,
            )
            yield SettledRuntime(instance=instance, report=report)

    async def _load(self, instance: RuntimeInstance, document: AssembledDocument) -> None:
        timeout = self.settings.navigation_timeout
        try:
            await instance.page.set_content(
                document.html,
                wait_until=self.settings.load_wait_until,
                timeout=timeout * 1000,
            )
        except PlaywrightTimeoutError as e:
            self.logger.error("Document load timed out", timeout=timeout)
            raise LoadTimeout(f"Document did not load within {timeout}s") from e
