"""
Readiness Gate
==============

Bounded waits that decide when a loaded page is ready to print: web fonts,
then client-side diagram and chart rendering. Every wait has a timeout and a
timeout only degrades the result with a warning; it never fails the conversion.
"""

from typing import Any, Dict, Optional
import asyncio
import time

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.models.schemas import AssembledDocument, ReadinessReport

logger = get_logger(__name__)

FONTS_READY_SCRIPT = "() => document.fonts.ready.then(() => true)"

# Charts already on the page may still be animating.
QUIESCE_SCRIPT = """
() => {
    if (window.Apex) {
        window.Apex.chart = Object.assign({}, window.Apex.chart, {
            animations: { enabled: false }
        });
    }
    return true;
}
"""

ARTIFACT_STATE_SCRIPT = """
() => {
    const failed = (el) => el.getAttribute('data-render-state') === 'error';
    const settled = (el) => el.querySelector('svg') !== null || failed(el);
    const count = (kind) => {
        const els = Array.from(document.querySelectorAll(`[data-placeholder-kind="${kind}"]`));
        return {
            total: els.length,
            settled: els.filter(settled).length,
            failed: els.filter(failed).length,
        };
    };
    return { diagram: count('diagram'), chart: count('chart') };
}
"""

_EMPTY_COUNTS = {"total": 0, "settled": 0, "failed": 0}


def _all_settled(state: Dict[str, Dict[str, int]]) -> bool:
    return all(counts["settled"] >= counts["total"] for counts in state.values())


class ReadinessGate:
    """Waits for fonts and client-rendered artifacts within fixed bounds."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="readiness_gate")

    async def wait_for_fonts(self, page: Any, report: ReadinessReport) -> None:
        """Wait for ``document.fonts.ready`` up to the font timeout."""
        timeout = self.settings.font_timeout
        try:
            await asyncio.wait_for(page.evaluate(FONTS_READY_SCRIPT), timeout=timeout)
            report.fonts_ready = True
        except asyncio.TimeoutError:
            message = f"Fonts not ready after {timeout}s; rendering with fallback fonts"
            self.logger.warning("Font readiness timed out", timeout=timeout)
            report.warnings.append(message)

    async def quiesce(self, page: Any, report: ReadinessReport) -> None:
        """Disable chart animations so capture does not catch a transition."""
        timeout = self.settings.quiesce_timeout
        try:
            await asyncio.wait_for(page.evaluate(QUIESCE_SCRIPT), timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.warning("Page scripts unresponsive", timeout=timeout)
            report.warnings.append(
                f"Page scripts unresponsive after {timeout}s; chart animations not disabled"
            )

    async def wait_for_artifacts(
        self, page: Any, document: AssembledDocument, report: ReadinessReport
    ) -> None:
        """
        Poll until every diagram and chart placeholder has rendered or failed.

        A document without placeholders is ready immediately and the page is
        not evaluated at all. On timeout the report is marked degraded with a
        warning naming what is still unrendered.
        """
        if not document.placeholders:
            report.diagrams_ready = True
            report.charts_ready = True
            return

        timeout = self.settings.readiness_timeout
        interval = self.settings.readiness_poll_interval
        # Until the first poll returns, everything in the manifest is unrendered.
        last: Dict[str, Dict[str, Dict[str, int]]] = {
            "state": {
                "diagram": dict(_EMPTY_COUNTS, total=document.diagram_count),
                "chart": dict(_EMPTY_COUNTS, total=document.chart_count),
            }
        }

        async def poll() -> None:
            while True:
                last["state"] = await page.evaluate(ARTIFACT_STATE_SCRIPT)
                if _all_settled(last["state"]):
                    return
                await asyncio.sleep(interval)

        started = time.monotonic()
        timed_out = False
        try:
            await asyncio.wait_for(poll(), timeout=timeout)
        except asyncio.TimeoutError:
            timed_out = True

        state = last["state"]
        diagrams = state.get("diagram", _EMPTY_COUNTS)
        charts = state.get("chart", _EMPTY_COUNTS)
        report.diagrams_ready = diagrams["settled"] >= diagrams["total"]
        report.charts_ready = charts["settled"] >= charts["total"]

        if timed_out:
            pending = []
            for label, counts in (("diagrams", diagrams), ("charts", charts)):
                unrendered = counts["total"] - counts["settled"]
                if unrendered > 0:
                    pending.append(f"{unrendered} of {counts['total']} {label}")
            message = f"Readiness timed out after {timeout}s; unrendered: {', '.join(pending)}"
            self.logger.warning(
                "Readiness degraded",
                timeout=timeout,
                diagrams=diagrams,
                charts=charts,
            )
            report.warnings.append(message)

        for label, counts in (("diagrams", diagrams), ("charts", charts)):
            if counts["failed"]:
                self.logger.warning("Client-side rendering failed", kind=label, failed=counts["failed"])
                report.warnings.append(
                    f"{counts['failed']} of {counts['total']} {label} failed to render"
                )

        self.logger.debug(
            "Artifact readiness settled",
            elapsed=round(time.monotonic() - started, 3),
            timed_out=timed_out,
        )
