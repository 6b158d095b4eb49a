"""
Browser Runtime
===============

Launches an exclusively owned headless Chromium runtime per conversion.
Runtimes are never pooled: each ``acquire()`` starts a fresh Playwright driver,
browser, context and page, and tears all of them down when the scope exits,
including on errors and cancellation. A semaphore bounds how many runtimes
are alive at once.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Callable, Optional
from contextlib import asynccontextmanager
import asyncio
import time

from playwright.async_api import async_playwright

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.core.errors import RuntimeLaunchError

logger = get_logger(__name__)


@dataclass
class RuntimeInstance:
    """Handle to one Playwright driver, browser, context and page."""

    playwright: Any = None
    browser: Any = None
    context: Any = None
    page: Any = None
    started_at: float = field(default_factory=time.monotonic)


class RuntimeLauncher:
    """Starts and releases browser runtimes."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        playwright_factory: Optional[Callable[[], Any]] = None,
    ):
        self.settings = settings or get_settings()
        self._playwright_factory = playwright_factory or async_playwright
        self._semaphore = asyncio.Semaphore(self.settings.max_concurrent_runtimes)
        self.acquired = 0
        self.released = 0
        self.logger: Any = logger.bind(component="runtime_launcher")

    @property
    def active(self) -> int:
        return self.acquired - self.released

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[RuntimeInstance, None]:
        """
        Acquire a fresh runtime for the duration of the scope.

        Raises:
            RuntimeLaunchError: If the browser cannot be started
        """
        async with self._semaphore:
            instance = await self._launch()
            self.acquired += 1
            self.logger.debug("Runtime acquired", active=self.active)
            try:
                yield instance
            finally:
                try:
                    await self._release(instance)
                finally:
                    self.released += 1
                    self.logger.debug(
                        "Runtime released",
                        active=self.active,
                        lifetime=round(time.monotonic() - instance.started_at, 3),
                    )

    async def _launch(self) -> RuntimeInstance:
        instance = RuntimeInstance()
        try:
            instance.playwright = await self._playwright_factory().start()
            instance.browser = await instance.playwright.chromium.launch(
                headless=self.settings.playwright_headless,
                args=list(self.settings.browser_args),
            )
            instance.context = await instance.browser.new_context(
                viewport={
                    "width": self.settings.viewport_width,
                    "height": self.settings.viewport_height,
                },
                device_scale_factor=self.settings.device_scale_factor,
            )
            instance.page = await instance.context.new_page()
            instance.page.set_default_timeout(self.settings.navigation_timeout * 1000)
        except Exception as e:
            self.logger.error("Failed to launch browser runtime", error=str(e))
            await self._release(instance)
            raise RuntimeLaunchError(f"Browser runtime launch failed: {e}") from e
        return instance

    async def _release(self, instance: RuntimeInstance) -> None:
        """Close whatever parts of the runtime were started, innermost first."""
        steps = (
            ("context", instance.context, "close"),
            ("browser", instance.browser, "close"),
            ("playwright", instance.playwright, "stop"),
        )
        for name, resource, method in steps:
            if resource is None:
                continue
            try:
                await getattr(resource, method)()
            except Exception as e:
                self.logger.warning("Runtime cleanup step failed", step=name, error=str(e))
