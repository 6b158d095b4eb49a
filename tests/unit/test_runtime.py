"""
Unit Tests for Runtime Launcher
===============================

Per-conversion runtime acquisition, release on every path and the
concurrency bound.
"""

import asyncio

import pytest

from md2pdf_mcp.core.errors import RuntimeLaunchError
from md2pdf_mcp.core.rendering.runtime import RuntimeLauncher

from tests.utils.fakes import FakeBrowserStack


class TestAcquire:
    """Test scoped acquisition."""

    @pytest.mark.asyncio
    async def test_acquire_configures_runtime(self, launcher, browser_stack, test_settings):
        async with launcher.acquire() as instance:
            assert instance.page is browser_stack.page
            assert launcher.acquired == 1
            assert launcher.active == 1

        assert browser_stack.launch_kwargs == {
            "headless": test_settings.playwright_headless,
            "args": test_settings.browser_args,
        }
        assert browser_stack.context_kwargs == {
            "viewport": {"width": 1200, "height": 1600},
            "device_scale_factor": 2.0,
        }
        assert browser_stack.page.default_timeout == test_settings.navigation_timeout * 1000
        assert browser_stack.closed == ["context", "browser", "playwright"]
        assert launcher.released == 1
        assert launcher.active == 0

    @pytest.mark.asyncio
    async def test_fresh_runtime_per_acquire(self, launcher, browser_stack):
        for _ in range(3):
            async with launcher.acquire():
                pass
        assert browser_stack.starts == 3
        assert launcher.acquired == launcher.released == 3

    @pytest.mark.asyncio
    async def test_released_when_body_raises(self, launcher, browser_stack):
        with pytest.raises(ValueError):
            async with launcher.acquire():
                raise ValueError("boom")
        assert launcher.acquired == launcher.released == 1
        assert "browser" in browser_stack.closed

    @pytest.mark.asyncio
    async def test_released_when_cancelled(self, launcher, browser_stack):
        entered = asyncio.Event()

        async def hold() -> None:
            async with launcher.acquire():
                entered.set()
                await asyncio.Event().wait()

        task = asyncio.create_task(hold())
        await entered.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert launcher.acquired == launcher.released == 1
        assert browser_stack.closed == ["context", "browser", "playwright"]


class TestLaunchFailures:
    """Test partial launch cleanup."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "step, expected_closed",
        [
            ("start", []),
            ("launch", ["playwright"]),
            ("new_context", ["browser", "playwright"]),
            ("new_page", ["context", "browser", "playwright"]),
        ],
    )
    async def test_partial_launch_released(self, test_settings, step, expected_closed):
        stack = FakeBrowserStack(fail_on=[step])
        launcher = RuntimeLauncher(test_settings, playwright_factory=stack.factory)

        with pytest.raises(RuntimeLaunchError, match=f"{step} failed"):
            async with launcher.acquire():
                pytest.fail("body must not run")

        assert stack.closed == expected_closed
        assert launcher.acquired == launcher.released == 0


class TestConcurrencyBound:
    """Test the semaphore bound on live runtimes."""

    @pytest.mark.asyncio
    async def test_at_most_max_concurrent(self, test_settings):
        stack = FakeBrowserStack()
        launcher = RuntimeLauncher(test_settings, playwright_factory=stack.factory)
        peak = 0

        async def work() -> None:
            nonlocal peak
            async with launcher.acquire():
                peak = max(peak, launcher.active)
                await asyncio.sleep(0.01)

        await asyncio.gather(*(work() for _ in range(6)))

        assert peak <= test_settings.max_concurrent_runtimes
        assert launcher.acquired == launcher.released == 6
