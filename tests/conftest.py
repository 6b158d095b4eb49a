"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides fast test settings, fake browser runtimes and wired-up components.
"""

import os

os.environ.setdefault("MD2PDF_ENVIRONMENT", "testing")

from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi import FastAPI

from md2pdf_mcp.api.main import create_app
from md2pdf_mcp.config.settings import Settings
from md2pdf_mcp.core.converter import MarkdownToPdfConverter
from md2pdf_mcp.core.rendering.runtime import RuntimeLauncher
from md2pdf_mcp.mcp_server.tools import ConversionTools

from tests.utils.fakes import FakeBrowserStack, FakePage


class TestSettings(Settings):
    """Test-specific settings: short waits, no CDN assets, no host checks."""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    navigation_timeout: float = 5.0
    load_wait_until: str = "load"
    font_timeout: float = 0.2
    script_settle_delay: float = 0.0
    readiness_timeout: float = 0.3
    readiness_poll_interval: float = 0.01
    final_settle_delay: float = 0.0
    quiesce_timeout: float = 0.2
    capture_timeout: float = 0.5
    fetch_timeout: float = 5.0
    mermaid_script_url: str = ""
    apexcharts_script_url: str = ""
    font_stylesheet_url: str = ""
    dns_rebinding_protection: bool = False
    sse_heartbeat_interval: float = 0.05
    max_concurrent_runtimes: int = 2


@pytest.fixture
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def browser_stack(fake_page: FakePage) -> FakeBrowserStack:
    return FakeBrowserStack(page=fake_page)


@pytest.fixture
def launcher(test_settings: TestSettings, browser_stack: FakeBrowserStack) -> RuntimeLauncher:
    """Runtime launcher backed by the fake browser stack."""
    return RuntimeLauncher(test_settings, playwright_factory=browser_stack.factory)


@pytest.fixture
def converter(test_settings: TestSettings, launcher: RuntimeLauncher) -> MarkdownToPdfConverter:
    return MarkdownToPdfConverter(settings=test_settings, launcher=launcher)


@pytest.fixture
def tools(test_settings: TestSettings, launcher: RuntimeLauncher) -> ConversionTools:
    return ConversionTools(test_settings, launcher=launcher)


@pytest.fixture
def app_factory(test_settings: TestSettings, tools: ConversionTools) -> Callable[..., FastAPI]:
    """Build the HTTP application with fake runtimes."""

    def build(mode: str = "all", **overrides: Any) -> FastAPI:
        settings = test_settings.model_copy(update=overrides) if overrides else test_settings
        return create_app(mode, settings=settings, tools=tools)

    return build


@pytest.fixture
def markdown_file(tmp_path: Path) -> Path:
    """A small Markdown document on disk."""
    path = tmp_path / "doc.md"
    path.write_text("---\ntitle: Quarterly Report\n---\n# Results\n\nAll good.\n", encoding="utf-8")
    return path
