"""
End-to-End Conversion Tests
===========================

Real Chromium through Playwright. Skipped when no browser can be launched.
"""

import pytest
import pytest_asyncio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from md2pdf_mcp.core.converter import MarkdownToPdfConverter
from md2pdf_mcp.core.rendering.runtime import RuntimeLauncher

pytestmark = pytest.mark.e2e


@pytest_asyncio.fixture
async def chromium_available():
    try:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True)
            await browser.close()
    except PlaywrightError as e:
        pytest.skip(f"Chromium unavailable: {e}")


@pytest.fixture
def real_converter(test_settings, chromium_available):
    return MarkdownToPdfConverter(settings=test_settings, launcher=RuntimeLauncher(test_settings))


@pytest.mark.asyncio
async def test_simple_document(real_converter, tmp_path):
    output = tmp_path / "hello.pdf"
    result = await real_converter.convert_content("# Title\n\nHello", str(output))

    assert result.success, result.error
    assert result.file_size > 0
    assert output.read_bytes().startswith(b"%PDF")


@pytest.mark.asyncio
async def test_bad_diagram_still_produces_pdf(real_converter, tmp_path):
    output = tmp_path / "diagram.pdf"
    result = await real_converter.convert_content("```diagram\nbad\n```", str(output))

    assert result.success, result.error
    assert output.read_bytes().startswith(b"%PDF")


@pytest.mark.asyncio
async def test_markdown_features(real_converter, tmp_path):
    source = tmp_path / "features.md"
    source.write_text(
        "---\ntitle: Features\n---\n"
        "# Heading\n\n| a | b |\n|---|---|\n| 1 | 2 |\n\n"
        "- [x] done\n- [ ] todo\n\n```python\nprint('hi')\n```\n",
        encoding="utf-8",
    )
    output = tmp_path / "features.pdf"

    result = await real_converter.convert_file(str(source), str(output))

    assert result.success, result.error
    assert output.stat().st_size == result.file_size
