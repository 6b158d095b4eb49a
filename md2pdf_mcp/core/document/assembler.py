"""
Document Assembler
==================

Convert parsed Markdown into a self-contained HTML document for browser rendering.
Fenced blocks tagged with a reserved language become placeholder elements that
client-side scripts (Mermaid, ApexCharts) render after load; the rendered body
is wrapped in a themed Jinja2 container template.
"""

from typing import Any, Dict, List, Optional, Sequence
from pathlib import Path

import jinja2
from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml, unescapeAll
from markdown_it.token import Token
from markupsafe import Markup

from md2pdf_mcp.config.logging import get_logger
from md2pdf_mcp.config.settings import Settings, get_settings
from md2pdf_mcp.core.document.parser import ParsedDocument, create_markdown, parse_document
from md2pdf_mcp.models.schemas import AssembledDocument, Placeholder, PlaceholderKind

logger = get_logger(__name__)

RESERVED_FENCES: Dict[str, PlaceholderKind] = {
    "mermaid": PlaceholderKind.DIAGRAM,
    "diagram": PlaceholderKind.DIAGRAM,
    "chart": PlaceholderKind.CHART,
    "apexcharts": PlaceholderKind.CHART,
}

DEFAULT_TITLE = "Document"
CHART_WIDTH = 600
CHART_HEIGHT = 350

_PLACEHOLDERS_ENV_KEY = "md2pdf_placeholders"


def _render_fence(
    renderer: Any, tokens: Sequence[Token], idx: int, options: Any, env: Dict[str, Any]
) -> str:
    token = tokens[idx]
    info = unescapeAll(token.info).strip() if token.info else ""
    language = info.split(maxsplit=1)[0] if info else ""
    kind = RESERVED_FENCES.get(language.lower())

    if kind is None:
        return (
            f'<pre><code class="language-{escapeHtml(language)}">'
            f"{escapeHtml(token.content)}</code></pre>\n"
        )

    placeholders: List[Placeholder] = env.setdefault(_PLACEHOLDERS_ENV_KEY, [])
    placeholder = Placeholder(
        kind=kind, index=sum(1 for p in placeholders if p.kind is kind)
    )
    placeholders.append(placeholder)

    attributes = (
        f'data-placeholder-kind="{kind.value}" data-placeholder-id="{placeholder.placeholder_id}"'
    )
    if kind is PlaceholderKind.DIAGRAM:
        return f'<div class="mermaid" {attributes}>{escapeHtml(token.content)}</div>\n'
    return (
        f'<div class="apex-chart" {attributes} '
        f'data-config="{escapeHtml(token.content.strip())}"></div>\n'
    )


def _render_link_open(
    renderer: Any, tokens: Sequence[Token], idx: int, options: Any, env: Dict[str, Any]
) -> str:
    token = tokens[idx]
    href = str(token.attrGet("href") or "")
    if href.startswith(("http://", "https://")):
        token.attrSet("rel", "noopener noreferrer")
    return renderer.renderToken(tokens, idx, options, env)


class DocumentAssembler:
    """Assembles parsed Markdown into a themed HTML document."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="document_assembler")
        self.md = self._setup_markdown()
        self._setup_jinja2_environment()

    def _setup_markdown(self) -> MarkdownIt:
        md = create_markdown()
        md.add_render_rule("fence", _render_fence)
        md.add_render_rule("link_open", _render_link_open)
        return md

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
            keep_trailing_newline=True,
        )

    def parse(self, text: str) -> ParsedDocument:
        """Parse Markdown with this assembler's engine."""
        return parse_document(text, self.md)

    def assemble(self, parsed: ParsedDocument, title: Optional[str] = None) -> AssembledDocument:
        """
        Render a parsed document to a complete HTML document.

        Args:
            parsed: Front matter metadata and token stream
            title: Title override; falls back to front matter then the default title

        Returns:
            AssembledDocument with the HTML and its placeholder manifest
        """
        env = dict(parsed.env)
        env[_PLACEHOLDERS_ENV_KEY] = []
        body = self.md.renderer.render(parsed.tokens, self.md.options, env)
        placeholders: List[Placeholder] = env[_PLACEHOLDERS_ENV_KEY]

        resolved_title = title or str(parsed.metadata.get("title") or DEFAULT_TITLE)
        template = self.env.get_template("document.html")
        html = template.render(
            title=resolved_title,
            body=Markup(body),
            mermaid_script_url=self.settings.mermaid_script_url,
            apexcharts_script_url=self.settings.apexcharts_script_url,
            font_stylesheet_url=self.settings.font_stylesheet_url,
            chart_width=CHART_WIDTH,
            chart_height=CHART_HEIGHT,
        )

        document = AssembledDocument(html=html, title=resolved_title, placeholders=placeholders)
        self.logger.info(
            "Document assembled",
            html_length=len(html),
            diagrams=document.diagram_count,
            charts=document.chart_count,
        )
        return document

    def assemble_text(
        self, text: str, title: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None
    ) -> AssembledDocument:
        """Parse and assemble Markdown text; ``metadata`` entries override front matter."""
        parsed = self.parse(text)
        if metadata:
            parsed.metadata.update(metadata)
        return self.assemble(parsed, title=title)
