"""
Markdown Parser
===============

Splits optional YAML front matter from Markdown and tokenizes the body with
markdown-it-py. The resulting token stream is what the assembler renders.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import re

import yaml  # type: ignore[import-untyped]
from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from md2pdf_mcp.config.logging import get_logger

logger = get_logger(__name__)

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


@dataclass
class ParsedDocument:
    """Front matter metadata plus the markdown-it token stream."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    tokens: List[Token] = field(default_factory=list)
    env: Dict[str, Any] = field(default_factory=dict)


def create_markdown() -> MarkdownIt:
    """Create the Markdown engine: CommonMark plus GFM tables and strikethrough."""
    md = MarkdownIt("commonmark", {"html": True, "breaks": False})
    md.enable(["table", "strikethrough"])
    md.use(anchors_plugin, min_level=1, max_level=6, permalink=False)
    md.use(tasklists_plugin)
    md.use(footnote_plugin)
    return md


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Separate YAML front matter from the Markdown body.

    Invalid or non-mapping front matter is ignored and the text is returned unchanged.
    """
    match = _FRONT_MATTER.match(text)
    if not match:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.warning("Ignoring invalid front matter", error=str(e))
        return {}, text

    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.warning("Ignoring non-mapping front matter", type=type(data).__name__)
        return {}, text

    return data, text[match.end():]


def parse_document(text: str, md: Optional[MarkdownIt] = None) -> ParsedDocument:
    """Parse Markdown text into metadata and tokens."""
    metadata, body = split_front_matter(text)
    if md is None:
        md = create_markdown()
    env: Dict[str, Any] = {}
    tokens = md.parse(body, env)
    return ParsedDocument(metadata=metadata, tokens=tokens, env=env)
