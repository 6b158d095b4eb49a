"""
Unit Tests for Markdown Parser
==============================

Front matter extraction and markdown-it tokenization.
"""

from md2pdf_mcp.core.document.parser import create_markdown, parse_document, split_front_matter


class TestFrontMatter:
    """Test YAML front matter splitting."""

    def test_front_matter_extracted(self):
        metadata, body = split_front_matter("---\ntitle: Report\nauthor: Ops\n---\n# Heading\n")
        assert metadata == {"title": "Report", "author": "Ops"}
        assert body == "# Heading\n"

    def test_no_front_matter(self):
        text = "# Heading\n\nBody"
        assert split_front_matter(text) == ({}, text)

    def test_empty_front_matter(self):
        metadata, body = split_front_matter("---\n\n---\nBody")
        assert metadata == {}
        assert body == "Body"

    def test_invalid_yaml_ignored(self):
        text = "---\ntitle: [unclosed\n---\nBody"
        assert split_front_matter(text) == ({}, text)

    def test_non_mapping_ignored(self):
        text = "---\n- a\n- b\n---\nBody"
        assert split_front_matter(text) == ({}, text)

    def test_horizontal_rule_later_in_document_is_not_front_matter(self):
        text = "Intro\n\n---\n\nMore"
        assert split_front_matter(text) == ({}, text)


class TestParseDocument:
    """Test tokenization."""

    def test_tokens_and_metadata(self):
        parsed = parse_document("---\ntitle: T\n---\n# Hello\n\nWorld")
        assert parsed.metadata == {"title": "T"}
        types = [token.type for token in parsed.tokens]
        assert "heading_open" in types
        assert "paragraph_open" in types

    def test_gfm_tables_enabled(self):
        parsed = parse_document("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert any(token.type == "table_open" for token in parsed.tokens)

    def test_strikethrough_enabled(self):
        html = create_markdown().render("~~gone~~")
        assert "<s>gone</s>" in html

    def test_heading_anchors(self):
        html = create_markdown().render("# Getting Started")
        assert 'id="getting-started"' in html

    def test_task_lists(self):
        html = create_markdown().render("- [x] done\n- [ ] todo\n")
        assert "task-list-item" in html
        assert 'type="checkbox"' in html
