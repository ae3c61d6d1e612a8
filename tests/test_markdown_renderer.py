"""Tests for block to HTML rendering."""

from bookgen.notion.models import NotionBlock
from bookgen.render.markdown_renderer import (
    MarkdownRenderer,
    block_to_markdown,
    blocks_to_markdown,
)


def block(block_type, content, language=""):
    return NotionBlock(block_id="b", block_type=block_type, content=content, language=language)


class TestBlockToMarkdown:
    """Tests for block_to_markdown."""

    def test_code_uses_own_language(self):
        assert block_to_markdown(block("code", "x := 1", "go"), "c") == "```go\nx := 1\n```"

    def test_code_falls_back_to_default_language(self):
        assert block_to_markdown(block("code", "x", "plain text"), "go") == "```go\nx\n```"
        assert block_to_markdown(block("code", "x"), "go") == "```go\nx\n```"

    def test_headings(self):
        assert block_to_markdown(block("heading_1", "Title")) == "# Title"
        assert block_to_markdown(block("heading_3", "Small")) == "### Small"

    def test_quote_multiline(self):
        assert block_to_markdown(block("quote", "a\nb")) == "> a\n> b"

    def test_misc(self):
        assert block_to_markdown(block("divider", "")) == "---"
        assert block_to_markdown(block("image", "https://x/a.png")) == "![](https://x/a.png)"
        assert block_to_markdown(block("image", "")) == ""
        assert block_to_markdown(block("to_do", "task")) == "- [ ] task"


def test_blocks_to_markdown_groups_lists():
    md = blocks_to_markdown(
        [
            block("paragraph", "Intro"),
            block("bulleted_list_item", "one"),
            block("bulleted_list_item", "two"),
            block("paragraph", "End"),
        ]
    )
    assert md == "Intro\n\n- one\n- two\n\nEnd\n"


def test_blocks_to_markdown_skips_empty_blocks():
    md = blocks_to_markdown([block("paragraph", "a"), block("unsupported", ""), block("paragraph", "b")])
    assert md == "a\n\nb\n"


class TestMarkdownRenderer:
    """Tests for MarkdownRenderer."""

    def test_render_headings(self):
        result = MarkdownRenderer().render("## Install\n\ntext\n\n### Run It\n")

        assert [(h.text, h.id) for h in result.headings] == [
            ("Install", "install"),
            ("Run It", "run-it"),
        ]
        assert '<h2 id="install">Install</h2>' in result.html

    def test_render_code_block(self):
        result = MarkdownRenderer().render_blocks([block("code", "a < b", "go")], "go")

        assert '<code class="language-go">' in result.html
        assert "a &lt; b" in result.html

    def test_render_table(self):
        result = MarkdownRenderer().render("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in result.html

    def test_no_headings(self):
        assert MarkdownRenderer().render("just text").headings == []

    def test_version_follows_extensions(self):
        from markdown.extensions.toc import TocExtension

        default = MarkdownRenderer()
        assert default.version == MarkdownRenderer().version
        assert default.version != MarkdownRenderer(["toc"]).version
        assert "TocExtension" in MarkdownRenderer([TocExtension()]).version
