"""Block list to markdown to HTML rendering."""

import html
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import markdown

from ..book.page import HeadingInfo
from ..notion.models import BLOCK_CODE, NotionBlock

# Bump when the generated HTML changes so cached renders are invalidated
RENDERER_VERSION = "1"

MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "toc"]

_LIST_PREFIXES = {
    "bulleted_list_item": "- ",
    "numbered_list_item": "1. ",
    "to_do": "- [ ] ",
}

_LINE_PREFIXES = {
    "heading_1": "# ",
    "heading_2": "## ",
    "heading_3": "### ",
    "quote": "> ",
    "callout": "> ",
}


@dataclass
class RenderResult:
    """HTML of one page and the headings found in it."""

    html: str
    headings: List[HeadingInfo] = field(default_factory=list)


def block_to_markdown(block: NotionBlock, default_lang: str = "") -> str:
    """
    Convert a single block to markdown.

    Args:
        block: Content block
        default_lang: Language for code blocks that don't name one

    Returns:
        Markdown text, empty for blocks with nothing to show
    """
    text = block.content
    block_type = block.block_type

    if block_type == BLOCK_CODE:
        lang = block.language
        if not lang or lang == "plain text":
            lang = default_lang
        return f"```{lang}\n{text}\n```"
    if block_type in _LIST_PREFIXES:
        return _LIST_PREFIXES[block_type] + text
    if block_type in _LINE_PREFIXES:
        prefix = _LINE_PREFIXES[block_type]
        return "\n".join(prefix + line for line in text.splitlines() or [""])
    if block_type == "divider":
        return "---"
    if block_type == "image":
        return f"![]({text})" if text else ""
    if block_type == "bookmark":
        return f"<{text}>" if text else ""
    if block_type == "equation":
        return f"```\n{text}\n```" if text else ""
    return text


def blocks_to_markdown(blocks: List[NotionBlock], default_lang: str = "") -> str:
    """
    Convert page blocks to a markdown document.

    Consecutive items of the same list type are kept in one list.

    Args:
        blocks: Page blocks, in order
        default_lang: Language for code blocks that don't name one

    Returns:
        Markdown text
    """
    parts: List[str] = []
    prev_type: Optional[str] = None
    for block in blocks:
        md = block_to_markdown(block, default_lang)
        if not md:
            continue
        if parts:
            same_list = block.block_type in _LIST_PREFIXES and block.block_type == prev_type
            parts.append("\n" if same_list else "\n\n")
        parts.append(md)
        prev_type = block.block_type
    return "".join(parts) + "\n"


def _flatten_toc_tokens(tokens: List[Dict[str, Any]], out: List[HeadingInfo]) -> None:
    for token in tokens:
        out.append(HeadingInfo(text=html.unescape(token["name"]), id=token["id"]))
        _flatten_toc_tokens(token.get("children", []), out)


def _extension_name(extension: Any) -> str:
    if isinstance(extension, str):
        return extension
    cls = type(extension)
    return f"{cls.__module__}.{cls.__qualname__}"


class MarkdownRenderer:
    """
    Markdown to HTML renderer backed by the ``markdown`` package.

    A new ``markdown.Markdown`` instance is made for every call, so one
    renderer can be shared between worker threads.
    """

    def __init__(self, extensions: Optional[List[Any]] = None):
        self.extensions = extensions or list(MARKDOWN_EXTENSIONS)
        # part of the output cache key, so a change of extensions re-renders
        self.version = RENDERER_VERSION + ":" + ",".join(_extension_name(ext) for ext in self.extensions)

    def render(self, text: str) -> RenderResult:
        """
        Render markdown to HTML.

        Args:
            text: Markdown source

        Returns:
            RenderResult with HTML and headings (text and anchor id)
        """
        md = markdown.Markdown(extensions=self.extensions)
        body = md.convert(text)
        headings: List[HeadingInfo] = []
        _flatten_toc_tokens(getattr(md, "toc_tokens", []), headings)
        return RenderResult(html=body, headings=headings)

    def render_blocks(self, blocks: List[NotionBlock], default_lang: str = "") -> RenderResult:
        return self.render(blocks_to_markdown(blocks, default_lang))
