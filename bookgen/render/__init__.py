"""Rendering of page bodies and HTML files."""

from .markdown_renderer import (
    RENDERER_VERSION,
    MarkdownRenderer,
    RenderResult,
    blocks_to_markdown,
)
from .templates import TemplateRenderer

__all__ = [
    "RENDERER_VERSION",
    "MarkdownRenderer",
    "RenderResult",
    "blocks_to_markdown",
    "TemplateRenderer",
]
