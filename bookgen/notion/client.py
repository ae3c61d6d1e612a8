"""Notion API access for book pages: page titles and top-level blocks."""

import logging
import time
from typing import Any, Callable, Dict, Iterator, List

from notion_client import Client

from .models import BLOCK_CHILD_PAGE, BLOCK_CODE, NotionBlock, SourcePage

PAGE_SIZE = 100

# Rich-text annotations that make a text run "formatted"
FORMAT_ANNOTATIONS = ("bold", "italic", "strikethrough", "underline", "code")


def _rich_text_to_str(rich_text: List[Dict[str, Any]]) -> str:
    return "".join(run.get("plain_text", "") for run in rich_text)


def _image_url(data: Dict[str, Any]) -> str:
    # {"type": "external", "external": {"url": ...}} or the same with "file"
    return data.get(data.get("type", ""), {}).get("url", "")


# Text of blocks that carry no rich_text
_NON_TEXT_CONTENT: Dict[str, Callable[[Dict[str, Any]], str]] = {
    BLOCK_CHILD_PAGE: lambda data: data.get("title", ""),
    "image": _image_url,
    "equation": lambda data: data.get("expression", ""),
    "bookmark": lambda data: data.get("url", ""),
}


class NotionClient:
    """
    Thin wrapper over ``notion_client.Client``.

    Every request is preceded by a fixed delay; the Notion API allows about
    three requests per second per integration.
    """

    def __init__(self, api_key: str, rate_limit_delay: float = 0.35):
        """
        Initialize Notion client.

        Args:
            api_key: Notion integration API key
            rate_limit_delay: Seconds to wait before each request
        """
        self.client = Client(auth=api_key)
        self.rate_limit_delay = rate_limit_delay
        self.logger = logging.getLogger(__name__)

    def _rate_limit(self) -> None:
        if self.rate_limit_delay > 0:
            time.sleep(self.rate_limit_delay)

    def get_page(self, page_id: str) -> Dict[str, Any]:
        """Retrieve the raw page object (properties only, no content)."""
        self._rate_limit()
        return self.client.pages.retrieve(page_id=page_id)

    def get_page_title(self, page: Dict[str, Any]) -> str:
        """
        Title of a page object.

        Pages have exactly one property of type ``title``, whatever its name
        ("title" for plain pages, often "Name" for database rows).

        Args:
            page: Raw page object

        Returns:
            Title text, "" when the page has no title property
        """
        for prop in page.get("properties", {}).values():
            if prop.get("type") == "title":
                return _rich_text_to_str(prop.get("title", []))
        return ""

    def _iter_children(self, block_id: str) -> Iterator[Dict[str, Any]]:
        """Yield raw child blocks, following ``next_cursor`` until exhausted."""
        cursor = None
        has_more = True
        while has_more:
            self._rate_limit()
            response = self.client.blocks.children.list(
                block_id=block_id, start_cursor=cursor, page_size=PAGE_SIZE
            )
            yield from response.get("results", [])
            has_more = bool(response.get("has_more"))
            cursor = response.get("next_cursor")

    def get_blocks(self, block_id: str) -> List[NotionBlock]:
        """
        Top-level content blocks of a page, in order.

        Nested children (toggles, list item children) are not fetched.

        Args:
            block_id: Page id

        Returns:
            List of NotionBlock
        """
        return [self._to_notion_block(raw) for raw in self._iter_children(block_id)]

    def _to_notion_block(self, raw: Dict[str, Any]) -> NotionBlock:
        block_type = raw.get("type", "")
        data = raw.get(block_type, {})
        return NotionBlock(
            block_id=raw["id"],
            block_type=block_type,
            content=self._extract_block_content(raw),
            has_children=raw.get("has_children", False),
            is_plain=self._is_plain(data.get("rich_text", [])),
            language=data.get("language", "") if block_type == BLOCK_CODE else "",
        )

    @staticmethod
    def _is_plain(rich_text: List[Dict[str, Any]]) -> bool:
        """True for a single rich-text run with no formatting and no link."""
        if len(rich_text) != 1:
            return False
        run = rich_text[0]
        if run.get("type", "text") != "text" or run.get("href"):
            return False
        annotations = run.get("annotations", {})
        return not any(annotations.get(name) for name in FORMAT_ANNOTATIONS)

    def _extract_block_content(self, raw: Dict[str, Any]) -> str:
        """Plain text of a block; the URL for images and bookmarks."""
        block_type = raw.get("type", "")
        data = raw.get(block_type, {})
        if "rich_text" in data:
            return _rich_text_to_str(data["rich_text"])
        extract = _NON_TEXT_CONTENT.get(block_type)
        return extract(data) if extract else ""

    def get_source_page(self, page_id: str) -> SourcePage:
        """
        Fetch a page's title and top-level blocks.

        Args:
            page_id: Notion page id

        Returns:
            SourcePage
        """
        title = self.get_page_title(self.get_page(page_id))
        blocks = self.get_blocks(page_id)
        self.logger.debug(f"Fetched page {page_id} '{title}' ({len(blocks)} blocks)")
        return SourcePage(page_id=page_id, title=title, blocks=blocks)
