"""
Table of contents and search data for a book.

Generates a javascript file that looks like:

    gBookToc = [
      [${is_expanded}, ${url}, ${parent_idx}, ${first_child_idx}, ${title}, ${synonym 1}, ...],
    ];

Entries are positional arrays to keep the file small. The front end does a
plain substring search over titles and synonyms.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List

from .book import Book
from .cache import AssetStore
from .page import Page

logger = logging.getLogger(__name__)

ITEM_IDX_IS_EXPANDED = 0
ITEM_IDX_URL = 1
ITEM_IDX_PARENT = 2
ITEM_IDX_FIRST_CHILD = 3
ITEM_IDX_TITLE = 4
ITEM_IDX_FIRST_SYNONYM = 5

TOC_VAR_NAME = "gBookToc"
DRAFT_SUFFIX = " [draft]"


@dataclass
class TocEntry:
    """One row of the navigation array."""

    url: str
    parent_idx: int
    title: str
    synonyms: List[str] = field(default_factory=list)
    is_expanded: bool = False
    first_child_idx: int = -1

    def to_list(self) -> List[Any]:
        return [
            self.is_expanded,
            self.url,
            self.parent_idx,
            self.first_child_idx,
            self.title,
            *self.synonyms,
        ]


def _add_page(toc: List[TocEntry], page: Page, parent_idx: int, preview: bool) -> None:
    uri = page.url_last_path
    title = page.title.strip()
    if preview and page.is_draft:
        title += DRAFT_SUFFIX
    toc.append(TocEntry(url=uri, parent_idx=parent_idx, title=title, synonyms=page.search_synonyms))
    page_idx = len(toc) - 1

    for heading in page.headings:
        heading_uri = f"{uri}#{heading.id}" if heading.id else ""
        toc.append(TocEntry(url=heading_uri, parent_idx=page_idx, title=heading.text))

    for sub_page in page.pages:
        _add_page(toc, sub_page, page_idx, preview)


def backfill_first_child(toc: List[TocEntry]) -> None:
    """Point each entry at its first child. The first child found wins."""
    for i, entry in enumerate(toc):
        if entry.parent_idx == -1:
            continue
        parent = toc[entry.parent_idx]
        if parent.first_child_idx == -1:
            parent.first_child_idx = i


def build_toc(book: Book, preview: bool = False) -> List[TocEntry]:
    """
    Flatten a book into TOC entries.

    Chapters come in declared order; each is followed by its headings and
    then, recursively, by its sub-pages and their headings. Page headings
    must already be filled in by the render step.

    Args:
        book: Built and rendered book
        preview: Mark draft pages in titles

    Returns:
        Entries with parent and first-child indexes resolved
    """
    toc: List[TocEntry] = []
    for chapter in book.chapters:
        _add_page(toc, chapter, -1, preview)
    backfill_first_child(toc)
    return toc


def serialize_toc(toc: List[TocEntry], minify: bool = True) -> str:
    data = [entry.to_list() for entry in toc]
    if minify:
        s = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    else:
        s = json.dumps(data, indent=2, ensure_ascii=False)
    return f"{TOC_VAR_NAME} = {s};"


def gen_book_toc_search(
    book: Book,
    assets: AssetStore,
    app_js: bytes,
    minify: bool = True,
    preview: bool = False,
) -> str:
    """
    Write the book's search script: TOC data followed by the app script.

    Sets ``book.toc_data`` and ``book.app_js_url``.

    Args:
        book: Built and rendered book
        assets: Store for content-addressed files
        app_js: Content of the app script template
        minify: Write compact JSON
        preview: Mark draft pages in titles

    Returns:
        URL of the script
    """
    toc = build_toc(book, preview=preview)
    book.toc_data = (serialize_toc(toc, minify=minify) + "\n").encode("utf-8")
    book.app_js_url = assets.write(f"app-{book.dir}.js", book.toc_data + app_js)
    logger.info(f"Generated toc for '{book.title}': {len(toc)} items, {book.app_js_url}")
    return book.app_js_url
