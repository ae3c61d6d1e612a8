"""Builds a book's page tree from loaded source pages."""

import logging
from typing import Dict, Iterable, List, Set

from ..errors import (
    CyclicReferenceError,
    DanglingReferenceError,
    MissingTitleError,
)
from ..notion.models import BLOCK_CHILD_PAGE, NotionBlock, SourcePage, normalize_id
from .book import Book
from .metadata import extract_metadata
from .page import Page


def clean_title(title: str) -> str:
    return " ".join(title.split())


class PageTreeBuilder:
    """
    Turns the pages registered in a book's id index into a tree.

    Building is a single-threaded depth-first walk: child order is the order
    of sub-page references in the parent's content, and the TOC relies on it.
    """

    def __init__(self, book: Book, preview: bool = False):
        """
        Initialize builder.

        Args:
            book: Book whose id index is filled by register()
            preview: Keep draft pages (flagged) instead of dropping them
        """
        self.book = book
        self.preview = preview
        self.logger = logging.getLogger(__name__)
        self._path: Set[Page] = set()  # pages on the current recursion path
        self._linked: Set[Page] = set()
        self._sub_pages: Dict[Page, List[Page]] = {}

    def register(self, source_page: SourcePage) -> Page:
        """
        Attach a source page to its node, allocating the node if needed.

        Args:
            source_page: Page from a page source

        Returns:
            The single Page node for this id
        """
        page_id = normalize_id(source_page.page_id)
        page = self.book.id_to_page.get(page_id)
        if page is None:
            page = Page(notion_id=page_id)
            self.book.id_to_page[page_id] = page
        page.title = clean_title(source_page.title)
        page.blocks = list(source_page.blocks)
        page.book_dir = self.book.dir
        page.url_prefix = self.book.url_prefix
        page.is_loaded = True
        return page

    def register_all(self, source_pages: Iterable[SourcePage]) -> int:
        n = 0
        for source_page in source_pages:
            self.register(source_page)
            n += 1
        return n

    def resolve(self, page_id: str) -> Page:
        """
        Look up the node for an id.

        Raises:
            DanglingReferenceError: If no page with this id was loaded
        """
        page_id = normalize_id(page_id)
        page = self.book.id_to_page.get(page_id)
        if page is None or not page.is_loaded:
            raise DanglingReferenceError(f"no sub page for id {page_id}", page_id)
        return page

    def build(self) -> Page:
        """
        Build the whole tree starting at the book's start page.

        Returns:
            Root page

        Raises:
            InvariantViolation: On dangling or cyclic references and
                untitled pages
        """
        self._path.clear()
        self._linked.clear()
        root = self.resolve(self.book.start_page_id)
        self.build_page(root)
        self.book.root_page = root
        if not self.book.title_long:
            self.book.title_long = root.title
        self.book.invalidate_pages()
        self.logger.info(
            f"Built book '{self.book.title}': {self.book.chapters_count} chapters, "
            f"{self.book.pages_count} pages"
        )
        return root

    def _prepare(self, page: Page) -> List[Page]:
        """
        Extract metadata and sub-page references of a page, once.

        Both are removed from the page content, so the result is kept for
        pages reached again through another reference.
        """
        sub_pages = self._sub_pages.get(page)
        if sub_pages is None:
            if not page.title:
                raise MissingTitleError(f"page {page.notion_id} has no title", page.notion_id)
            page.metadata = extract_metadata(page.blocks, page.notion_id)
            sub_pages = self._extract_sub_pages(page)
            self._sub_pages[page] = sub_pages
        return sub_pages

    def build_page(self, page: Page) -> Page:
        """Link the sub-pages of a page, recursing into them depth-first."""
        self._path.add(page)
        sub_pages = self._prepare(page)
        page.pages = []

        for sub_page in sub_pages:
            if sub_page in self._path:
                raise CyclicReferenceError(
                    f"page {sub_page.notion_id} '{sub_page.title}' references itself "
                    f"through page {page.notion_id} '{page.title}'",
                    sub_page.notion_id,
                )
            if sub_page in self._linked:
                self.logger.warning(
                    f"Page {sub_page.notion_id} '{sub_page.title}' is already a child of "
                    f"'{sub_page.parent.title if sub_page.parent else ''}', "
                    f"not adding it to '{page.title}'"
                )
                continue
            self._prepare(sub_page)
            if sub_page.is_draft and not self.preview:
                # built for validation only; pages under it stay free to be
                # linked by a public parent
                linked = set(self._linked)
                self.build_page(sub_page)
                self._linked = linked
                self.logger.info(f"Skipping draft page {sub_page.notion_id} '{sub_page.title}'")
                continue
            self.build_page(sub_page)
            self._linked.add(sub_page)
            sub_page.parent = page
            page.pages.append(sub_page)

        self._path.discard(page)
        return page

    def _extract_sub_pages(self, page: Page) -> List[Page]:
        """Resolve sub-page markers and remove them from the page content."""
        sub_pages: List[Page] = []
        kept: List[NotionBlock] = []
        for block in page.blocks:
            if block.block_type != BLOCK_CHILD_PAGE:
                kept.append(block)
                continue
            sub_pages.append(self.resolve(block.block_id))
        page.blocks[:] = kept
        return sub_pages
