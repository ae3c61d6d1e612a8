"""Crawls a page source starting at a book's start page."""

import logging
from typing import Callable, Iterator, Optional, Set

from ..errors import PageNotFoundError
from .models import BLOCK_CHILD_PAGE, LoadProgress, SourcePage, normalize_id
from .source import PageSource


class PageLoader:
    """Fetches every page reachable from a start page, each exactly once."""

    def __init__(
        self,
        source: PageSource,
        progress_callback: Optional[Callable[[LoadProgress], None]] = None,
    ):
        """
        Initialize loader.

        Args:
            source: Page source to fetch from
            progress_callback: Optional callback for progress updates
        """
        self.source = source
        self.progress_callback = progress_callback
        self.visited: Set[str] = set()
        self.logger = logging.getLogger(__name__)
        self.progress = LoadProgress()

    def _update_progress(self, **kwargs) -> None:
        """Update progress and call callback if set."""
        for key, value in kwargs.items():
            if hasattr(self.progress, key):
                setattr(self.progress, key, value)
        if self.progress_callback:
            self.progress_callback(self.progress)

    def load(self, start_page_id: str) -> Iterator[SourcePage]:
        """
        Load the start page and, recursively, all pages it references.

        Pages that cannot be fetched are logged and skipped. A reference to
        such a page is left dangling and is reported when the page tree is
        built.

        Args:
            start_page_id: Id of the book's root page

        Yields:
            SourcePage objects in depth-first source order
        """
        self.visited.clear()
        self.progress = LoadProgress()
        yield from self._load_page(start_page_id, depth=0)

    def _load_page(self, page_id: str, depth: int) -> Iterator[SourcePage]:
        page_id = normalize_id(page_id)
        if page_id in self.visited:
            self.logger.debug(f"Already loaded page: {page_id}")
            return
        self.visited.add(page_id)

        try:
            page = self.source.get_page(page_id)
        except PageNotFoundError as e:
            self.logger.error(f"Error loading page {page_id}: {e}")
            self._update_progress(pages_failed=self.progress.pages_failed + 1)
            return

        self._update_progress(
            total_pages_found=self.progress.total_pages_found + 1,
            pages_loaded=self.progress.pages_loaded + 1,
            current_page_title=page.title,
            current_depth=depth,
        )
        self.logger.debug(f"Loaded page: {page.title} (depth={depth})")

        yield page

        for block in page.blocks:
            if block.block_type == BLOCK_CHILD_PAGE:
                yield from self._load_page(block.block_id, depth=depth + 1)
