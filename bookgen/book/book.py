"""A book: one root page, its id index and per-build derived data."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

from .page import Page

logger = logging.getLogger(__name__)


class Book:
    """
    State of one book for one build invocation.

    Nothing here outlives the build; only the on-disk output cache does.
    """

    def __init__(
        self,
        title: str,
        dir: str,
        start_page_id: str,
        title_long: Optional[str] = None,
        cover_image: Optional[str] = None,
        default_lang: str = "",
        url_prefix: str = "/essential",
    ):
        """
        Initialize book.

        Args:
            title: Short title, e.g. "Go"
            dir: Directory and URL name, e.g. "go"
            start_page_id: Id of the root page
            title_long: Long title, e.g. "Essential Go". Taken from the root
                page title when not given.
            cover_image: File name of the cover image
            default_lang: Default language for code blocks
            url_prefix: URL path all books live under
        """
        self.title = title
        self.dir = dir
        self.start_page_id = start_page_id
        self.title_long = title_long or ""
        self.cover_image = cover_image
        self.default_lang = default_lang or title.lower()
        self.url_prefix = url_prefix

        self.root_page: Optional[Page] = None
        self.id_to_page: Dict[str, Page] = {}
        self._cached_pages: Optional[List[Page]] = None

        # generated toc javascript data
        self.toc_data: bytes = b""
        # url of combined toc data and app.js
        self.app_js_url: str = ""

    @property
    def chapters(self) -> List[Page]:
        """Top-level chapters."""
        if self.root_page is None:
            return []
        return self.root_page.pages

    def invalidate_pages(self) -> None:
        self._cached_pages = None

    def all_pages(self) -> List[Page]:
        """
        All pages of the book, root first, breadth-first.

        Memoized until invalidate_pages() is called.
        """
        if self._cached_pages is not None:
            return self._cached_pages
        if self.root_page is None:
            return []
        seen: Set[Page] = set()
        pages: List[Page] = []
        queue = [self.root_page]
        curr = 0
        while curr < len(queue):
            page = queue[curr]
            curr += 1
            if page in seen:
                continue
            seen.add(page)
            pages.append(page)
            queue.extend(page.pages)
        self._cached_pages = pages
        return pages

    @property
    def pages_count(self) -> int:
        """Number of pages, not counting the root page."""
        return max(len(self.all_pages()) - 1, 0)

    @property
    def chapters_count(self) -> int:
        return len(self.chapters)

    @property
    def url(self) -> str:
        return f"{self.url_prefix}/{self.dir}/"

    def dest_dir(self, output_dir: str) -> Path:
        """Directory where html files of this book are written."""
        return Path(output_dir) / self.url_prefix.strip("/") / self.dir

    def cache_dir(self, cache_root: str) -> Path:
        return Path(cache_root) / self.dir

    def output_cache_dir(self, cache_root: str) -> Path:
        """Rendered page cache."""
        return self.cache_dir(cache_root) / "output"

    def __repr__(self) -> str:
        return f"Book(title={self.title!r}, dir={self.dir!r})"
