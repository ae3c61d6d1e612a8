"""Bounded-concurrency rendering of a book's pages."""

import asyncio
import json
import logging
import os
from typing import Callable, List, Optional

from ..book.book import Book
from ..book.cache import OutputCache, page_fingerprint
from ..book.page import HeadingInfo, Page
from ..errors import PageRenderError
from ..render.markdown_renderer import MarkdownRenderer, RenderResult
from .models import BuildStats


def get_almost_max_procs(reserve: int = 2) -> int:
    """
    Number of workers to use: all CPUs but a few, at least one.

    Args:
        reserve: CPUs left for other programs

    Returns:
        Worker count
    """
    n_procs = (os.cpu_count() or 1) - reserve
    if n_procs < 1:
        return 1
    return n_procs


def encode_render(result: RenderResult) -> bytes:
    data = {
        "html": result.html,
        "headings": [[h.text, h.id] for h in result.headings],
    }
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def decode_render(payload: bytes) -> RenderResult:
    data = json.loads(payload.decode("utf-8"))
    return RenderResult(
        html=data["html"],
        headings=[HeadingInfo(text=text, id=id) for text, id in data["headings"]],
    )


class BuildPipeline:
    """
    Runs per-page work under a fixed concurrency ceiling.

    Each task takes a slot from a semaphore shared by all books, runs its
    blocking work in a worker thread and gives the slot back. A failing page
    is recorded in the stats and does not stop its siblings.
    """

    def __init__(
        self,
        renderer: MarkdownRenderer,
        max_workers: Optional[int] = None,
        stats: Optional[BuildStats] = None,
    ):
        """
        Initialize pipeline.

        Args:
            renderer: Markdown renderer, shared by all workers
            max_workers: Concurrency ceiling (default: CPUs minus 2, at least 1)
            stats: Stats object failures and counts are recorded in
        """
        self.renderer = renderer
        self.max_workers = max_workers or get_almost_max_procs()
        self.stats = stats or BuildStats()
        self.logger = logging.getLogger(__name__)
        self._semaphore: Optional[asyncio.Semaphore] = None

    @property
    def semaphore(self) -> asyncio.Semaphore:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_workers)
        return self._semaphore

    async def run_bounded(
        self,
        pages: List[Page],
        work: Callable[[Page], object],
    ) -> List[Page]:
        """
        Run work(page) for every page, at most max_workers at a time.

        Args:
            pages: Pages to process
            work: Blocking function, called in a worker thread

        Returns:
            Pages whose work raised, in input order
        """

        async def run_one(page: Page) -> bool:
            async with self.semaphore:
                try:
                    await asyncio.to_thread(work, page)
                    return True
                except Exception as e:
                    error = PageRenderError(page.notion_id, page.page_title, e)
                    self.stats.pages_failed += 1
                    self.stats.errors.append(error)
                    self.logger.error(f"Failed to render {error}")
                    return False

        results = await asyncio.gather(*(run_one(page) for page in pages))
        return [page for page, ok in zip(pages, results) if not ok]

    def render_page(self, book: Book, page: Page, cache: Optional[OutputCache] = None) -> bool:
        """
        Fill in a page's body_html and headings, from cache when possible.

        Args:
            book: Book the page belongs to
            page: Page to render
            cache: Rendered-page cache, or None to always render

        Returns:
            True if the result came from the cache
        """
        fingerprint = page_fingerprint(page, book.default_lang, self.renderer.version)
        result = None
        if cache is not None:
            entry = cache.get(page.notion_id, fingerprint)
            if entry is not None:
                try:
                    result = decode_render(entry.payload)
                except (ValueError, KeyError, TypeError) as e:
                    self.logger.warning(f"Ignoring bad cache entry for {page.notion_id}: {e}")

        from_cache = result is not None
        if result is None:
            result = self.renderer.render_blocks(page.blocks, book.default_lang)
            if cache is not None:
                cache.put(page.notion_id, fingerprint, encode_render(result))

        page.body_html = result.html
        page.headings = result.headings
        return from_cache

    async def render_book_pages(
        self, book: Book, cache: Optional[OutputCache] = None
    ) -> List[Page]:
        """
        Render all pages of a book.

        Returns when every page has been attempted.

        Args:
            book: Built book
            cache: Rendered-page cache for the book

        Returns:
            Pages that failed to render
        """
        pages = book.all_pages()
        from_cache: List[Page] = []

        def work(page: Page) -> None:
            if self.render_page(book, page, cache):
                from_cache.append(page)

        failed = await self.run_bounded(pages, work)
        self.stats.pages_rendered += len(pages) - len(failed)
        self.stats.pages_from_cache += len(from_cache)
        self.logger.info(
            f"Rendered {len(pages) - len(failed)} pages of '{book.title}' "
            f"({len(from_cache)} from cache, {len(failed)} failed)"
        )
        return failed
