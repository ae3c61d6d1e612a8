"""Generates the whole static site from configured books."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..book.book import Book
from ..book.cache import AssetStore, OutputCache
from ..book.page import Page
from ..book.toc import gen_book_toc_search
from ..book.tree import PageTreeBuilder
from ..config.config_schema import AppConfig, BookConfig
from ..notion.loader import PageLoader
from ..notion.models import LoadProgress
from ..notion.source import PageSource
from ..render.markdown_renderer import MarkdownRenderer
from ..render.templates import TemplateRenderer
from .models import BuildStats
from .netlify import gen_netlify_headers, gen_netlify_redirects, gen_sitemap
from .pipeline import BuildPipeline, get_almost_max_procs

DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "templates"
STATIC_ASSETS = ["main.css", "app.js", "favicon.svg"]


class SiteGenerator:
    """
    Builds all books into ``build.output_dir``.

    Page trees are built first, one book after another. Then the pages of
    all books are rendered under a single concurrency ceiling. A book's TOC
    script is generated once all of its pages are rendered, and the
    site-wide files once all books are done.
    """

    def __init__(
        self,
        config: AppConfig,
        source: PageSource,
        renderer: Optional[MarkdownRenderer] = None,
        templates: Optional[TemplateRenderer] = None,
    ):
        """
        Initialize generator.

        Args:
            config: Application configuration
            source: Where pages are fetched from
            renderer: Markdown renderer (default: MarkdownRenderer())
            templates: Template renderer (default: bundled templates)
        """
        self.config = config
        self.source = source
        self.renderer = renderer or MarkdownRenderer()
        self.templates = templates or TemplateRenderer(config.build.template_dir)
        self.output_dir = Path(config.build.output_dir)
        self.static_dir = Path(config.build.static_dir or DEFAULT_STATIC_DIR)
        self.assets = AssetStore(str(self.output_dir / "s"), url_prefix="/s")
        self.asset_urls: Dict[str, str] = {}
        self.stats = BuildStats()
        max_workers = config.build.max_workers or get_almost_max_procs(
            config.build.worker_reserve
        )
        self.pipeline = BuildPipeline(self.renderer, max_workers=max_workers, stats=self.stats)
        self.logger = logging.getLogger(__name__)

    def load_book(
        self,
        book_config: BookConfig,
        progress_callback: Optional[Callable[[LoadProgress], None]] = None,
    ) -> Book:
        """
        Load a book's pages from the source and build its page tree.

        Args:
            book_config: Book configuration
            progress_callback: Optional callback for load progress

        Returns:
            Book with root_page set

        Raises:
            InvariantViolation: If the page graph is broken
        """
        book = Book(
            title=book_config.title,
            dir=book_config.dir,
            start_page_id=book_config.start_page_id,
            title_long=book_config.title_long,
            cover_image=book_config.cover_image,
            default_lang=book_config.default_lang or "",
            url_prefix=self.config.site.url_prefix,
        )
        timer_start = time.monotonic()
        loader = PageLoader(self.source, progress_callback=progress_callback)
        builder = PageTreeBuilder(book, preview=self.config.build.preview)
        n_pages = builder.register_all(loader.load(book.start_page_id))
        builder.build()
        self.logger.info(
            f"Loaded {n_pages} pages of '{book.title}' in {time.monotonic() - timer_start:.2f}s"
        )
        return book

    def load_books(
        self,
        progress_callback: Optional[Callable[[LoadProgress], None]] = None,
    ) -> List[Book]:
        return [self.load_book(bc, progress_callback) for bc in self.config.books]

    def copy_static_assets(self) -> Dict[str, str]:
        """Copy shared css/js/icon files under content-addressed names."""
        for name in STATIC_ASSETS:
            self.asset_urls[name] = self.assets.copy(self.static_dir / name)
        return self.asset_urls

    def _write_file(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def page_dest_path(self, book: Book, page: Page) -> Path:
        dest_dir = book.dest_dir(str(self.output_dir))
        if page is book.root_page:
            return dest_dir / "index.html"
        return dest_dir / page.file_name

    def write_page(self, book: Book, page: Page) -> Path:
        html = self.templates.render_page(
            book, page, self.asset_urls, preview=self.config.build.preview
        )
        path = self.page_dest_path(book, page)
        self._write_file(path, html)
        return path

    async def gen_book(self, book: Book) -> None:
        """
        Render and write all pages of a book, plus its TOC script.

        Args:
            book: Book with a built page tree
        """
        cache = OutputCache(
            str(book.output_cache_dir(self.config.build.cache_dir)),
            enabled=self.config.build.use_output_cache,
        )
        failed = await self.pipeline.render_book_pages(book, cache)

        app_js = (self.static_dir / "app.js").read_bytes()
        gen_book_toc_search(
            book,
            self.assets,
            app_js,
            minify=self.config.build.minify,
            preview=self.config.build.preview,
        )

        pages = [p for p in book.all_pages() if p not in failed]
        write_failed = await self.pipeline.run_bounded(pages, lambda page: self.write_page(book, page))
        self.stats.pages_rendered -= len(write_failed)

        self._write_file(
            book.dest_dir(str(self.output_dir)) / "404.html",
            self.templates.render_template("404.html", book=book, assets=self.asset_urls),
        )
        self.stats.books_built += 1
        self.logger.info(f"Generated book '{book.title}' ({cache.hits} cache hits)")

    async def generate(self, books: List[Book]) -> BuildStats:
        """
        Generate the site for already loaded books.

        Args:
            books: Books returned by load_books()

        Returns:
            BuildStats; render failures are listed in stats.errors
        """
        timer_start = time.monotonic()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.copy_static_assets()

        await asyncio.gather(*(self.gen_book(book) for book in books))

        self._write_file(
            self.output_dir / "index.html",
            self.templates.render_index(books, self.asset_urls),
        )
        gen_netlify_headers(str(self.output_dir))
        gen_netlify_redirects(books, str(self.output_dir))
        gen_sitemap(books, str(self.output_dir), self.config.site.base_url)

        self.logger.info(
            f"Used {self.pipeline.max_workers} workers, generated {len(books)} books "
            f"in {time.monotonic() - timer_start:.2f}s"
        )
        return self.stats
