"""Tests for the bounded rendering pipeline."""

import threading
import time

import pytest

from bookgen.book.book import Book
from bookgen.book.cache import OutputCache, page_fingerprint
from bookgen.book.page import HeadingInfo, Page
from bookgen.book.tree import PageTreeBuilder
from bookgen.notion.models import NotionBlock
from bookgen.render.markdown_renderer import MarkdownRenderer, RenderResult
from bookgen.site.models import BuildStats
from bookgen.site.pipeline import (
    BuildPipeline,
    decode_render,
    encode_render,
    get_almost_max_procs,
)


def load_book(pages):
    book = Book(title="Go", dir="go", start_page_id="root")
    builder = PageTreeBuilder(book)
    builder.register_all(pages)
    builder.build()
    return book


class FailingRenderer(MarkdownRenderer):
    """Renderer that fails for blocks containing a marker."""

    def render_blocks(self, blocks, default_lang=""):
        if any("BOOM" in b.content for b in blocks):
            raise RuntimeError("boom")
        return super().render_blocks(blocks, default_lang)


def test_get_almost_max_procs(monkeypatch):
    monkeypatch.setattr("os.cpu_count", lambda: 8)
    assert get_almost_max_procs() == 6
    assert get_almost_max_procs(reserve=10) == 1


def test_encode_decode_render():
    result = RenderResult(html="<p>x</p>", headings=[HeadingInfo("A", "a")])
    assert decode_render(encode_render(result)) == result


class TestBuildPipeline:
    """Tests for BuildPipeline."""

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        pipeline = BuildPipeline(MarkdownRenderer(), max_workers=2)
        lock = threading.Lock()
        running = 0
        peak = 0

        def work(page):
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.02)
            with lock:
                running -= 1

        pages = [Page(notion_id=str(i), title=str(i)) for i in range(8)]
        failed = await pipeline.run_bounded(pages, work)

        assert failed == []
        assert peak <= 2

    @pytest.mark.asyncio
    async def test_failures_collected(self):
        stats = BuildStats()
        pipeline = BuildPipeline(MarkdownRenderer(), max_workers=4, stats=stats)
        done = []

        def work(page):
            if page.notion_id == "bad":
                raise ValueError("broken")
            done.append(page.notion_id)

        pages = [Page(notion_id=i, title=i) for i in ("a", "bad", "c")]
        failed = await pipeline.run_bounded(pages, work)

        assert [p.notion_id for p in failed] == ["bad"]
        assert sorted(done) == ["a", "c"]
        assert stats.pages_failed == 1
        assert not stats.ok
        assert stats.errors[0].page_id == "bad"
        assert isinstance(stats.errors[0].cause, ValueError)

    @pytest.mark.asyncio
    async def test_render_book_pages(self, sample_pages):
        book = load_book(sample_pages)
        stats = BuildStats()
        pipeline = BuildPipeline(MarkdownRenderer(), max_workers=2, stats=stats)

        failed = await pipeline.render_book_pages(book)

        install = book.id_to_page["install"]
        assert failed == []
        assert stats.pages_rendered == 3
        assert [h.text for h in install.headings] == ["Linux", "Mac"]
        assert '<code class="language-shell">' in install.body_html

    @pytest.mark.asyncio
    async def test_one_failing_page_does_not_stop_others(self, sample_pages):
        sample_pages[2].blocks.append(
            NotionBlock(block_id="x", block_type="paragraph", content="BOOM")
        )
        book = load_book(sample_pages)
        stats = BuildStats()
        pipeline = BuildPipeline(FailingRenderer(), max_workers=2, stats=stats)

        failed = await pipeline.render_book_pages(book)

        assert [p.notion_id for p in failed] == ["install"]
        assert stats.pages_rendered == 2
        assert book.id_to_page["intro"].body_html

    @pytest.mark.asyncio
    async def test_cache_transparency(self, sample_pages, tmp_path):
        """Cold and warm builds give the same output."""
        cold_book = load_book(sample_pages)
        cold_stats = BuildStats()
        await BuildPipeline(MarkdownRenderer(), stats=cold_stats).render_book_pages(
            cold_book, OutputCache(str(tmp_path))
        )

        warm_book = load_book(sample_pages)
        warm_stats = BuildStats()
        warm_cache = OutputCache(str(tmp_path))
        await BuildPipeline(MarkdownRenderer(), stats=warm_stats).render_book_pages(
            warm_book, warm_cache
        )

        assert cold_stats.pages_from_cache == 0
        assert warm_stats.pages_from_cache == 3
        assert warm_cache.hits == 3
        for page_id, cold_page in cold_book.id_to_page.items():
            warm_page = warm_book.id_to_page[page_id]
            assert warm_page.body_html == cold_page.body_html
            assert warm_page.headings == cold_page.headings

    @pytest.mark.asyncio
    async def test_changed_page_rendered_again(self, sample_pages, tmp_path):
        await BuildPipeline(MarkdownRenderer()).render_book_pages(
            load_book(sample_pages), OutputCache(str(tmp_path))
        )
        sample_pages[1].blocks[1].content = "Hello again"
        book = load_book(sample_pages)
        stats = BuildStats()

        await BuildPipeline(MarkdownRenderer(), stats=stats).render_book_pages(
            book, OutputCache(str(tmp_path))
        )

        assert stats.pages_from_cache == 2
        assert "Hello again" in book.id_to_page["intro"].body_html

    def test_bad_cache_payload_rerenders(self, sample_pages, tmp_path):
        book = load_book(sample_pages)
        page = book.id_to_page["intro"]
        cache = OutputCache(str(tmp_path))
        pipeline = BuildPipeline(MarkdownRenderer())
        fingerprint = page_fingerprint(page, book.default_lang, pipeline.renderer.version)
        cache.put(page.notion_id, fingerprint, b"not json")

        assert pipeline.render_page(book, page, cache) is False
        assert "Hello" in page.body_html
