"""Tests for page sources and the page loader."""

import json
from unittest.mock import Mock

import pytest
from notion_client import APIResponseError

from bookgen.errors import PageNotFoundError
from bookgen.notion.loader import PageLoader
from bookgen.notion.models import SourcePage, normalize_id
from bookgen.notion.source import CachingPageSource, DirectoryPageSource, NotionPageSource

from conftest import InMemoryPageSource, child, para


def test_normalize_id():
    assert normalize_id(" 12AB-34cd-56 ") == "12ab34cd56"


class TestDirectoryPageSource:
    """Tests for DirectoryPageSource."""

    def test_get_page(self, page_dir):
        page = DirectoryPageSource(str(page_dir)).get_page("intro")

        assert page.title == "Intro"
        assert [b.block_type for b in page.blocks] == ["paragraph", "paragraph", "child_page"]
        assert page.blocks[2].block_id == "install"

    def test_missing_page(self, page_dir):
        with pytest.raises(PageNotFoundError) as exc_info:
            DirectoryPageSource(str(page_dir)).get_page("nope")
        assert str(exc_info.value) == "Page not found: nope"

    def test_dashed_id(self, tmp_path):
        page = SourcePage(page_id="abcd", title="T", blocks=[])
        (tmp_path / "abcd.json").write_text(json.dumps(page.to_dict()))

        assert DirectoryPageSource(str(tmp_path)).get_page("AB-CD").title == "T"


class TestCachingPageSource:
    """Tests for CachingPageSource."""

    def test_saves_fetched_pages(self, sample_pages, tmp_path):
        inner = InMemoryPageSource(sample_pages)
        source = CachingPageSource(inner, str(tmp_path / "cache"))

        page = source.get_page("intro")

        saved = DirectoryPageSource(str(tmp_path / "cache")).get_page("intro")
        assert saved == page

    def test_missing_page_not_saved(self, tmp_path):
        source = CachingPageSource(InMemoryPageSource([]), str(tmp_path))

        with pytest.raises(PageNotFoundError):
            source.get_page("nope")
        assert list(tmp_path.iterdir()) == []


class TestNotionPageSource:
    """Tests for NotionPageSource."""

    def test_get_page(self):
        client = Mock()
        client.get_source_page.return_value = SourcePage(page_id="p", title="T")

        assert NotionPageSource(client).get_page("p").title == "T"

    def test_api_error_is_not_found(self):
        client = Mock()
        # constructor arguments differ between notion-client releases
        client.get_source_page.side_effect = APIResponseError.__new__(APIResponseError)

        with pytest.raises(PageNotFoundError):
            NotionPageSource(client).get_page("p")


class TestPageLoader:
    """Tests for PageLoader."""

    def test_loads_reachable_pages_depth_first(self, sample_pages):
        source = InMemoryPageSource(sample_pages)

        pages = list(PageLoader(source).load("root"))

        assert [p.page_id for p in pages] == ["root", "intro", "install", "drafty"]

    def test_each_page_fetched_once(self):
        pages = [
            SourcePage(page_id="root", title="R", blocks=[child("a"), child("a")]),
            SourcePage(page_id="a", title="A", blocks=[child("root")]),
        ]
        source = InMemoryPageSource(pages)

        loaded = list(PageLoader(source).load("root"))

        assert [p.page_id for p in loaded] == ["root", "a"]
        assert source.fetches == ["root", "a"]

    def test_missing_page_skipped(self):
        pages = [SourcePage(page_id="root", title="R", blocks=[child("gone"), child("a")]),
                 SourcePage(page_id="a", title="A", blocks=[para("x")])]
        progress = []

        loader = PageLoader(
            InMemoryPageSource(pages),
            progress_callback=lambda p: progress.append((p.pages_loaded, p.pages_failed)),
        )
        loaded = list(loader.load("root"))

        assert [p.page_id for p in loaded] == ["root", "a"]
        assert loader.progress.pages_failed == 1
        assert loader.progress.pages_loaded == 2
        assert progress[-1] == (2, 1)
