"""Shared fixtures for bookgen tests."""

import json
from pathlib import Path
from typing import Dict, List

import pytest

from bookgen.notion.models import NotionBlock, SourcePage


def para(text: str, block_id: str = "b", is_plain: bool = True) -> NotionBlock:
    return NotionBlock(block_id=block_id, block_type="paragraph", content=text, is_plain=is_plain)


def child(page_id: str, title: str = "") -> NotionBlock:
    return NotionBlock(block_id=page_id, block_type="child_page", content=title)


class InMemoryPageSource:
    """Page source backed by a dict, counting fetches."""

    def __init__(self, pages: List[SourcePage]):
        self.pages: Dict[str, SourcePage] = {p.page_id: p for p in pages}
        self.fetches: List[str] = []

    def get_page(self, page_id: str) -> SourcePage:
        from bookgen.errors import PageNotFoundError

        self.fetches.append(page_id)
        if page_id not in self.pages:
            raise PageNotFoundError(page_id)
        return self.pages[page_id]


@pytest.fixture
def sample_pages() -> List[SourcePage]:
    """
    A small book:

        Essential Go (root)
          Intro            $search: start, begin
            Install        (has two headings)
          Drafty           @draft
    """
    return [
        SourcePage(
            page_id="root",
            title="Essential Go",
            blocks=[para("Welcome"), child("intro"), child("drafty")],
        ),
        SourcePage(
            page_id="intro",
            title="Intro",
            blocks=[para("$search: start, begin"), para("Hello"), child("install")],
        ),
        SourcePage(
            page_id="install",
            title="Install",
            blocks=[
                NotionBlock(block_id="h1", block_type="heading_2", content="Linux"),
                para("apt install golang"),
                NotionBlock(block_id="h2", block_type="heading_2", content="Mac"),
                NotionBlock(block_id="c1", block_type="code", content="brew install go", language="shell"),
            ],
        ),
        SourcePage(page_id="drafty", title="Drafty", blocks=[para("@draft"), para("wip")]),
    ]


@pytest.fixture
def page_dir(tmp_path: Path, sample_pages: List[SourcePage]) -> Path:
    """Directory of page JSON files, as read by DirectoryPageSource."""
    directory = tmp_path / "pages"
    directory.mkdir()
    for page in sample_pages:
        (directory / f"{page.page_id}.json").write_text(json.dumps(page.to_dict()), encoding="utf-8")
    return directory
