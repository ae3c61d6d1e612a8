"""Page sources: where raw pages of a book come from."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from notion_client import APIResponseError

from ..errors import PageNotFoundError
from .client import NotionClient
from .models import SourcePage, normalize_id

logger = logging.getLogger(__name__)


class PageSource(ABC):
    """
    Base class for page sources.

    A page source returns a page's title and ordered content blocks for a
    page id. Sub-page references are blocks of type ``child_page`` whose
    ``block_id`` is the id of the referenced page.
    """

    @abstractmethod
    def get_page(self, page_id: str) -> SourcePage:
        """
        Fetch a page.

        Args:
            page_id: Page id, dashed or not

        Returns:
            SourcePage

        Raises:
            PageNotFoundError: If the source has no such page
        """
        pass


class NotionPageSource(PageSource):
    """Fetches pages live from the Notion API."""

    def __init__(self, client: NotionClient):
        self.client = client

    def get_page(self, page_id: str) -> SourcePage:
        try:
            return self.client.get_source_page(page_id)
        except APIResponseError as e:
            logger.debug(f"Notion API error for {page_id}: {e}")
            raise PageNotFoundError(page_id) from e


class DirectoryPageSource(PageSource):
    """
    Reads pages from a directory of JSON files, one ``<id>.json`` per page.

    This is the format written by CachingPageSource, so a directory filled
    during one online build can drive later offline builds.
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, page_id: str) -> Path:
        return self.directory / f"{normalize_id(page_id)}.json"

    def get_page(self, page_id: str) -> SourcePage:
        path = self.path_for(page_id)
        if not path.exists():
            raise PageNotFoundError(page_id)
        with open(path, "r", encoding="utf-8") as f:
            return SourcePage.from_dict(json.load(f))


class CachingPageSource(PageSource):
    """Wraps another source and saves every fetched page as JSON."""

    def __init__(self, inner: PageSource, cache_dir: str):
        self.inner = inner
        self.store = DirectoryPageSource(cache_dir)

    def get_page(self, page_id: str) -> SourcePage:
        page = self.inner.get_page(page_id)
        try:
            self._save(page_id, page)
        except OSError as e:
            logger.warning(f"Failed to cache page {page_id}: {e}")
        return page

    def _save(self, page_id: str, page: SourcePage) -> None:
        path = self.store.path_for(page_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(page.to_dict(), f, indent=2)
        os.replace(tmp_path, path)
