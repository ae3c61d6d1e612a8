"""Notion integration: fetching book pages as block lists."""

from .models import NotionBlock, SourcePage, LoadProgress, normalize_id
from .client import NotionClient
from .source import PageSource, NotionPageSource, DirectoryPageSource, CachingPageSource
from .loader import PageLoader

__all__ = [
    "NotionBlock",
    "SourcePage",
    "LoadProgress",
    "normalize_id",
    "NotionClient",
    "PageSource",
    "NotionPageSource",
    "DirectoryPageSource",
    "CachingPageSource",
    "PageLoader",
]
